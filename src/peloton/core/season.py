"""Season rollover -- run a roster transition and persist its records.

The pure workflow in ``peloton.core.roster_transition`` computes the
archive, the transition record and the advanced roster. This module loads
the live roster, calls it, and writes the results through the repository:

    archive (from_season, frozen) -> transition record -> retag live roster

All three writes share the caller's session. If any of them fails the
session rolls back and ``TransitionPersistenceError`` carries the computed
records so the caller can retry ``persist_roster_transition`` without
recomputing.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import TypeAdapter
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from peloton.core.roster_transition import (
    archive_roster,
    prepare_transition,
    reset_season_counters,
)
from peloton.db.models import RosterArchiveRow, RosterTransitionRow
from peloton.models.roster import (
    PARTICIPANT_FIELDS,
    Member,
    RaceEvent,
    Rider,
    RosterArchive,
    RosterKind,
    RosterTransition,
    SeasonYear,
    StaffMember,
)

if TYPE_CHECKING:
    from peloton.core.event_bus import EventBus
    from peloton.db.models import RaceEventRow, RosterMemberRow
    from peloton.db.repository import Repository

logger = logging.getLogger(__name__)

_members_adapter: TypeAdapter[list[Member]] = TypeAdapter(list[Member])


class ArchiveExistsError(ValueError):
    """The roster already has an archive for the season being closed."""

    def __init__(self, kind: RosterKind, season: SeasonYear) -> None:
        super().__init__(f"{kind.value} roster for season {season} already archived")
        self.kind = kind
        self.season = season


class TransitionPersistenceError(Exception):
    """A transition was computed but could not be written.

    ``archive``, ``transition`` and ``members`` (the roster advanced to the
    new season) are the computed records, unchanged. Pass them back to
    ``persist_roster_transition`` to retry.
    """

    def __init__(
        self,
        archive: RosterArchive,
        transition: RosterTransition,
        members: list[Rider | StaffMember],
    ) -> None:
        super().__init__(
            f"Failed to persist {transition.kind} transition "
            f"{transition.from_season} -> {transition.to_season}"
        )
        self.archive = archive
        self.transition = transition
        self.members = members


def _as_utc(value: datetime) -> datetime:
    # SQLite DateTime columns drop the offset; stored values are UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# ---------------------------------------------------------------------------
# Row conversion
# ---------------------------------------------------------------------------


def member_from_row(row: RosterMemberRow) -> Rider | StaffMember:
    common = {
        "id": row.id,
        "first_name": row.first_name or "",
        "last_name": row.last_name or "",
        "is_active": row.is_active,
        "current_season": row.current_season,
    }
    if row.kind == RosterKind.STAFF:
        extra = {k: v for k, v in (("role", row.role), ("status", row.status)) if v}
        return StaffMember(**common, **extra)
    return Rider(**common, roster_role=row.roster_role)


def event_from_row(row: RaceEventRow) -> RaceEvent:
    participants = {
        field: ids for field, ids in (row.participants or {}).items() if field in PARTICIPANT_FIELDS
    }
    return RaceEvent(
        id=row.id,
        name=row.name or "",
        date=row.date,
        end_date=row.end_date,
        location=row.location or "",
        **participants,
    )


def archive_from_row(row: RosterArchiveRow) -> RosterArchive:
    return RosterArchive(
        kind=RosterKind(row.kind),
        season=row.season,
        members=_members_adapter.validate_python(row.members or []),
        archived_at=_as_utc(row.archived_at),
        total_count=row.total_count,
        active_count=row.active_count,
        inactive_count=row.inactive_count,
    )


def transition_from_row(row: RosterTransitionRow) -> RosterTransition:
    return RosterTransition(
        kind=RosterKind(row.kind),
        from_season=row.from_season,
        to_season=row.to_season,
        transition_date=_as_utc(row.transition_date),
        added=list(row.added or []),
        removed=list(row.removed or []),
        kept=list(row.kept or []),
    )


# ---------------------------------------------------------------------------
# Transition
# ---------------------------------------------------------------------------


async def load_roster(repo: Repository, kind: RosterKind) -> list[Rider | StaffMember]:
    return [member_from_row(row) for row in await repo.get_members(kind.value)]


async def load_events(repo: Repository) -> list[RaceEvent]:
    return [event_from_row(row) for row in await repo.get_race_events()]


async def persist_roster_transition(
    repo: Repository,
    archive: RosterArchive,
    transition: RosterTransition,
    members: list[Rider | StaffMember],
) -> None:
    """Write the archive, the transition record and the retagged roster.

    Raises:
        SQLAlchemyError: Propagated from the session; the caller owns rollback.
    """
    await repo.store_roster_archive(
        RosterArchiveRow(
            kind=archive.kind.value,
            season=archive.season,
            members=[m.model_dump(mode="json") for m in archive.members],
            archived_at=_as_utc(archive.archived_at),
            total_count=archive.total_count,
            active_count=archive.active_count,
            inactive_count=archive.inactive_count,
        )
    )
    await repo.store_roster_transition(
        RosterTransitionRow(
            kind=transition.kind.value,
            from_season=transition.from_season,
            to_season=transition.to_season,
            transition_date=_as_utc(transition.transition_date),
            added=list(transition.added),
            removed=list(transition.removed),
            kept=list(transition.kept),
        )
    )
    for member in members:
        await repo.set_member_season(member.id, member.current_season, member.is_active)


async def run_roster_transition(
    repo: Repository,
    kind: RosterKind,
    from_season: SeasonYear,
    to_season: SeasonYear,
    now: datetime,
    event_bus: EventBus | None = None,
) -> tuple[RosterArchive, RosterTransition]:
    """Archive ``from_season`` and move the live roster to ``to_season``.

    Args:
        repo: Repository bound to an active session.
        kind: Which roster to move.
        from_season: Season being closed and archived.
        to_season: Season the live roster moves to.
        now: Current time; stamps the archive and the transition record.
        event_bus: Optional bus for ``roster.archived`` / ``roster.transitioned``.

    Returns:
        The archive and the transition record, as persisted.

    Raises:
        ValueError: If ``to_season`` does not follow ``from_season``.
        ArchiveExistsError: If ``from_season`` is already archived for this
            roster, including when a concurrent transition wins the race.
        TransitionPersistenceError: If the records could not be written.
    """
    if to_season <= from_season:
        raise ValueError(
            f"Invalid season transition: {from_season} -> {to_season}. "
            "Target season must be later."
        )
    existing = await repo.get_roster_archive(kind.value, from_season)
    if existing is not None:
        raise ArchiveExistsError(kind, from_season)

    members = await load_roster(repo, kind)
    archive = archive_roster(members, from_season, kind, archived_at=now)
    transition = prepare_transition(
        members, from_season, to_season, kind, transition_date=now
    )
    advanced = reset_season_counters(members, to_season)

    try:
        await persist_roster_transition(repo, archive, transition, advanced)
    except SQLAlchemyError as exc:
        # A concurrent transition stored the same archive first
        if isinstance(exc, IntegrityError) and "roster_archives" in str(exc.orig):
            logger.warning(
                "roster_archive_conflict kind=%s season=%s", kind.value, from_season
            )
            raise ArchiveExistsError(kind, from_season) from exc
        logger.error(
            "roster_transition_persist_failed kind=%s from=%s to=%s",
            kind.value,
            from_season,
            to_season,
        )
        raise TransitionPersistenceError(archive, transition, advanced) from exc

    logger.info(
        "roster_transitioned kind=%s from=%s to=%s kept=%d removed=%d",
        kind.value,
        from_season,
        to_season,
        len(transition.kept),
        len(transition.removed),
    )

    if event_bus:
        await event_bus.publish(
            "roster.archived",
            {
                "kind": kind.value,
                "season": archive.season,
                "total_count": archive.total_count,
                "active_count": archive.active_count,
                "inactive_count": archive.inactive_count,
            },
        )
        await event_bus.publish(
            "roster.transitioned",
            {
                "kind": kind.value,
                "from_season": from_season,
                "to_season": to_season,
                "kept": list(transition.kept),
                "removed": list(transition.removed),
            },
        )

    return archive, transition

"""Roster rollover between season years -- archives, transition deltas, stats.

All functions are pure data transformations over rider or staff rosters.
Inputs are never mutated: every function that changes a member returns a
copy. Persistence of the resulting records lives in ``peloton.core.season``.

Policy: everyone active is carried forward. Only members explicitly marked
``is_active=False`` are dropped; there is no implicit removal by age or
season mismatch.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime
from typing import TypeVar

from peloton.core.season_clock import (
    STAFF_TRANSITION_MONTH,
    TRANSITION_MONTH,
    current_season_year,
)
from peloton.models.roster import (
    DetailedSeasonStats,
    RaceEvent,
    Rider,
    RosterArchive,
    RosterKind,
    RosterMember,
    RosterTransition,
    SeasonStats,
    SeasonYear,
    StaffMember,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=RosterMember)

_MONTH_NAMES = {TRANSITION_MONTH: "October", STAFF_TRANSITION_MONTH: "November"}


def archive_roster(
    members: Sequence[Rider | StaffMember],
    season: SeasonYear,
    kind: RosterKind,
    archived_at: datetime | None = None,
) -> RosterArchive:
    """Freeze a roster as it stands for ``season``.

    Every member is deep-copied and stamped with ``current_season=season``,
    so later edits to the live roster never reach the archive.
    """
    snapshot = [m.model_copy(deep=True, update={"current_season": season}) for m in members]
    active = sum(1 for m in members if m.is_effectively_active)
    return RosterArchive(
        kind=kind,
        season=season,
        members=snapshot,
        archived_at=archived_at or datetime.now(UTC),
        total_count=len(members),
        active_count=active,
        inactive_count=len(members) - active,
    )


def prepare_transition(
    members: Sequence[RosterMember],
    from_season: SeasonYear,
    to_season: SeasonYear,
    kind: RosterKind,
    transition_date: datetime | None = None,
) -> RosterTransition:
    """Describe the move from ``from_season`` to ``to_season``.

    ``added`` is always empty here; new members are added to the live
    roster after the transition.
    """
    return RosterTransition(
        kind=kind,
        from_season=from_season,
        to_season=to_season,
        transition_date=transition_date or datetime.now(UTC),
        added=[],
        removed=[m.id for m in members if not m.is_effectively_active],
        kept=[m.id for m in members if m.is_effectively_active],
    )


def reset_season_counters(members: Sequence[M], new_season: SeasonYear) -> list[M]:
    """Advance every member to ``new_season``.

    Work-day counters are computed from events on demand, so starting them
    over only takes a new season tag. ``is_active`` is normalized to a bool.
    """
    return [
        m.model_copy(
            deep=True,
            update={"current_season": new_season, "is_active": m.is_effectively_active},
        )
        for m in members
    ]


def filter_for_season(members: Iterable[M], season: SeasonYear, now: date) -> list[M]:
    """Members belonging to ``season``.

    Untagged members belong to the current season only.
    """
    current = current_season_year(now)
    return [
        m
        for m in members
        if m.current_season == season or (m.current_season is None and season == current)
    ]


def active_for_current_season(members: Iterable[M], now: date) -> list[M]:
    current = current_season_year(now)
    return [
        m
        for m in members
        if m.current_season in (current, None) and m.is_effectively_active
    ]


def deactivate_for_season(member: M, season: SeasonYear) -> M:
    return member.model_copy(update={"is_active": False, "current_season": season})


def activate_for_season(member: M, season: SeasonYear) -> M:
    return member.model_copy(update={"is_active": True, "current_season": season})


def compute_season_stats(
    members: Iterable[RosterMember], season: SeasonYear, now: date
) -> SeasonStats:
    seasonal = filter_for_season(members, season, now)
    active = sum(1 for m in seasonal if m.is_effectively_active)
    return SeasonStats(
        total_count=len(seasonal),
        active_count=active,
        inactive_count=len(seasonal) - active,
    )


def _event_year(event: RaceEvent) -> int | None:
    try:
        return date.fromisoformat(event.date).year
    except ValueError:
        logger.warning("event_date_invalid event=%s date=%r", event.id, event.date)
        return None


def events_for_season(events: Iterable[RaceEvent], season: SeasonYear) -> list[RaceEvent]:
    """Events whose start date falls in calendar year ``season``."""
    return [e for e in events if _event_year(e) == season]


def event_duration_days(event: RaceEvent) -> int:
    """Inclusive day count of an event. A one-day event lasts 1 day.

    Raises:
        ValueError: If either date is malformed or the event ends before it starts.
    """
    start = date.fromisoformat(event.date)
    end = date.fromisoformat(event.end_date) if event.end_date else start
    if end < start:
        raise ValueError(f"event {event.id} ends before it starts")
    return (end - start).days + 1


def compute_work_days_for_season(
    member: RosterMember, events: Iterable[RaceEvent], season: SeasonYear
) -> int:
    """Days ``member`` is assigned to events starting in calendar year ``season``.

    A bad event record contributes zero days and is logged; it does not
    abort the total.
    """
    total = 0
    for event in events:
        if member.id not in event.participant_ids():
            continue
        try:
            if date.fromisoformat(event.date).year != season:
                continue
            total += event_duration_days(event)
        except ValueError:
            logger.warning(
                "work_days_event_skipped member=%s event=%s date=%r end_date=%r",
                member.id,
                event.id,
                event.date,
                event.end_date,
            )
    return total


def _group_key(member: RosterMember) -> tuple[str, str | None]:
    if isinstance(member, StaffMember):
        return member.role.value, member.status.value
    if isinstance(member, Rider):
        return member.roster_role or "principal", None
    return "autre", None


def compute_detailed_season_stats(
    members: Iterable[RosterMember],
    events: Sequence[RaceEvent],
    season: SeasonYear,
    now: date,
) -> DetailedSeasonStats:
    """Season stats with work days and breakdowns over active members.

    Staff are grouped by role and status; riders by roster role
    (principal or reserve).
    """
    seasonal = filter_for_season(members, season, now)
    active = [m for m in seasonal if m.is_effectively_active]

    total_work_days = sum(compute_work_days_for_season(m, events, season) for m in active)
    # Half-up rounding
    average = math.floor(total_work_days / len(active) + 0.5) if active else 0

    by_role: Counter[str] = Counter()
    by_status: Counter[str] = Counter()
    for m in active:
        role, status = _group_key(m)
        by_role[role] += 1
        if status is not None:
            by_status[status] += 1

    return DetailedSeasonStats(
        total_count=len(seasonal),
        active_count=len(active),
        inactive_count=len(seasonal) - len(active),
        total_work_days=total_work_days,
        average_work_days=average,
        by_role=dict(by_role),
        by_status=dict(by_status),
    )


def transition_summary(kind: RosterKind, from_season: SeasonYear, to_season: SeasonYear) -> str:
    """Plain-text summary shown before a transition is confirmed."""
    month = STAFF_TRANSITION_MONTH if kind == RosterKind.STAFF else TRANSITION_MONTH
    noun = "staff" if kind == RosterKind.STAFF else "rider"
    counter = "work-day" if kind == RosterKind.STAFF else "race-day"
    return (
        f"Moving the {noun} roster from season {from_season} to season {to_season}.\n"
        f"The {from_season} roster is archived and frozen.\n"
        f"All active {noun} members are kept for {to_season}.\n"
        f"{counter.capitalize()} counters start over for the new season.\n"
        f"Transition opens automatically on {_MONTH_NAMES[month]} 1."
    )

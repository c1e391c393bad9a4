"""Repository pattern for database access.

Wraps SQLAlchemy async sessions. Roster archives and transitions are
written once and never updated; roster members are the only mutable rows.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from peloton.db.models import (
    RaceEventRow,
    RosterArchiveRow,
    RosterMemberRow,
    RosterTransitionRow,
)


class Repository:
    """Async repository for all database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # --- Roster members ---

    async def create_member(
        self,
        kind: str,
        first_name: str = "",
        last_name: str = "",
        is_active: bool | None = None,
        current_season: int | None = None,
        role: str | None = None,
        status: str | None = None,
        roster_role: str | None = None,
        member_id: str | None = None,
    ) -> RosterMemberRow:
        row = RosterMemberRow(
            kind=kind,
            first_name=first_name,
            last_name=last_name,
            is_active=is_active,
            current_season=current_season,
            role=role,
            status=status,
            roster_role=roster_role,
        )
        if member_id:
            row.id = member_id
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_member(self, member_id: str) -> RosterMemberRow | None:
        return await self.session.get(RosterMemberRow, member_id)

    async def get_members(self, kind: str) -> list[RosterMemberRow]:
        """Return the whole live roster of one kind, oldest first."""
        stmt = (
            select(RosterMemberRow)
            .where(RosterMemberRow.kind == kind)
            .order_by(RosterMemberRow.created_at, RosterMemberRow.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def set_member_season(
        self,
        member_id: str,
        current_season: int | None,
        is_active: bool | None,
    ) -> RosterMemberRow | None:
        """Retag a member's season and activity flag."""
        row = await self.session.get(RosterMemberRow, member_id)
        if row is None:
            return None
        row.current_season = current_season
        row.is_active = is_active
        await self.session.flush()
        return row

    # --- Race events ---

    async def create_race_event(
        self,
        date: str,
        name: str = "",
        end_date: str | None = None,
        location: str = "",
        participants: dict[str, list[str]] | None = None,
        event_id: str | None = None,
    ) -> RaceEventRow:
        row = RaceEventRow(
            name=name,
            date=date,
            end_date=end_date,
            location=location,
            participants=participants or {},
        )
        if event_id:
            row.id = event_id
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_race_event(self, event_id: str) -> RaceEventRow | None:
        return await self.session.get(RaceEventRow, event_id)

    async def get_race_events(self) -> list[RaceEventRow]:
        """All race events ordered by start date."""
        stmt = select(RaceEventRow).order_by(RaceEventRow.date)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # --- Roster archives & transitions ---

    async def store_roster_archive(self, archive: RosterArchiveRow) -> RosterArchiveRow:
        """Persist a roster archive row."""
        self.session.add(archive)
        await self.session.flush()
        return archive

    async def get_roster_archive(self, kind: str, season: int) -> RosterArchiveRow | None:
        """Retrieve the archive of one roster for a given season."""
        stmt = select(RosterArchiveRow).where(
            RosterArchiveRow.kind == kind,
            RosterArchiveRow.season == season,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_roster_archives(self, kind: str | None = None) -> list[RosterArchiveRow]:
        """List archives, newest season first."""
        stmt = select(RosterArchiveRow).order_by(RosterArchiveRow.season.desc())
        if kind is not None:
            stmt = stmt.where(RosterArchiveRow.kind == kind)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def store_roster_transition(
        self, transition: RosterTransitionRow
    ) -> RosterTransitionRow:
        self.session.add(transition)
        await self.session.flush()
        return transition

    async def get_roster_transitions(self, kind: str | None = None) -> list[RosterTransitionRow]:
        """List transitions, most recent first."""
        stmt = select(RosterTransitionRow).order_by(
            RosterTransitionRow.transition_date.desc()
        )
        if kind is not None:
            stmt = stmt.where(RosterTransitionRow.kind == kind)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

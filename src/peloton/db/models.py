"""SQLAlchemy ORM models for the Peloton database.

Tables: roster_members (riders and staff), race_events, roster_archives,
roster_transitions. Archives and transitions are written once and never
updated.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.sqlite import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class RosterMemberRow(Base):
    """A rider or staff member on the live roster."""

    __tablename__ = "roster_members"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    kind: Mapped[str] = mapped_column(String(10), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), default="")
    last_name: Mapped[str] = mapped_column(String(100), default="")
    # NULL means active / untagged; see peloton.models.roster.RosterMember.
    is_active: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    current_season: Mapped[int | None] = mapped_column(Integer, nullable=True)
    role: Mapped[str | None] = mapped_column(String(30), nullable=True)
    status: Mapped[str | None] = mapped_column(String(30), nullable=True)
    roster_role: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    __table_args__ = (Index("ix_roster_members_kind_season", "kind", "current_season"),)


class RaceEventRow(Base):
    __tablename__ = "race_events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), default="")
    date: Mapped[str] = mapped_column(String(32), nullable=False)
    end_date: Mapped[str | None] = mapped_column(String(32), nullable=True)
    location: Mapped[str] = mapped_column(String(200), default="")
    # {field_name: [member ids]} for the participant fields of RaceEvent.
    participants: Mapped[dict] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))

    __table_args__ = (Index("ix_race_events_date", "date"),)


class RosterArchiveRow(Base):
    """Frozen snapshot of a roster for one season."""

    __tablename__ = "roster_archives"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    kind: Mapped[str] = mapped_column(String(10), nullable=False)
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    members: Mapped[list] = mapped_column(JSON, default=list)
    archived_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    total_count: Mapped[int] = mapped_column(Integer, default=0)
    active_count: Mapped[int] = mapped_column(Integer, default=0)
    inactive_count: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (UniqueConstraint("kind", "season", name="uq_roster_archive_season"),)


class RosterTransitionRow(Base):
    __tablename__ = "roster_transitions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    kind: Mapped[str] = mapped_column(String(10), nullable=False)
    from_season: Mapped[int] = mapped_column(Integer, nullable=False)
    to_season: Mapped[int] = mapped_column(Integer, nullable=False)
    transition_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    added: Mapped[list] = mapped_column(JSON, default=list)
    removed: Mapped[list] = mapped_column(JSON, default=list)
    kept: Mapped[list] = mapped_column(JSON, default=list)

    __table_args__ = (Index("ix_roster_transitions_kind", "kind", "from_season"),)

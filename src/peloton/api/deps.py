"""FastAPI dependency injection for database sessions, repository, and clock."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from peloton.core.event_bus import EventBus
from peloton.db.engine import create_session_factory
from peloton.db.repository import Repository
from peloton.models.roster import RosterKind


async def get_engine(request: Request) -> AsyncEngine:
    """Get the database engine from app state."""
    return request.app.state.engine


async def get_session(
    engine: Annotated[AsyncEngine, Depends(get_engine)],
) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session."""
    factory = create_session_factory(engine)
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:  # Re-raise after rollback
            await session.rollback()
            raise


async def get_repo(session: Annotated[AsyncSession, Depends(get_session)]) -> Repository:
    """Get a repository instance bound to the current session."""
    return Repository(session)


def get_now() -> datetime:
    """Request time. Tests override this to pin the season clock."""
    return datetime.now(UTC)


async def get_event_bus(request: Request) -> EventBus | None:
    return getattr(request.app.state, "event_bus", None)


def get_roster_kind(kind: str) -> RosterKind:
    """Resolve the ``{kind}`` path segment (``rider``/``riders``, ``staff``)."""
    try:
        return RosterKind({"riders": "rider"}.get(kind, kind))
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown roster '{kind}'") from exc


RepoDep = Annotated[Repository, Depends(get_repo)]
NowDep = Annotated[datetime, Depends(get_now)]
EventBusDep = Annotated[EventBus | None, Depends(get_event_bus)]
KindDep = Annotated[RosterKind, Depends(get_roster_kind)]

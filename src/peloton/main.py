"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from peloton.api.events import router as events_router
from peloton.api.notifications import router as notifications_router
from peloton.api.roster import router as roster_router
from peloton.api.seasons import router as seasons_router
from peloton.config import Settings
from peloton.core.event_bus import EventBus
from peloton.db.engine import create_engine
from peloton.db.models import Base

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: create engine and tables. Shutdown: dispose the engine."""
    settings: Settings = app.state.settings
    engine = create_engine(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    app.state.engine = engine
    app.state.event_bus = EventBus()
    logger.info("peloton_started env=%s team=%s", settings.peloton_env, settings.peloton_team_name)

    yield

    await engine.dispose()
    logger.info("peloton_stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the Peloton FastAPI application."""
    settings = settings or Settings()

    logging.basicConfig(
        level=getattr(logging, settings.peloton_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Peloton",
        version="0.1.0",
        description="Cycling team rosters and season-year transitions",
        docs_url="/docs" if settings.peloton_env != "production" else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.include_router(seasons_router)
    app.include_router(roster_router)
    app.include_router(events_router)
    app.include_router(notifications_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "env": settings.peloton_env}

    return app


app = create_app()

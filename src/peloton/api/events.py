"""Race event endpoints -- the calendar that work-day counts are computed from."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from peloton.api.deps import RepoDep
from peloton.core.roster_transition import events_for_season
from peloton.core.season import event_from_row, load_events
from peloton.models.roster import RaceEvent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"])


@router.post("", status_code=201)
async def create_event(body: RaceEvent, repo: RepoDep) -> dict:
    """Store a race event. The ``id`` in the body becomes the stored id."""
    if await repo.get_race_event(body.id) is not None:
        raise HTTPException(status_code=409, detail=f"Race event {body.id} already exists")
    row = await repo.create_race_event(
        date=body.date,
        name=body.name,
        end_date=body.end_date,
        location=body.location,
        participants=body.participants(),
        event_id=body.id,
    )
    logger.info("race_event_created id=%s date=%s", row.id, row.date)
    return {"data": event_from_row(row).model_dump(mode="json")}


@router.get("")
async def list_events(repo: RepoDep, season: int | None = None) -> dict:
    """All events, or those starting in calendar year ``season``."""
    events = await load_events(repo)
    if season is not None:
        events = events_for_season(events, season)
    return {"data": [e.model_dump(mode="json") for e in events]}

"""Season clock API endpoints -- current season, selectable years, status."""

from __future__ import annotations

from fastapi import APIRouter

from peloton.api.deps import NowDep
from peloton.core.season_clock import (
    available_season_years,
    current_season_year,
    is_in_season_transition_window,
    is_planning_year,
    planning_years,
    season_label,
    season_months,
    season_transition_status,
    should_prompt_roster_transition,
    should_prompt_staff_transition,
)

router = APIRouter(prefix="/api/seasons", tags=["seasons"])


@router.get("/current")
async def get_current_season(now: NowDep) -> dict:
    """The season the team is working on, and whether rollover prompts are due."""
    season = current_season_year(now)
    return {
        "data": {
            "season": season,
            "label": season_label(season, now),
            "in_transition_window": is_in_season_transition_window(now),
            "prompt_rider_transition": should_prompt_roster_transition(now),
            "prompt_staff_transition": should_prompt_staff_transition(now),
        },
    }


@router.get("/available")
async def get_available_seasons(now: NowDep) -> dict:
    return {"data": available_season_years(now)}


@router.get("/planning")
async def get_planning_seasons(now: NowDep) -> dict:
    return {"data": planning_years(now)}


@router.get("/{year}/status")
async def get_season_status(year: int, now: NowDep) -> dict:
    start, end = season_months(year)
    return {
        "data": {
            "season": year,
            "status": season_transition_status(year, now).value,
            "label": season_label(year, now),
            "is_planning_year": is_planning_year(year, now),
            "starts_on": start.isoformat(),
            "ends_on": end.isoformat(),
        },
    }

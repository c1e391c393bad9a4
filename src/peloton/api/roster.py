"""Roster API -- members by season, stats, work days, archives and transitions.

``{kind}`` is ``rider`` (or ``riders``) or ``staff``.
"""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from peloton.api.deps import EventBusDep, KindDep, NowDep, RepoDep
from peloton.core.roster_transition import (
    compute_detailed_season_stats,
    compute_season_stats,
    compute_work_days_for_season,
    filter_for_season,
    prepare_transition,
    transition_summary,
)
from peloton.core.season import (
    ArchiveExistsError,
    TransitionPersistenceError,
    archive_from_row,
    load_events,
    load_roster,
    member_from_row,
    run_roster_transition,
    transition_from_row,
)
from peloton.core.season_clock import current_season_year
from peloton.models.roster import RosterKind, StaffRole, StaffStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/roster", tags=["roster"])


class CreateMemberRequest(BaseModel):
    """Request body for adding a rider or staff member."""

    first_name: str
    last_name: str
    is_active: bool | None = None
    current_season: int | None = None
    role: StaffRole | None = None
    status: StaffStatus | None = None
    roster_role: Literal["principal", "reserve"] | None = None


class TransitionRequest(BaseModel):
    """Request body for moving a roster to the next season."""

    from_season: int
    to_season: int


@router.get("/{kind}")
async def list_roster(kind: KindDep, repo: RepoDep, now: NowDep, season: int | None = None) -> dict:
    """Members belonging to ``season`` (default: the current season)."""
    season = season if season is not None else current_season_year(now)
    members = filter_for_season(await load_roster(repo, kind), season, now)
    return {
        "data": [m.model_dump(mode="json") for m in members],
        "season": season,
    }


@router.post("/{kind}", status_code=201)
async def create_member(kind: KindDep, body: CreateMemberRequest, repo: RepoDep) -> dict:
    if kind == RosterKind.RIDER and (body.role or body.status):
        raise HTTPException(status_code=400, detail="role and status apply to staff only")
    if kind == RosterKind.STAFF and body.roster_role:
        raise HTTPException(status_code=400, detail="roster_role applies to riders only")

    row = await repo.create_member(
        kind=kind.value,
        first_name=body.first_name,
        last_name=body.last_name,
        is_active=body.is_active,
        current_season=body.current_season,
        role=body.role.value if body.role else None,
        status=body.status.value if body.status else None,
        roster_role=body.roster_role,
    )
    logger.info("roster_member_created kind=%s id=%s", kind.value, row.id)
    return {"data": member_from_row(row).model_dump(mode="json")}


@router.get("/{kind}/stats")
async def roster_stats(
    kind: KindDep,
    repo: RepoDep,
    now: NowDep,
    season: int | None = None,
    detailed: bool = False,
) -> dict:
    season = season if season is not None else current_season_year(now)
    members = await load_roster(repo, kind)
    if detailed:
        events = await load_events(repo)
        stats = compute_detailed_season_stats(members, events, season, now)
    else:
        stats = compute_season_stats(members, season, now)
    return {"data": stats.model_dump(), "season": season}


@router.get("/{kind}/archives")
async def list_archives(kind: KindDep, repo: RepoDep) -> dict:
    """Archive summaries, newest season first. Members are omitted."""
    rows = await repo.get_roster_archives(kind.value)
    return {
        "data": [
            archive_from_row(row).model_dump(mode="json", exclude={"members"})
            for row in rows
        ],
    }


@router.get("/{kind}/archives/{season}")
async def get_archive(kind: KindDep, season: int, repo: RepoDep) -> dict:
    row = await repo.get_roster_archive(kind.value, season)
    if row is None:
        raise HTTPException(status_code=404, detail=f"No {kind.value} archive for {season}")
    return {"data": archive_from_row(row).model_dump(mode="json")}


@router.get("/{kind}/transitions")
async def list_transitions(kind: KindDep, repo: RepoDep) -> dict:
    rows = await repo.get_roster_transitions(kind.value)
    return {"data": [transition_from_row(row).model_dump(mode="json") for row in rows]}


@router.get("/{kind}/transition/preview")
async def preview_transition(
    kind: KindDep,
    repo: RepoDep,
    now: NowDep,
    from_season: int,
    to_season: int,
) -> dict:
    """What a transition would keep and remove, without writing anything."""
    members = await load_roster(repo, kind)
    transition = prepare_transition(members, from_season, to_season, kind, transition_date=now)
    return {
        "data": {
            "summary": transition_summary(kind, from_season, to_season),
            "transition": transition.model_dump(mode="json"),
            "already_archived": (
                await repo.get_roster_archive(kind.value, from_season) is not None
            ),
        },
    }


@router.post("/{kind}/transition")
async def transition_roster(
    kind: KindDep,
    body: TransitionRequest,
    repo: RepoDep,
    now: NowDep,
    event_bus: EventBusDep,
) -> dict:
    """Archive ``from_season`` and move the live roster to ``to_season``.

    On a write failure the computed records are returned with a 503 so the
    client can retry without recomputing.
    """
    try:
        archive, transition = await run_roster_transition(
            repo,
            kind,
            body.from_season,
            body.to_season,
            now=now,
            event_bus=event_bus,
        )
    except TransitionPersistenceError as exc:
        raise HTTPException(
            status_code=503,
            detail={
                "message": str(exc),
                "archive": exc.archive.model_dump(mode="json"),
                "transition": exc.transition.model_dump(mode="json"),
                "members": [m.model_dump(mode="json") for m in exc.members],
            },
        ) from exc
    except ArchiveExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {
        "data": {
            "archive": archive.model_dump(mode="json"),
            "transition": transition.model_dump(mode="json"),
        },
    }


@router.get("/{kind}/{member_id}/work-days")
async def member_work_days(
    kind: KindDep,
    member_id: str,
    repo: RepoDep,
    now: NowDep,
    season: int | None = None,
) -> dict:
    """Event days a member is assigned to in calendar year ``season``."""
    row = await repo.get_member(member_id)
    if row is None or row.kind != kind.value:
        raise HTTPException(status_code=404, detail=f"{kind.value} {member_id} not found")
    season = season if season is not None else current_season_year(now)
    days = compute_work_days_for_season(member_from_row(row), await load_events(repo), season)
    return {"data": {"member_id": member_id, "season": season, "work_days": days}}

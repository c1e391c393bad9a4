"""Seed a Peloton roster and calendar for demo purposes.

Usage:
    python scripts/demo_seed.py seed                   # Create riders, staff, events
    python scripts/demo_seed.py status                 # Print season and roster stats
    python scripts/demo_seed.py transition KIND FROM TO  # Archive FROM, move to TO

Uses a local SQLite database (demo_peloton.db).
"""

from __future__ import annotations

import asyncio
import os
import sys
from datetime import UTC, datetime

from peloton.core.roster_transition import compute_detailed_season_stats
from peloton.core.season import load_events, load_roster, run_roster_transition
from peloton.core.season_clock import current_season_year, season_label
from peloton.db.engine import create_engine, get_session
from peloton.db.models import Base
from peloton.db.repository import Repository
from peloton.models.roster import RosterKind

DEMO_DB = os.environ.get("DATABASE_URL", "sqlite+aiosqlite:///demo_peloton.db")

RIDERS = [
    ("r-1", "Lucie", "Marchand", "principal", True),
    ("r-2", "Chloe", "Garnier", "principal", True),
    ("r-3", "Ines", "Roussel", "reserve", True),
    ("r-4", "Margaux", "Leroy", "principal", False),
]

STAFF = [
    ("s-1", "Paul", "Bertin", "directeur_sportif", "salarie", True),
    ("s-2", "Nadia", "Faure", "mecano", "vacataire", True),
    ("s-3", "Hugo", "Lemoine", "assistant", "benevole", True),
    ("s-4", "Claire", "Dumas", "kine", "vacataire", False),
]

EVENTS = [
    {
        "event_id": "e-1",
        "name": "Tour de Bretagne Feminin",
        "date": "2025-04-24",
        "end_date": "2025-04-27",
        "location": "Rennes",
        "participants": {
            "selected_rider_ids": ["r-1", "r-2", "r-3"],
            "directeur_sportif_ids": ["s-1"],
            "mecano_ids": ["s-2"],
            "assistant_ids": ["s-3"],
        },
    },
    {
        "event_id": "e-2",
        "name": "GP de Plumelec",
        "date": "2025-06-01",
        "location": "Plumelec",
        "participants": {
            "selected_rider_ids": ["r-1", "r-2"],
            "directeur_sportif_ids": ["s-1"],
            "mecano_ids": ["s-2"],
        },
    },
    {
        "event_id": "e-3",
        "name": "Stage de cohesion",
        "date": "2026-01-12",
        "end_date": "2026-01-18",
        "location": "Calpe",
        "participants": {
            "selected_rider_ids": ["r-1", "r-2", "r-3"],
            "selected_staff_ids": ["s-1", "s-2", "s-3"],
        },
    },
]


async def setup() -> None:
    engine = create_engine(DEMO_DB)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with get_session(engine) as session:
        repo = Repository(session)
        for member_id, first, last, roster_role, active in RIDERS:
            await repo.create_member(
                kind=RosterKind.RIDER.value,
                first_name=first,
                last_name=last,
                roster_role=roster_role,
                is_active=active,
                member_id=member_id,
            )
        for member_id, first, last, role, status, active in STAFF:
            await repo.create_member(
                kind=RosterKind.STAFF.value,
                first_name=first,
                last_name=last,
                role=role,
                status=status,
                is_active=active,
                member_id=member_id,
            )
        for event in EVENTS:
            await repo.create_race_event(**event)

    print(f"Seeded {len(RIDERS)} riders, {len(STAFF)} staff, {len(EVENTS)} events.")
    await engine.dispose()


async def status() -> None:
    engine = create_engine(DEMO_DB)
    now = datetime.now(UTC)
    season = current_season_year(now)

    async with get_session(engine) as session:
        repo = Repository(session)
        events = await load_events(repo)
        print(season_label(season, now))
        for kind in RosterKind:
            members = await load_roster(repo, kind)
            stats = compute_detailed_season_stats(members, events, season, now)
            print(
                f"  {kind.value:<6} total={stats.total_count} active={stats.active_count} "
                f"inactive={stats.inactive_count} work_days={stats.total_work_days}"
            )
        for archive in await repo.get_roster_archives():
            print(f"  archive {archive.kind} {archive.season}: {archive.total_count} members")

    await engine.dispose()


async def transition(kind: str, from_season: int, to_season: int) -> None:
    engine = create_engine(DEMO_DB)
    async with get_session(engine) as session:
        repo = Repository(session)
        archive, record = await run_roster_transition(
            repo, RosterKind(kind), from_season, to_season, now=datetime.now(UTC)
        )
    print(
        f"Archived {archive.total_count} {kind} members for {from_season}; "
        f"kept {len(record.kept)}, removed {len(record.removed)}."
    )
    await engine.dispose()


def main() -> None:
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    cmd = sys.argv[1]
    if cmd == "seed":
        asyncio.run(setup())
    elif cmd == "status":
        asyncio.run(status())
    elif cmd == "transition" and len(sys.argv) == 5:
        asyncio.run(transition(sys.argv[2], int(sys.argv[3]), int(sys.argv[4])))
    else:
        print(f"Unknown command: {' '.join(sys.argv[1:])}")
        print(__doc__)
        sys.exit(1)


if __name__ == "__main__":
    main()

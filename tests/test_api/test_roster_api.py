"""Tests for roster, transition, archive and event endpoints."""

from datetime import UTC, datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError

from peloton.api.deps import get_now
from peloton.config import Settings
from peloton.core.event_bus import EventBus
from peloton.db.engine import create_engine, get_session
from peloton.db.models import Base
from peloton.db.repository import Repository
from peloton.main import create_app

NOW = datetime(2025, 11, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
async def app_client():
    """Create a test app with an in-memory database and httpx client."""
    settings = Settings(database_url="sqlite+aiosqlite:///:memory:", peloton_env="development")
    app = create_app(settings)

    engine = create_engine(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    app.state.engine = engine
    app.state.event_bus = EventBus()
    app.dependency_overrides[get_now] = lambda: NOW

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client, engine

    await engine.dispose()


async def _add_staff(client: AsyncClient, first: str, **extra) -> str:
    r = await client.post("/api/roster/staff", json={"first_name": first, "last_name": "X", **extra})
    assert r.status_code == 201
    return r.json()["data"]["id"]


class TestMembers:
    async def test_create_and_list(self, app_client):
        client, _ = app_client
        staff_id = await _add_staff(client, "Paul", role="mecano", status="salarie")

        r = await client.get("/api/roster/staff")
        assert r.status_code == 200
        body = r.json()
        assert body["season"] == 2026
        assert [m["id"] for m in body["data"]] == [staff_id]
        assert body["data"][0]["role"] == "mecano"
        assert body["data"][0]["kind"] == "staff"

    async def test_rider_alias_path(self, app_client):
        client, _ = app_client
        r = await client.post(
            "/api/roster/riders",
            json={"first_name": "Lucie", "last_name": "M", "roster_role": "reserve"},
        )
        assert r.status_code == 201
        assert r.json()["data"]["kind"] == "rider"

    async def test_unknown_roster_404(self, app_client):
        client, _ = app_client
        r = await client.get("/api/roster/mechanics")
        assert r.status_code == 404

    async def test_staff_fields_rejected_for_riders(self, app_client):
        client, _ = app_client
        r = await client.post(
            "/api/roster/rider", json={"first_name": "A", "last_name": "B", "role": "kine"}
        )
        assert r.status_code == 400

    async def test_season_filter(self, app_client):
        client, _ = app_client
        await _add_staff(client, "Old", current_season=2024)
        untagged = await _add_staff(client, "New")

        r = await client.get("/api/roster/staff", params={"season": 2024})
        assert [m["first_name"] for m in r.json()["data"]] == ["Old"]
        r = await client.get("/api/roster/staff", params={"season": 2026})
        assert [m["id"] for m in r.json()["data"]] == [untagged]


class TestStats:
    async def test_basic_stats(self, app_client):
        client, _ = app_client
        await _add_staff(client, "A", is_active=True)
        await _add_staff(client, "B", is_active=False)

        r = await client.get("/api/roster/staff/stats")
        assert r.json()["data"] == {"total_count": 2, "active_count": 1, "inactive_count": 1}

    async def test_detailed_stats_and_work_days(self, app_client):
        client, _ = app_client
        ds = await _add_staff(client, "Paul", role="directeur_sportif")
        r = await client.post(
            "/api/events",
            json={
                "id": "e-1",
                "name": "Tour de Bretagne",
                "date": "2026-04-24",
                "end_date": "2026-04-27",
                "directeur_sportif_ids": [ds],
            },
        )
        assert r.status_code == 201

        r = await client.get("/api/roster/staff/stats", params={"detailed": True})
        data = r.json()["data"]
        assert data["total_work_days"] == 4
        assert data["by_role"] == {"directeur_sportif": 1}

        r = await client.get(f"/api/roster/staff/{ds}/work-days", params={"season": 2026})
        assert r.json()["data"]["work_days"] == 4
        r = await client.get(f"/api/roster/staff/{ds}/work-days", params={"season": 2025})
        assert r.json()["data"]["work_days"] == 0

    async def test_work_days_unknown_member(self, app_client):
        client, _ = app_client
        r = await client.get("/api/roster/staff/nobody/work-days")
        assert r.status_code == 404


class TestTransition:
    async def test_preview_writes_nothing(self, app_client):
        client, _ = app_client
        await _add_staff(client, "A")
        await _add_staff(client, "B", is_active=False)

        r = await client.get(
            "/api/roster/staff/transition/preview",
            params={"from_season": 2025, "to_season": 2026},
        )
        data = r.json()["data"]
        assert "November 1" in data["summary"]
        assert len(data["transition"]["kept"]) == 1
        assert data["already_archived"] is False

        r = await client.get("/api/roster/staff/archives")
        assert r.json()["data"] == []

    async def test_transition_then_archive_readable(self, app_client):
        client, _ = app_client
        a = await _add_staff(client, "A", is_active=True)
        b = await _add_staff(client, "B", is_active=False)

        r = await client.post(
            "/api/roster/staff/transition", json={"from_season": 2025, "to_season": 2026}
        )
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["transition"]["kept"] == [a]
        assert data["transition"]["removed"] == [b]
        assert data["transition"]["added"] == []
        assert data["archive"]["total_count"] == 2

        r = await client.get("/api/roster/staff/archives")
        assert [x["season"] for x in r.json()["data"]] == [2025]
        summary = r.json()["data"][0]
        assert summary["archived_at"] == data["archive"]["archived_at"]
        assert "members" not in summary

        r = await client.get("/api/roster/staff/archives/2025")
        assert r.status_code == 200
        archive = r.json()["data"]
        assert archive["active_count"] == 1
        assert {m["current_season"] for m in archive["members"]} == {2025}

        r = await client.get("/api/roster/staff/transitions")
        assert len(r.json()["data"]) == 1

        r = await client.get("/api/roster/staff", params={"season": 2026})
        assert {m["id"] for m in r.json()["data"]} == {a, b}

    async def test_repeat_transition_conflicts(self, app_client):
        client, _ = app_client
        await _add_staff(client, "A")
        body = {"from_season": 2025, "to_season": 2026}

        assert (await client.post("/api/roster/staff/transition", json=body)).status_code == 200
        r = await client.post("/api/roster/staff/transition", json=body)
        assert r.status_code == 409

    async def test_archive_written_meanwhile_conflicts(self, app_client, monkeypatch):
        client, _ = app_client
        await _add_staff(client, "A")
        body = {"from_season": 2025, "to_season": 2026}
        assert (await client.post("/api/roster/staff/transition", json=body)).status_code == 200

        async def _not_yet_archived(self, kind, season):
            return None

        monkeypatch.setattr(Repository, "get_roster_archive", _not_yet_archived)

        r = await client.post("/api/roster/staff/transition", json=body)
        assert r.status_code == 409
        assert "already archived" in r.json()["detail"]

    async def test_backwards_transition_400(self, app_client):
        client, _ = app_client
        r = await client.post(
            "/api/roster/staff/transition", json={"from_season": 2026, "to_season": 2026}
        )
        assert r.status_code == 400

    async def test_missing_archive_404(self, app_client):
        client, _ = app_client
        r = await client.get("/api/roster/rider/archives/2019")
        assert r.status_code == 404

    async def test_persistence_failure_returns_records(self, app_client, monkeypatch):
        client, engine = app_client
        await _add_staff(client, "A")

        async def _fail(self, transition):
            raise SQLAlchemyError("disk full")

        monkeypatch.setattr(Repository, "store_roster_transition", _fail)

        r = await client.post(
            "/api/roster/staff/transition", json={"from_season": 2025, "to_season": 2026}
        )
        assert r.status_code == 503
        detail = r.json()["detail"]
        assert detail["archive"]["season"] == 2025
        assert len(detail["transition"]["kept"]) == 1
        assert [m["current_season"] for m in detail["members"]] == [2026]

        async with get_session(engine) as session:
            assert await Repository(session).get_roster_archives() == []


class TestEvents:
    async def test_list_by_season(self, app_client):
        client, _ = app_client
        for event_id, day in (("e-1", "2025-06-01"), ("e-2", "2026-01-12")):
            r = await client.post("/api/events", json={"id": event_id, "date": day})
            assert r.status_code == 201

        r = await client.get("/api/events")
        assert [e["id"] for e in r.json()["data"]] == ["e-1", "e-2"]
        r = await client.get("/api/events", params={"season": 2026})
        assert [e["id"] for e in r.json()["data"]] == ["e-2"]

    async def test_duplicate_id_conflicts(self, app_client):
        client, _ = app_client
        body = {"id": "e-1", "date": "2026-03-01"}

        assert (await client.post("/api/events", json=body)).status_code == 201
        r = await client.post("/api/events", json={**body, "name": "Renamed"})
        assert r.status_code == 409

        r = await client.get("/api/events")
        assert [e["name"] for e in r.json()["data"]] == [""]

"""Tests for the season clock endpoints."""

from datetime import UTC, datetime

import pytest
from httpx import ASGITransport, AsyncClient

from peloton.api.deps import get_now
from peloton.config import Settings
from peloton.main import create_app


def _client_for(now: datetime) -> AsyncClient:
    settings = Settings(database_url="sqlite+aiosqlite:///:memory:", peloton_env="development")
    app = create_app(settings)
    app.dependency_overrides[get_now] = lambda: now
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
async def client():
    async with _client_for(datetime(2025, 11, 15, 12, 0, tzinfo=UTC)) as c:
        yield c


class TestCurrentSeason:
    async def test_transition_window(self, client):
        r = await client.get("/api/seasons/current")
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["season"] == 2026
        assert data["in_transition_window"] is True
        assert data["label"] == "Season 2026 (transition active)"
        assert data["prompt_rider_transition"] is True
        assert data["prompt_staff_transition"] is True

    async def test_outside_window(self):
        async with _client_for(datetime(2025, 10, 20, tzinfo=UTC)) as c:
            data = (await c.get("/api/seasons/current")).json()["data"]
        assert data["prompt_rider_transition"] is True
        assert data["prompt_staff_transition"] is False


class TestSeasonLists:
    async def test_available(self, client):
        r = await client.get("/api/seasons/available")
        assert r.json()["data"] == [2028, 2027, 2026, 2025, 2024, 2023]

    async def test_planning(self, client):
        r = await client.get("/api/seasons/planning")
        assert r.json()["data"] == [2026, 2027, 2028, 2029]


class TestSeasonStatus:
    async def test_current_in_transition(self, client):
        data = (await client.get("/api/seasons/2026/status")).json()["data"]
        assert data["status"] == "transition"
        assert data["starts_on"] == "2025-10-01"
        assert data["ends_on"] == "2026-09-30"
        assert data["is_planning_year"] is True

    async def test_past(self, client):
        data = (await client.get("/api/seasons/2024/status")).json()["data"]
        assert data["status"] == "past"
        assert data["is_planning_year"] is False


class TestHealth:
    async def test_health(self, client):
        r = await client.get("/health")
        assert r.json() == {"status": "ok", "env": "development"}

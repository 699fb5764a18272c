"""
Health checks para orquestadores.

- /health y /health/live: liveness sin dependencias
- /health/db y /health/ready: SELECT 1 contra la base, 503 si falla
"""

from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from travel_booking.api.dependencies import get_session
from travel_booking.infrastructure.db.engine import build_sessionmaker
from travel_booking.main import app


@pytest.fixture
def override_session():
    def _override(session):
        async def _get_session():
            yield session

        app.dependency_overrides[get_session] = _get_session

    yield _override
    app.dependency_overrides.pop(get_session, None)


class TestLiveness:
    def test_health(self, client: TestClient):
        res = client.get("/health")
        assert res.status_code == 200
        assert res.json() == {"status": "ok", "service": "travel-booking-api"}

    def test_live(self, client: TestClient):
        assert client.get("/health/live").status_code == 200


class TestInMemoryMode:
    def test_db_reports_in_memory(self, client: TestClient):
        res = client.get("/health/db")
        assert res.status_code == 200
        assert res.json()["mode"] == "in_memory"

    def test_ready_reports_in_memory(self, client: TestClient):
        res = client.get("/health/ready")
        assert res.json() == {"status": "ready", "checks": {"database": "in_memory"}}


class TestDatabaseChecks:
    async def test_db_healthy(self, sql_engine, override_session):
        async with build_sessionmaker(sql_engine)() as session:
            override_session(session)
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
                res = await http.get("/health/db")

        assert res.status_code == 200
        assert res.json() == {"status": "healthy", "component": "database"}

    def test_db_unreachable(self, client: TestClient, override_session):
        session = AsyncMock()
        session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
        override_session(session)

        db = client.get("/health/db")
        ready = client.get("/health/ready")

        assert db.status_code == 503
        assert db.json()["status"] == "unhealthy"
        assert ready.status_code == 503
        assert ready.json() == {"status": "not_ready", "checks": {"database": "unhealthy"}}

"""Tests for the health endpoint and its caching."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from src.schoolops.core.health import reset_health_cache
from src.schoolops.main import create_app

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def clear_health_cache():
    """Reset health cache before each test."""
    reset_health_cache()
    yield
    reset_health_cache()


def fake_session(error: Exception | None = None):
    session = AsyncMock()
    if error is not None:
        session.execute.side_effect = error

    @asynccontextmanager
    async def get_session():
        yield session

    return get_session


def provider_client(reachable: bool) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if not reachable:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"name": "GoTrue"})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://identity")


async def get_health(provider_reachable=True, db_error=None, *, requests=1):
    app = create_app()
    app.state.identity_http_client = provider_client(provider_reachable)
    responses = []
    with patch("src.schoolops.core.health.get_session", fake_session(db_error)):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            for _ in range(requests):
                responses.append(await client.get("/health"))
    return responses


async def test_healthy():
    (response,) = await get_health()

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "healthy"
    assert data["identity_provider"] == "healthy"
    assert data["cached"] is False


async def test_provider_outage_is_degraded():
    (response,) = await get_health(provider_reachable=False)

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["identity_provider"].startswith("unreachable:")


async def test_database_outage_is_unhealthy():
    (response,) = await get_health(db_error=OSError("connection refused"))

    assert response.status_code == 503
    assert response.json()["database"] == "unhealthy: connection refused"


async def test_second_request_is_cached():
    first, second = await get_health(requests=2)

    assert first.json()["cached"] is False
    assert second.json()["cached"] is True
    assert second.json()["cache_age_seconds"] < 10

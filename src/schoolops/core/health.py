"""Health and metrics endpoints.

``/health`` reports the database (critical) and the identity provider
(non-critical: dry runs and record reads keep working without it). Results
are cached briefly so repeated health checks do not hammer either dependency.
"""

import secrets
import time
from typing import Any

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text

from src.schoolops.core.config import get_settings
from src.schoolops.core.db import get_session

HEALTH_CACHE_TTL = 10  # seconds

_cached_report: dict[str, Any] | None = None
_cached_at: float = 0


def reset_health_cache() -> None:
    """Reset health cache (for testing)."""
    global _cached_report, _cached_at
    _cached_report = None
    _cached_at = 0


async def _check_database() -> str:
    try:
        async with get_session() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        return f"unhealthy: {e!s}"
    return "healthy"


async def _check_identity_provider(client: httpx.AsyncClient) -> str:
    """Any HTTP answer from the provider counts as reachable."""
    try:
        await client.get("/health")
    except httpx.HTTPError as e:
        return f"unreachable: {e!s}"
    return "healthy"


def _overall_status(database: str, identity_provider: str) -> str:
    if database != "healthy":
        return "unhealthy"
    if identity_provider != "healthy":
        return "degraded"
    return "healthy"


def _respond(report: dict[str, Any]) -> JSONResponse:
    status_code = 503 if report["status"] == "unhealthy" else 200
    return JSONResponse(content=report, status_code=status_code)


def setup_health_endpoint(app: FastAPI) -> None:
    """Configure the health check endpoint."""

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        global _cached_report, _cached_at

        now = time.time()
        if _cached_report and (now - _cached_at) < HEALTH_CACHE_TTL:
            return _respond(
                {
                    **_cached_report,
                    "cached": True,
                    "cache_age_seconds": round(now - _cached_at, 1),
                }
            )

        database = await _check_database()
        identity_provider = await _check_identity_provider(
            request.app.state.identity_http_client
        )
        report = {
            "status": _overall_status(database, identity_provider),
            "database": database,
            "identity_provider": identity_provider,
            "cached": False,
            "timestamp": now,
        }

        _cached_report, _cached_at = report, now
        return _respond(report)


def setup_metrics(app: FastAPI) -> None:
    """Configure Prometheus metrics with optional API key protection."""
    settings = get_settings()
    instrumentator = Instrumentator().instrument(app)

    if settings.metrics_api_key:
        api_key_header = APIKeyHeader(name="X-Metrics-Key", auto_error=False)

        async def verify_metrics_key(
            api_key: str | None = Depends(api_key_header),
        ) -> None:
            if (
                api_key is None
                or settings.metrics_api_key is None
                or not secrets.compare_digest(api_key, settings.metrics_api_key)
            ):
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid or missing metrics API key",
                )

        instrumentator.expose(app, endpoint="/metrics", dependencies=[Depends(verify_metrics_key)])
    else:
        instrumentator.expose(app, endpoint="/metrics")

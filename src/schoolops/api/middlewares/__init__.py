"""Application middlewares."""

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.schoolops.core.config import Settings
from src.schoolops.core.security import SecurityHeadersMiddleware

from .logging_context import logging_context_middleware
from .request_context import RequestContextMiddleware

__all__ = [
    "setup_middlewares",
    "RequestContextMiddleware",
    "logging_context_middleware",
]


def setup_middlewares(app: FastAPI, settings: Settings) -> None:
    """Configure all application middlewares.

    Middleware order matters - the last one added runs first.
    """
    # Correlation ID - generates/propagates X-Request-ID, reported as traceId
    app.add_middleware(CorrelationIdMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    # Stricter CSP when the interactive docs are disabled
    csp = None
    if not settings.enable_openapi and settings.csp_production:
        csp = settings.csp_production
    app.add_middleware(SecurityHeadersMiddleware, content_security_policy=csp)

    @app.middleware("http")
    async def _logging_context(request, call_next):  # type: ignore[no-untyped-def]
        return await logging_context_middleware(request, call_next)

    app.add_middleware(RequestContextMiddleware)

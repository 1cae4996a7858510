from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.schoolops.api.middlewares import setup_middlewares
from src.schoolops.api.v1.router import api_router
from src.schoolops.core.config import get_settings
from src.schoolops.core.db import dispose_engine
from src.schoolops.core.exceptions import setup_exception_handlers
from src.schoolops.core.health import setup_health_endpoint, setup_metrics
from src.schoolops.core.identity import create_http_client
from src.schoolops.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info(f"Starting {settings.app_name}")

    yield

    logger.info("Closing connections...")
    await app.state.identity_http_client.aclose()
    await dispose_engine()
    logger.info("Shutdown complete")


OPENAPI_TAGS = [
    {"name": "provisioning", "description": "Bulk import, invites and school records"},
    {"name": "bootstrap", "description": "Secret-guarded school bootstrap and admin recovery"},
]


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Batch identity and role provisioning for school tenants",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
    )

    # Shared connection pool for identity provider admin calls
    app.state.identity_http_client = create_http_client(settings)

    setup_exception_handlers(app)
    setup_middlewares(app, settings)
    app.include_router(api_router)
    setup_metrics(app)
    setup_health_endpoint(app)

    return app


app = create_app()

"""Provisioning error taxonomy and exception handlers with request_id in responses."""

from typing import Any

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.schoolops.core.logging import get_logger

logger = get_logger(__name__)


class ProvisioningError(Exception):
    """Base class for errors raised by the provisioning pipeline."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(ProvisioningError):
    """Missing or invalid caller credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(ProvisioningError):
    """Caller lacks the privilege required for the tenant."""

    status_code = status.HTTP_403_FORBIDDEN


class BatchShapeError(ProvisioningError):
    """Malformed request envelope: bad tenant slug, empty or oversized row list."""


class TenantNotFoundError(ProvisioningError):
    """No tenant matches the requested slug."""


class RowValidationError(ProvisioningError):
    """A single-row request failed validation."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


class ProviderError(ProvisioningError):
    """The identity provider rejected a create, update or listing call."""


class PersistenceError(ProvisioningError):
    """A membership, role or directory write failed."""


def persistence_error(step: str, error: Exception) -> PersistenceError:
    """Wrap a database failure, surfacing the driver message."""
    detail = getattr(error, "orig", None) or error
    return PersistenceError(f"{step} failed: {detail}")


class BootstrapLockedError(ProvisioningError):
    """Tenant bootstrap already ran and force was not requested."""

    status_code = status.HTTP_409_CONFLICT


class ConfigurationError(ProvisioningError):
    """Server-side configuration needed by the operation is missing."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(message: str, **extra: Any) -> dict[str, Any]:
    """Build the JSON body shared by every non-2xx response."""
    return {"ok": False, "error": message, "request_id": correlation_id.get(), **extra}


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(ProvisioningError)
    async def provisioning_exception_handler(
        request: Request, exc: ProvisioningError
    ) -> JSONResponse:
        logger.info(
            "Request rejected",
            path=request.url.path,
            error_type=type(exc).__name__,
            status_code=exc.status_code,
        )
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request body")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(f"{location}: {message}" if location else message),
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail)))

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail)))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = correlation_id.get()
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=request_id,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("Internal server error"),
        )

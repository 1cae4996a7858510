"""Request context middleware.

Captures the request metadata stored on audit records: client IP,
user agent and request ID.
"""

from asgi_correlation_id import correlation_id
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.schoolops.core.audit_context import (
    clear_audit_context,
    get_client_ip,
    set_audit_context,
)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Initialize the audit context for each request and clear it afterwards."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        clear_audit_context()
        try:
            client_host = request.client.host if request.client else None
            set_audit_context(
                ip_address=get_client_ip(request.headers.get("x-forwarded-for"), client_host),
                user_agent=request.headers.get("user-agent"),
                request_id=correlation_id.get(),
            )
            return await call_next(request)
        finally:
            clear_audit_context()

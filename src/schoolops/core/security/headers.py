"""Security headers middleware (Helmet-style)."""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

# CSP for Swagger UI: requires inline scripts and CDN assets
DOCS_CSP = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' cdn.jsdelivr.net; "
    "style-src 'self' 'unsafe-inline' cdn.jsdelivr.net; "
    "img-src 'self' data: cdn.jsdelivr.net; "
    "frame-ancestors 'none'"
)

BASE_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every response.

    Provisioning responses carry identity ids and per-row errors, so API
    paths are additionally marked as non-cacheable.
    """

    def __init__(
        self,
        app: ASGIApp,
        content_security_policy: str | None = None,
        no_store_prefix: str = "/api/",
    ):
        super().__init__(app)
        self.headers = dict(BASE_HEADERS)
        self.headers["Content-Security-Policy"] = content_security_policy or DOCS_CSP
        self.no_store_prefix = no_store_prefix

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for header, value in self.headers.items():
            response.headers[header] = value
        if request.url.path.startswith(self.no_store_prefix):
            response.headers["Cache-Control"] = "no-store"
        return response

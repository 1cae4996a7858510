"""GoTrue-compatible admin API client."""

from typing import Any
from uuid import UUID

import httpx

from src.schoolops.core.config import Settings
from src.schoolops.core.identity.provider import IdentityProviderError, IdentityUser
from src.schoolops.core.logging import get_logger

logger = get_logger(__name__)

# Keys under which GoTrue versions report a human-readable error
_ERROR_KEYS = ("msg", "error_description", "message", "error")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in _ERROR_KEYS:
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return f"Identity provider returned HTTP {response.status_code}"


def _parse_user(data: Any) -> IdentityUser:
    if not isinstance(data, dict) or "id" not in data:
        raise IdentityProviderError("Identity provider returned no user")
    return IdentityUser(id=UUID(str(data["id"])), email=str(data.get("email") or ""))


class GoTrueAdminClient:
    """IdentityProvider backed by the GoTrue ``/admin/users`` endpoints.

    Authenticates with the service key. The underlying ``httpx.AsyncClient``
    is owned by the caller and shared across requests.
    """

    def __init__(self, client: httpx.AsyncClient, service_key: str):
        self.client = client
        self.service_key = service_key

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
        }

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self.client.request(method, path, headers=self._headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Identity provider unreachable", method=method, path=path, error=str(e))
            raise IdentityProviderError(f"Identity provider unreachable: {e}") from e

        if response.is_error:
            message = _error_message(response)
            logger.warning(
                "Identity provider call failed",
                method=method,
                path=path,
                status_code=response.status_code,
                error=message,
            )
            raise IdentityProviderError(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise IdentityProviderError("Identity provider returned invalid JSON") from e

    async def list_users(self, page: int, per_page: int) -> list[IdentityUser]:
        body = await self._request(
            "GET", "/admin/users", params={"page": page, "per_page": per_page}
        )
        users = body.get("users", []) if isinstance(body, dict) else body or []
        return [_parse_user(user) for user in users]

    async def create_user(self, email: str, password: str) -> IdentityUser:
        body = await self._request(
            "POST",
            "/admin/users",
            json={"email": email, "password": password, "email_confirm": True},
        )
        # Some versions wrap the account as {"user": {...}}
        if isinstance(body, dict) and isinstance(body.get("user"), dict):
            body = body["user"]
        return _parse_user(body)

    async def update_password(self, user_id: UUID, password: str) -> None:
        await self._request("PUT", f"/admin/users/{user_id}", json={"password": password})


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Build the shared HTTP client for the identity provider."""
    return httpx.AsyncClient(
        base_url=settings.identity_provider_url,
        timeout=settings.identity_request_timeout_seconds,
    )

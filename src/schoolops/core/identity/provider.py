"""Identity provider capability interface.

Accounts live in an external identity provider that offers no indexed
lookup by email, only a paginated listing. Everything the provisioning
pipeline needs from it is captured here.
"""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID


class IdentityProviderError(Exception):
    """The identity provider rejected a call or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class IdentityUser:
    """An account as reported by the identity provider."""

    id: UUID
    email: str


class IdentityProvider(Protocol):
    """Admin operations the provisioning pipeline performs on identities."""

    async def list_users(self, page: int, per_page: int) -> list[IdentityUser]:
        """Return one page of accounts. Pages are 1-based."""
        ...

    async def create_user(self, email: str, password: str) -> IdentityUser:
        """Create a confirmed account with the given password."""
        ...

    async def update_password(self, user_id: UUID, password: str) -> None:
        """Set the password of an existing account."""
        ...

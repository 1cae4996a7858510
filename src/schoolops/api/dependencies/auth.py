"""Caller authentication dependencies.

Callers present an access token minted by the identity provider. The token
subject is the caller's identity id; authorization against tenants happens
in the services.
"""

from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header

from src.schoolops.core.exceptions import AuthenticationError
from src.schoolops.core.logging import bind_actor_context
from src.schoolops.core.security import decode_token


@dataclass(frozen=True)
class Actor:
    """The authenticated caller."""

    id: UUID
    email: str | None = None


async def get_current_actor(
    authorization: Annotated[str | None, Header()] = None,
) -> Actor:
    """Authenticate the bearer token and bind the caller to the log context."""
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("Unauthorized")

    payload = decode_token(authorization[7:])
    if payload is None:
        raise AuthenticationError("Unauthorized")

    try:
        actor_id = UUID(str(payload.get("sub", "")))
    except ValueError as e:
        raise AuthenticationError("Unauthorized") from e

    email = payload.get("email")
    actor = Actor(id=actor_id, email=email if isinstance(email, str) else None)
    bind_actor_context(actor.id, actor.email)
    return actor


CurrentActor = Annotated[Actor, Depends(get_current_actor)]

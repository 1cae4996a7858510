"""Test helper functions for authenticated requests."""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import jwt

from src.schoolops.core.config import get_settings


def create_access_token(
    subject: str | UUID,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Mint a token shaped like the identity provider's, signed with the test secret."""
    settings = get_settings()
    claims: dict[str, Any] = {
        "sub": str(subject),
        "exp": datetime.now(UTC) + (expires_delta or timedelta(minutes=30)),
        "role": "authenticated",
    }
    if email:
        claims["email"] = email
    if settings.jwt_audience is not None:
        claims["aud"] = settings.jwt_audience
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def auth_header(subject: str | UUID, email: str | None = None) -> dict[str, str]:
    """Authorization header carrying a freshly minted token."""
    return {"Authorization": f"Bearer {create_access_token(subject, email=email)}"}

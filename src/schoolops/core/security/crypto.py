"""Caller token verification and secret comparison."""

import secrets
from typing import Any

from jose import JWTError, jwt

from src.schoolops.core.config import get_settings


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode and validate an identity-provider access token. Returns None on any error."""
    settings = get_settings()
    options = {"verify_aud": settings.jwt_audience is not None}
    try:
        return jwt.decode(  # type: ignore[no-any-return]
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError:
        return None


def secret_matches(provided: str | None, expected: str | None) -> bool:
    """Constant-time comparison of a caller-supplied secret. False if either is empty."""
    if not provided or not expected:
        return False
    return secrets.compare_digest(provided.encode(), expected.encode())

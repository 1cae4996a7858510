"""Security utilities - tokens, secrets, input normalization and headers.

Re-exports all security-related functions for convenience.
"""

from src.schoolops.core.security.crypto import (
    decode_token,
    secret_matches,
)
from src.schoolops.core.security.headers import SecurityHeadersMiddleware
from src.schoolops.core.security.validators import normalize_email, normalize_tenant_slug

__all__ = [
    # Crypto
    "decode_token",
    "secret_matches",
    # Headers
    "SecurityHeadersMiddleware",
    # Validators
    "normalize_email",
    "normalize_tenant_slug",
]

"""Input normalization shared by provisioning entry points."""

import re
from typing import Final

from src.schoolops.models.tenant import MAX_TENANT_SLUG_LENGTH

_SLUG_STRIP_PATTERN: Final[re.Pattern[str]] = re.compile(r"[^a-z0-9-]")


def normalize_tenant_slug(raw: str | None) -> str:
    """Lower-case and strip everything but letters, digits and hyphens.

    Returns an empty string when nothing usable remains, or when the result
    would not fit the slug column.
    """
    slug = _SLUG_STRIP_PATTERN.sub("", (raw or "").strip().lower())
    if len(slug) > MAX_TENANT_SLUG_LENGTH:
        return ""
    return slug


def normalize_email(raw: str | None) -> str:
    """Trim and lower-case an email address."""
    return (raw or "").strip().lower()

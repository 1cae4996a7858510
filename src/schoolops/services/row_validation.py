"""Row validation for identity provisioning.

Pure functions with no I/O. A commit re-runs validation instead of trusting
an earlier dry run, so the same row must always produce the same result.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from src.schoolops.core.security.validators import normalize_email
from src.schoolops.models.enums import is_assignable_role

# Row numbers are human-facing: line 1 of the source sheet is its header
HEADER_ROW_OFFSET = 2

MIN_PASSWORD_LENGTH = 8
MAX_DISPLAY_NAME_LENGTH = 120
MAX_PHONE_LENGTH = 50


@dataclass(frozen=True)
class ImportRow:
    """One identity to provision, as submitted by the operator."""

    email: str
    password: str
    roles: list[str] = field(default_factory=list)
    display_name: str | None = None
    phone: str | None = None


@dataclass
class RowResult:
    """Outcome for one row. Updated in place as the row is committed."""

    row_number: int
    email: str
    ok: bool
    errors: list[str]
    normalized_roles: list[str]
    user_id: UUID | None = None

    def fail(self, message: str) -> None:
        """Mark the row failed with a single error, replacing earlier ones."""
        self.ok = False
        self.errors = [message]
        self.user_id = None


def normalize_roles(raw: Iterable[Any] | None) -> list[str]:
    """Trim and lower-case roles, drop empties, de-duplicate in first-seen order."""
    roles: list[str] = []
    for value in raw or ():
        role = str(value).strip().lower()
        if role and role not in roles:
            roles.append(role)
    return roles


def clean_optional(raw: Any) -> str | None:
    """Trim an optional text field; blank becomes None."""
    text = str(raw or "").strip()
    return text or None


def credential_errors(email: str, password: str | None) -> list[str]:
    """Errors for a normalized email and raw password."""
    errors = []
    if not email or "@" not in email:
        errors.append("Invalid email")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return errors


def validate_row(row: ImportRow, index: int) -> RowResult:
    """Validate one row. Every rule runs; errors accumulate in rule order.

    Args:
        row: The submitted row
        index: 0-based position of the row in the submitted list

    Returns:
        RowResult with ``ok`` set and ``user_id`` absent
    """
    email = normalize_email(row.email)
    roles = normalize_roles(row.roles)
    display_name = clean_optional(row.display_name) or ""
    phone = clean_optional(row.phone) or ""

    errors = credential_errors(email, row.password)
    if not roles:
        errors.append("Missing role(s)")
    errors.extend(f"Invalid role: {role}" for role in roles if not is_assignable_role(role))
    if len(display_name) > MAX_DISPLAY_NAME_LENGTH:
        errors.append(f"display_name too long (max {MAX_DISPLAY_NAME_LENGTH})")
    if len(phone) > MAX_PHONE_LENGTH:
        errors.append(f"phone too long (max {MAX_PHONE_LENGTH})")

    return RowResult(
        row_number=index + HEADER_ROW_OFFSET,
        email=email,
        ok=not errors,
        errors=errors,
        normalized_roles=roles,
    )

"""Provisioning request and response schemas.

Request bodies are lenient about row content: a malformed email or an
unknown role must reach the row validator and come back as a per-row error
rather than failing the whole request.
"""

from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.schoolops.core.config import get_settings
from src.schoolops.core.exceptions import BatchShapeError


class CamelModel(BaseModel):
    """Base for JSON bodies exchanged in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return value


TENANT_SLUG_ALIASES = AliasChoices("tenantSlug", "schoolSlug", "tenant_slug")


class ImportRowIn(CamelModel):
    email: str = ""
    password: str = ""
    roles: list[str] = Field(default_factory=list)
    display_name: str | None = None
    phone: str | None = None

    @field_validator("email", "password", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _text(v)

    @field_validator("display_name", "phone", mode="before")
    @classmethod
    def coerce_optional_text(cls, v: Any) -> Any:
        return None if v is None else _text(v)

    @field_validator("roles", mode="before")
    @classmethod
    def coerce_roles(cls, v: Any) -> list[str]:
        # Anything but a list counts as no roles at all
        if not isinstance(v, list):
            return []
        return [str(role) for role in v if role is not None]


class BulkImportRequest(CamelModel):
    """Bulk import body. Row count is capped here, mode is checked by the service."""

    mode: str = ""
    tenant_slug: str = Field(default="", validation_alias=TENANT_SLUG_ALIASES)
    rows: list[ImportRowIn] = Field(default_factory=list)
    reason: str | None = Field(default=None, max_length=500)

    @field_validator("rows", mode="before")
    @classmethod
    def cap_rows(cls, v: Any) -> Any:
        # Runs on the raw list, before any row is coerced
        max_rows = get_settings().bulk_import_max_rows
        if isinstance(v, list) and len(v) > max_rows:
            raise BatchShapeError(f"Too many rows (max {max_rows})")
        return v


class RowResultRead(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    row_number: int
    email: str
    ok: bool
    errors: list[str]
    normalized_roles: list[str]
    user_id: UUID | None = None


class BulkImportResponse(CamelModel):
    ok: bool
    mode: str
    results: list[RowResultRead]
    trace_id: str | None = None
    error: str | None = None


class InviteRequest(CamelModel):
    tenant_slug: str = Field(default="", validation_alias=TENANT_SLUG_ALIASES)
    email: str
    password: str
    role: str
    display_name: str | None = None


class InviteResponse(CamelModel):
    ok: bool = True
    user_id: UUID
    message: str = "User created and password set."
    trace_id: str | None = None


class SchoolRead(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    slug: str
    name: str
    is_active: bool


class CreateSchoolRequest(CamelModel):
    slug: str
    name: str | None = None
    is_active: bool = True
    principal_email: str
    principal_password: str
    principal_display_name: str | None = None


class CreateSchoolResponse(CamelModel):
    ok: bool = True
    school: SchoolRead
    principal_user_id: UUID
    trace_id: str | None = None


class BootstrapRequest(CamelModel):
    bootstrap_secret: str = ""
    school_slug: str = ""
    school_name: str | None = None
    admin_email: str = ""
    admin_password: str = ""
    display_name: str | None = None
    force: bool = False


class BootstrapResponse(CamelModel):
    ok: bool = True
    school: SchoolRead
    admin_user_id: UUID
    message: str = "Bootstrap complete."
    trace_id: str | None = None


class UnlockBootstrapRequest(CamelModel):
    school_slug: str = ""


class UnlockBootstrapResponse(CamelModel):
    ok: bool = True
    school: SchoolRead
    message: str = "Bootstrap unlocked."
    trace_id: str | None = None


class RecoverMasterRequest(CamelModel):
    recovery_secret: str = ""
    new_email: str = ""
    new_password: str = ""


class RecoverMasterResponse(CamelModel):
    ok: bool = True
    user_id: UUID
    email: str
    message: str = "Master admin recovered."
    trace_id: str | None = None

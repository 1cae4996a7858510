"""Audit trail and directory schemas for API responses."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, ConfigDict, Field

from src.schoolops.schemas.pagination import PaginatedResponse
from src.schoolops.schemas.provisioning import CamelModel


class AuditLogRead(CamelModel):
    """Audit log entry for API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID | None
    actor_id: UUID | None
    action: str
    entity_type: str
    entity_id: str | None
    metadata: dict[str, Any] | None = Field(
        default=None,
        validation_alias=AliasChoices("event_metadata", "metadata"),
    )
    ip_address: str | None
    user_agent: str | None
    request_id: str | None
    status: str
    error_message: str | None
    created_at: datetime


class DirectoryMemberRead(CamelModel):
    """Directory entry with the identity's current roles in the tenant."""

    user_id: UUID
    email: str
    display_name: str | None
    roles: list[str]
    updated_at: datetime


AuditLogListResponse = PaginatedResponse[AuditLogRead]
DirectoryListResponse = PaginatedResponse[DirectoryMemberRead]

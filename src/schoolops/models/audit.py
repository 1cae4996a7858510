"""Audit log model for provisioning actions."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from src.schoolops.models.base import utc_now


class AuditAction(str, Enum):
    """Audit action types for type-safe logging."""

    # Bulk import
    BULK_IMPORT_ROW = "bulk_staff_import_row"
    BULK_IMPORT_COMMIT = "bulk_staff_import_commit"

    # Single-identity variants
    USER_CREATED_DIRECT = "user_created_direct"
    SCHOOL_CREATED = "school_created"
    SCHOOL_BOOTSTRAPPED = "school_bootstrapped"
    BOOTSTRAP_UNLOCKED = "bootstrap_unlocked"
    MASTER_ADMIN_RECOVERY = "master_admin_recovery"


class AuditStatus(str, Enum):
    """Audit log status."""

    SUCCESS = "success"
    FAILURE = "failure"


class AuditLog(SQLModel, table=True):
    """Append-only record of a provisioning action.

    Rows are never updated or deleted by the service.
    """

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_tenant_created", "tenant_id", "created_at"),
        Index("ix_audit_logs_actor_created", "actor_id", "created_at"),
        Index("ix_audit_logs_action_created", "action", "created_at"),
        Index("ix_audit_logs_entity", "entity_type", "entity_id"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    # Context (tenant is absent for platform-level actions)
    tenant_id: UUID | None = Field(foreign_key="tenants.id", default=None)
    actor_id: UUID | None = Field(default=None)

    # Action details
    action: str = Field(max_length=50)  # AuditAction value
    entity_type: str = Field(max_length=50)  # "user", "tenant"
    entity_id: str | None = Field(default=None, max_length=100)

    event_metadata: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column("metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=True),
    )

    # Request metadata
    ip_address: str | None = Field(max_length=45, default=None)
    user_agent: str | None = Field(max_length=500, default=None)
    request_id: str | None = Field(max_length=64, default=None)

    # Result
    status: str = Field(default=AuditStatus.SUCCESS.value, max_length=20)
    error_message: str | None = Field(max_length=1000, default=None)

    created_at: datetime = Field(default_factory=utc_now)

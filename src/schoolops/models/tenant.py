"""Tenant (school) registry models."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.schoolops.models.base import utc_now

MAX_TENANT_SLUG_LENGTH = 63


class Tenant(SQLModel, table=True):
    """A school. The scoping boundary for memberships, roles and directory entries."""

    __tablename__ = "tenants"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    slug: str = Field(max_length=MAX_TENANT_SLUG_LENGTH, unique=True, index=True)
    name: str = Field(max_length=200)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)


class TenantBootstrap(SQLModel, table=True):
    """One-time bootstrap state of a tenant."""

    __tablename__ = "tenant_bootstrap"

    tenant_id: UUID = Field(foreign_key="tenants.id", primary_key=True)
    locked: bool = Field(default=False)
    bootstrapped_at: datetime | None = Field(default=None)
    bootstrapped_by: UUID | None = Field(default=None)

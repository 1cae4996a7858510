"""Tenant membership, role grant and directory models.

Identities live in the external identity provider; ``user_id`` columns hold
the provider-issued id and carry no foreign key.
"""

from datetime import datetime
from uuid import UUID

from sqlmodel import Field, SQLModel

from src.schoolops.models.base import utc_now
from src.schoolops.models.enums import MembershipStatus


class TenantMembership(SQLModel, table=True):
    """Junction table attaching an identity to a tenant."""

    __tablename__ = "tenant_memberships"

    tenant_id: UUID = Field(foreign_key="tenants.id", primary_key=True)
    user_id: UUID = Field(primary_key=True, index=True)
    status: str = Field(default=MembershipStatus.ACTIVE.value, max_length=20)
    created_by: UUID | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class RoleGrant(SQLModel, table=True):
    """A single (tenant, identity, role) permission fact."""

    __tablename__ = "role_grants"

    tenant_id: UUID = Field(foreign_key="tenants.id", primary_key=True)
    user_id: UUID = Field(primary_key=True, index=True)
    role: str = Field(primary_key=True, max_length=50)
    created_by: UUID | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)


class DirectoryEntry(SQLModel, table=True):
    """Read-optimized copy of an identity's email and display name per tenant."""

    __tablename__ = "directory_entries"

    tenant_id: UUID = Field(foreign_key="tenants.id", primary_key=True)
    user_id: UUID = Field(primary_key=True)
    email: str = Field(max_length=255, index=True)
    display_name: str | None = Field(default=None, max_length=120)
    updated_at: datetime = Field(default_factory=utc_now)


class PlatformSuperAdmin(SQLModel, table=True):
    """Identity with platform-wide administration rights."""

    __tablename__ = "platform_super_admins"

    user_id: UUID = Field(primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)

"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import TenantFactory, RoleGrantFactory, ...
"""

from tests.factories.base import BaseFactory, generate_uuid, utc_now
from tests.factories.membership import (
    DirectoryEntryFactory,
    PlatformSuperAdminFactory,
    RoleGrantFactory,
    TenantMembershipFactory,
)
from tests.factories.tenant import TenantBootstrapFactory, TenantFactory

__all__ = [
    # Base
    "BaseFactory",
    "generate_uuid",
    "utc_now",
    # Tenant
    "TenantFactory",
    "TenantBootstrapFactory",
    # Membership
    "TenantMembershipFactory",
    "RoleGrantFactory",
    "DirectoryEntryFactory",
    "PlatformSuperAdminFactory",
]

"""Model exports.

Import from here: `from src.schoolops.models import Tenant, RoleGrant`
"""

from src.schoolops.models.audit import AuditAction, AuditLog, AuditStatus
from src.schoolops.models.enums import (
    ASSIGNABLE_ROLES,
    ImportMode,
    MembershipStatus,
    RoleGrantPolicy,
    TenantRole,
    is_assignable_role,
)
from src.schoolops.models.membership import (
    DirectoryEntry,
    PlatformSuperAdmin,
    RoleGrant,
    TenantMembership,
)
from src.schoolops.models.tenant import Tenant, TenantBootstrap

__all__ = [
    # Enums
    "ASSIGNABLE_ROLES",
    "AuditAction",
    "AuditStatus",
    "ImportMode",
    "MembershipStatus",
    "RoleGrantPolicy",
    "TenantRole",
    "is_assignable_role",
    # Models
    "AuditLog",
    "DirectoryEntry",
    "PlatformSuperAdmin",
    "RoleGrant",
    "Tenant",
    "TenantBootstrap",
    "TenantMembership",
]

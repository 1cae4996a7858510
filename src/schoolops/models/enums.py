"""Shared enums for models."""

from enum import Enum


class TenantRole(str, Enum):
    """Role an identity can hold within a school tenant."""

    SUPER_ADMIN = "super_admin"
    SCHOOL_OWNER = "school_owner"
    PRINCIPAL = "principal"
    VICE_PRINCIPAL = "vice_principal"
    ACADEMIC_COORDINATOR = "academic_coordinator"
    TEACHER = "teacher"
    ACCOUNTANT = "accountant"
    HR_MANAGER = "hr_manager"
    COUNSELOR = "counselor"
    STUDENT = "student"
    PARENT = "parent"
    MARKETING_STAFF = "marketing_staff"


# Roles an operator may grant through import or invite.
# super_admin is a governance role and can only be granted by bootstrap.
ASSIGNABLE_ROLES: frozenset[str] = frozenset(
    role.value for role in TenantRole if role is not TenantRole.SUPER_ADMIN
)


def is_assignable_role(role: str) -> bool:
    """Check a normalized role name against the allow-list."""
    return role in ASSIGNABLE_ROLES


class MembershipStatus(str, Enum):
    """Membership status of an identity within a tenant."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class ImportMode(str, Enum):
    """Bulk import invocation mode."""

    DRY_RUN = "dry_run"
    COMMIT = "commit"


class RoleGrantPolicy(str, Enum):
    """How the sequencer applies a role set to an identity."""

    REPLACE = "replace"  # delete all grants, then insert the new set
    MERGE = "merge"  # insert missing grants, keep existing ones

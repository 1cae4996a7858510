"""Permission checks for provisioning operations."""

from collections.abc import Iterable
from uuid import UUID

from src.schoolops.core.exceptions import AuthorizationError
from src.schoolops.core.logging import get_logger
from src.schoolops.models.enums import TenantRole
from src.schoolops.repositories import PlatformAdminRepository, RoleGrantRepository

logger = get_logger(__name__)

# Tenant roles allowed to bulk import staff and read the provisioning trail
BULK_IMPORT_ROLES: frozenset[str] = frozenset(
    {
        TenantRole.SUPER_ADMIN.value,
        TenantRole.SCHOOL_OWNER.value,
        TenantRole.PRINCIPAL.value,
        TenantRole.VICE_PRINCIPAL.value,
        TenantRole.HR_MANAGER.value,
    }
)

# Tenant roles allowed to invite a single identity
INVITE_ROLES: frozenset[str] = frozenset(
    {
        TenantRole.SUPER_ADMIN.value,
        TenantRole.SCHOOL_OWNER.value,
        TenantRole.PRINCIPAL.value,
        TenantRole.VICE_PRINCIPAL.value,
    }
)


class PermissionService:
    """Decides whether an actor may provision identities for a tenant.

    Platform super admins pass every check. Everyone else needs one of the
    privileged roles within the target tenant. Read-only.
    """

    def __init__(
        self,
        platform_admin_repo: PlatformAdminRepository,
        role_grant_repo: RoleGrantRepository,
    ):
        self.platform_admin_repo = platform_admin_repo
        self.role_grant_repo = role_grant_repo

    async def is_platform_admin(self, actor_id: UUID) -> bool:
        return await self.platform_admin_repo.is_platform_admin(actor_id)

    async def can_manage_tenant(
        self, actor_id: UUID, tenant_id: UUID, roles: Iterable[str]
    ) -> bool:
        if await self.is_platform_admin(actor_id):
            return True
        return await self.role_grant_repo.has_any_role(tenant_id, actor_id, roles)

    async def require_tenant_access(
        self, actor_id: UUID, tenant_id: UUID, roles: Iterable[str]
    ) -> None:
        """Raise AuthorizationError unless the actor may manage the tenant."""
        if not await self.can_manage_tenant(actor_id, tenant_id, roles):
            logger.info("Provisioning forbidden", tenant_id=str(tenant_id))
            raise AuthorizationError("Forbidden")

    async def require_platform_admin(self, actor_id: UUID) -> None:
        if not await self.is_platform_admin(actor_id):
            logger.info("Platform admin required")
            raise AuthorizationError("Forbidden")

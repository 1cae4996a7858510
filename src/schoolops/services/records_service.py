"""Read access to a tenant's directory and provisioning audit trail."""

from dataclasses import dataclass
from uuid import UUID

from src.schoolops.core.exceptions import BatchShapeError, TenantNotFoundError
from src.schoolops.core.logging import bind_tenant_context
from src.schoolops.core.security import normalize_tenant_slug
from src.schoolops.models import AuditLog, DirectoryEntry, Tenant
from src.schoolops.repositories import (
    AuditLogRepository,
    DirectoryRepository,
    RoleGrantRepository,
    TenantRepository,
)
from src.schoolops.services.permission_service import BULK_IMPORT_ROLES, PermissionService


@dataclass(frozen=True)
class DirectoryMember:
    """A directory entry joined with the identity's current roles."""

    entry: DirectoryEntry
    roles: list[str]


class RecordsService:
    """Read-only views for operators allowed to provision a tenant."""

    def __init__(
        self,
        tenant_repo: TenantRepository,
        permissions: PermissionService,
        directory_repo: DirectoryRepository,
        role_grant_repo: RoleGrantRepository,
        audit_repo: AuditLogRepository,
    ):
        self.tenant_repo = tenant_repo
        self.permissions = permissions
        self.directory_repo = directory_repo
        self.role_grant_repo = role_grant_repo
        self.audit_repo = audit_repo

    async def get_managed_tenant(self, actor_id: UUID, tenant_slug: str | None) -> Tenant:
        """Look up the tenant and check the actor may read its records."""
        slug = normalize_tenant_slug(tenant_slug)
        if not slug:
            raise BatchShapeError("Invalid tenantSlug")
        tenant = await self.tenant_repo.get_by_slug(slug)
        if tenant is None:
            raise TenantNotFoundError("School not found")
        bind_tenant_context(tenant.id, tenant.slug)
        await self.permissions.require_tenant_access(actor_id, tenant.id, BULK_IMPORT_ROLES)
        return tenant

    async def list_directory(
        self, tenant: Tenant, cursor: str | None = None, limit: int = 50
    ) -> tuple[list[DirectoryMember], str | None, bool]:
        entries, next_cursor, has_more = await self.directory_repo.list_by_tenant(
            tenant.id, cursor=cursor, limit=limit
        )
        roles = await self.role_grant_repo.roles_by_user(
            tenant.id, (entry.user_id for entry in entries)
        )
        members = [DirectoryMember(entry=e, roles=roles.get(e.user_id, [])) for e in entries]
        return members, next_cursor, has_more

    async def list_audit_logs(
        self,
        tenant: Tenant,
        cursor: str | None = None,
        limit: int = 50,
        action: str | None = None,
    ) -> tuple[list[AuditLog], str | None, bool]:
        return await self.audit_repo.list_by_tenant(
            tenant.id, cursor=cursor, limit=limit, action=action
        )

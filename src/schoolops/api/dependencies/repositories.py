"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.schoolops.api.dependencies.db import DBSession
from src.schoolops.repositories import (
    AuditLogRepository,
    DirectoryRepository,
    MembershipRepository,
    PlatformAdminRepository,
    RoleGrantRepository,
    TenantBootstrapRepository,
    TenantRepository,
)


def get_tenant_repository(session: DBSession) -> TenantRepository:
    return TenantRepository(session)


def get_bootstrap_repository(session: DBSession) -> TenantBootstrapRepository:
    return TenantBootstrapRepository(session)


def get_membership_repository(session: DBSession) -> MembershipRepository:
    return MembershipRepository(session)


def get_role_grant_repository(session: DBSession) -> RoleGrantRepository:
    return RoleGrantRepository(session)


def get_directory_repository(session: DBSession) -> DirectoryRepository:
    return DirectoryRepository(session)


def get_platform_admin_repository(session: DBSession) -> PlatformAdminRepository:
    return PlatformAdminRepository(session)


def get_audit_log_repository(session: DBSession) -> AuditLogRepository:
    """Audit repository on the request session, for reads."""
    return AuditLogRepository(session)


TenantRepo = Annotated[TenantRepository, Depends(get_tenant_repository)]
BootstrapRepo = Annotated[TenantBootstrapRepository, Depends(get_bootstrap_repository)]
MembershipRepo = Annotated[MembershipRepository, Depends(get_membership_repository)]
RoleGrantRepo = Annotated[RoleGrantRepository, Depends(get_role_grant_repository)]
DirectoryRepo = Annotated[DirectoryRepository, Depends(get_directory_repository)]
PlatformAdminRepo = Annotated[PlatformAdminRepository, Depends(get_platform_admin_repository)]
AuditLogRepo = Annotated[AuditLogRepository, Depends(get_audit_log_repository)]

"""Service factory dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request

from src.schoolops.api.dependencies.db import DBSession
from src.schoolops.api.dependencies.repositories import (
    AuditLogRepo,
    BootstrapRepo,
    DirectoryRepo,
    MembershipRepo,
    PlatformAdminRepo,
    RoleGrantRepo,
    TenantRepo,
)
from src.schoolops.core.config import get_settings
from src.schoolops.core.db import get_session
from src.schoolops.core.identity import GoTrueAdminClient, IdentityProvider
from src.schoolops.repositories import AuditLogRepository
from src.schoolops.services import (
    AuditService,
    BootstrapService,
    BulkImportService,
    IdentityResolver,
    InviteService,
    PermissionService,
    ProvisioningSequencer,
    RecordsService,
    SchoolService,
)


def get_identity_provider(request: Request) -> IdentityProvider:
    """Identity provider client over the application's shared HTTP client."""
    settings = get_settings()
    return GoTrueAdminClient(
        request.app.state.identity_http_client,
        settings.identity_provider_service_key,
    )


IdentityProviderDep = Annotated[IdentityProvider, Depends(get_identity_provider)]


def get_identity_resolver(provider: IdentityProviderDep) -> IdentityResolver:
    """Fresh resolver per request."""
    settings = get_settings()
    return IdentityResolver(
        provider,
        page_size=settings.identity_list_page_size,
        max_pages=settings.identity_list_max_pages,
    )


async def get_audit_service() -> AsyncGenerator[AuditService, None]:
    """Get audit service with its own isolated session.

    Audit records commit independently from provisioning writes, so a row
    that fails mid-way never takes earlier audit records with it.
    """
    async with get_session() as session:
        yield AuditService(AuditLogRepository(session), session)


ResolverDep = Annotated[IdentityResolver, Depends(get_identity_resolver)]
AuditServiceDep = Annotated[AuditService, Depends(get_audit_service)]


def get_permission_service(
    platform_admin_repo: PlatformAdminRepo,
    role_grant_repo: RoleGrantRepo,
) -> PermissionService:
    return PermissionService(platform_admin_repo, role_grant_repo)


PermissionServiceDep = Annotated[PermissionService, Depends(get_permission_service)]


def get_provisioning_sequencer(
    provider: IdentityProviderDep,
    session: DBSession,
    membership_repo: MembershipRepo,
    role_grant_repo: RoleGrantRepo,
    directory_repo: DirectoryRepo,
    audit_service: AuditServiceDep,
) -> ProvisioningSequencer:
    return ProvisioningSequencer(
        provider, session, membership_repo, role_grant_repo, directory_repo, audit_service
    )


SequencerDep = Annotated[ProvisioningSequencer, Depends(get_provisioning_sequencer)]


def get_bulk_import_service(
    tenant_repo: TenantRepo,
    permissions: PermissionServiceDep,
    resolver: ResolverDep,
    sequencer: SequencerDep,
    audit_service: AuditServiceDep,
) -> BulkImportService:
    return BulkImportService(
        tenant_repo,
        permissions,
        resolver,
        sequencer,
        audit_service,
        max_rows=get_settings().bulk_import_max_rows,
    )


def get_invite_service(
    tenant_repo: TenantRepo,
    permissions: PermissionServiceDep,
    resolver: ResolverDep,
    sequencer: SequencerDep,
) -> InviteService:
    return InviteService(tenant_repo, permissions, resolver, sequencer)


def get_school_service(
    session: DBSession,
    tenant_repo: TenantRepo,
    bootstrap_repo: BootstrapRepo,
    permissions: PermissionServiceDep,
    resolver: ResolverDep,
    sequencer: SequencerDep,
    audit_service: AuditServiceDep,
) -> SchoolService:
    return SchoolService(
        session, tenant_repo, bootstrap_repo, permissions, resolver, sequencer, audit_service
    )


def get_bootstrap_service(
    session: DBSession,
    tenant_repo: TenantRepo,
    bootstrap_repo: BootstrapRepo,
    platform_admin_repo: PlatformAdminRepo,
    resolver: ResolverDep,
    sequencer: SequencerDep,
    audit_service: AuditServiceDep,
) -> BootstrapService:
    settings = get_settings()
    return BootstrapService(
        session,
        tenant_repo,
        bootstrap_repo,
        platform_admin_repo,
        resolver,
        sequencer,
        audit_service,
        bootstrap_secret=settings.bootstrap_secret,
        recovery_secret=settings.master_recovery_secret,
    )


def get_records_service(
    tenant_repo: TenantRepo,
    permissions: PermissionServiceDep,
    directory_repo: DirectoryRepo,
    role_grant_repo: RoleGrantRepo,
    audit_repo: AuditLogRepo,
) -> RecordsService:
    return RecordsService(tenant_repo, permissions, directory_repo, role_grant_repo, audit_repo)


BulkImportServiceDep = Annotated[BulkImportService, Depends(get_bulk_import_service)]
InviteServiceDep = Annotated[InviteService, Depends(get_invite_service)]
SchoolServiceDep = Annotated[SchoolService, Depends(get_school_service)]
BootstrapServiceDep = Annotated[BootstrapService, Depends(get_bootstrap_service)]
RecordsServiceDep = Annotated[RecordsService, Depends(get_records_service)]

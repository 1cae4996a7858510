"""FastAPI dependency injection definitions.

Re-exports all dependencies.
"""

# Auth
from src.schoolops.api.dependencies.auth import Actor, CurrentActor, get_current_actor

# Database
from src.schoolops.api.dependencies.db import DBSession, get_db_session

# Repositories
from src.schoolops.api.dependencies.repositories import (
    AuditLogRepo,
    BootstrapRepo,
    DirectoryRepo,
    MembershipRepo,
    PlatformAdminRepo,
    RoleGrantRepo,
    TenantRepo,
)

# Services
from src.schoolops.api.dependencies.services import (
    AuditServiceDep,
    BootstrapServiceDep,
    BulkImportServiceDep,
    IdentityProviderDep,
    InviteServiceDep,
    PermissionServiceDep,
    RecordsServiceDep,
    ResolverDep,
    SchoolServiceDep,
    SequencerDep,
    get_audit_service,
    get_bootstrap_service,
    get_bulk_import_service,
    get_identity_provider,
    get_identity_resolver,
    get_invite_service,
    get_permission_service,
    get_provisioning_sequencer,
    get_records_service,
    get_school_service,
)

__all__ = [
    # Auth
    "Actor",
    "CurrentActor",
    "get_current_actor",
    # Database
    "DBSession",
    "get_db_session",
    # Repositories
    "AuditLogRepo",
    "BootstrapRepo",
    "DirectoryRepo",
    "MembershipRepo",
    "PlatformAdminRepo",
    "RoleGrantRepo",
    "TenantRepo",
    # Services
    "AuditServiceDep",
    "BootstrapServiceDep",
    "BulkImportServiceDep",
    "IdentityProviderDep",
    "InviteServiceDep",
    "PermissionServiceDep",
    "RecordsServiceDep",
    "ResolverDep",
    "SchoolServiceDep",
    "SequencerDep",
    "get_audit_service",
    "get_bootstrap_service",
    "get_bulk_import_service",
    "get_identity_provider",
    "get_identity_resolver",
    "get_invite_service",
    "get_permission_service",
    "get_provisioning_sequencer",
    "get_records_service",
    "get_school_service",
]

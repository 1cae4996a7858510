from src.schoolops.services.audit_service import AuditService
from src.schoolops.services.bootstrap_service import BootstrapService
from src.schoolops.services.bulk_import_service import BulkImportResult, BulkImportService
from src.schoolops.services.identity_resolver import IdentityResolver, ResolvedIdentity
from src.schoolops.services.invite_service import InviteService
from src.schoolops.services.permission_service import PermissionService
from src.schoolops.services.provisioning_sequencer import ProvisioningSequencer
from src.schoolops.services.records_service import RecordsService
from src.schoolops.services.school_service import SchoolService

__all__ = [
    "AuditService",
    "BootstrapService",
    "BulkImportResult",
    "BulkImportService",
    "IdentityResolver",
    "InviteService",
    "PermissionService",
    "ProvisioningSequencer",
    "RecordsService",
    "ResolvedIdentity",
    "SchoolService",
]

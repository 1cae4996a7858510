from src.schoolops.schemas.audit import (
    AuditLogListResponse,
    AuditLogRead,
    DirectoryListResponse,
    DirectoryMemberRead,
)
from src.schoolops.schemas.pagination import PaginatedResponse
from src.schoolops.schemas.provisioning import (
    BootstrapRequest,
    BootstrapResponse,
    BulkImportRequest,
    BulkImportResponse,
    CreateSchoolRequest,
    CreateSchoolResponse,
    ImportRowIn,
    InviteRequest,
    InviteResponse,
    RecoverMasterRequest,
    RecoverMasterResponse,
    RowResultRead,
    SchoolRead,
    UnlockBootstrapRequest,
    UnlockBootstrapResponse,
)

__all__ = [
    # Audit trail and directory
    "AuditLogListResponse",
    "AuditLogRead",
    "DirectoryListResponse",
    "DirectoryMemberRead",
    "PaginatedResponse",
    # Provisioning
    "BootstrapRequest",
    "BootstrapResponse",
    "BulkImportRequest",
    "BulkImportResponse",
    "CreateSchoolRequest",
    "CreateSchoolResponse",
    "ImportRowIn",
    "InviteRequest",
    "InviteResponse",
    "RecoverMasterRequest",
    "RecoverMasterResponse",
    "RowResultRead",
    "SchoolRead",
    "UnlockBootstrapRequest",
    "UnlockBootstrapResponse",
]

"""Repository layer - data access abstraction.

Repositories never commit; services own transaction boundaries.
"""

from src.schoolops.repositories.audit import AuditLogRepository
from src.schoolops.repositories.base import BaseRepository
from src.schoolops.repositories.directory import DirectoryRepository
from src.schoolops.repositories.membership import MembershipRepository
from src.schoolops.repositories.platform_admin import PlatformAdminRepository
from src.schoolops.repositories.role_grant import RoleGrantRepository
from src.schoolops.repositories.tenant import TenantBootstrapRepository, TenantRepository

__all__ = [
    "AuditLogRepository",
    "BaseRepository",
    "DirectoryRepository",
    "MembershipRepository",
    "PlatformAdminRepository",
    "RoleGrantRepository",
    "TenantBootstrapRepository",
    "TenantRepository",
]

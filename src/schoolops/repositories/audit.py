"""Repository for AuditLog entity."""

from uuid import UUID

from sqlmodel import select

from src.schoolops.models import AuditLog
from src.schoolops.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    """Append and read access to the audit trail. Records are never updated."""

    model = AuditLog

    async def list_by_tenant(
        self,
        tenant_id: UUID,
        cursor: str | None = None,
        limit: int = 50,
        action: str | None = None,
    ) -> tuple[list[AuditLog], str | None, bool]:
        """List audit logs for a tenant with cursor pagination.

        Args:
            tenant_id: Tenant to filter by
            cursor: Pagination cursor
            limit: Maximum items to return
            action: Optional action type filter

        Returns:
            Tuple of (logs, next_cursor, has_more)
        """
        query = select(AuditLog).where(AuditLog.tenant_id == tenant_id)
        if action:
            query = query.where(AuditLog.action == action)
        return await self.paginate(query, cursor, limit, AuditLog.created_at)

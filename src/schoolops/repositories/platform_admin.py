"""Repository for PlatformSuperAdmin entity."""

from uuid import UUID

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlmodel import select

from src.schoolops.models import PlatformSuperAdmin
from src.schoolops.models.base import utc_now
from src.schoolops.repositories.base import BaseRepository


class PlatformAdminRepository(BaseRepository[PlatformSuperAdmin]):
    """Repository for platform-wide administrators."""

    model = PlatformSuperAdmin

    async def is_platform_admin(self, user_id: UUID) -> bool:
        result = await self.session.execute(
            select(PlatformSuperAdmin.user_id).where(PlatformSuperAdmin.user_id == user_id)
        )
        return result.scalar_one_or_none() is not None

    async def grant(self, user_id: UUID) -> None:
        """Mark the identity as platform super admin. Idempotent (no commit)."""
        stmt = (
            pg_insert(PlatformSuperAdmin)
            .values(user_id=user_id, created_at=utc_now())
            .on_conflict_do_nothing(index_elements=[PlatformSuperAdmin.user_id])
        )
        await self.session.execute(stmt)

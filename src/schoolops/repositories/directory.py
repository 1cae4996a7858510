"""Repository for DirectoryEntry entity."""

from uuid import UUID

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlmodel import select

from src.schoolops.models import DirectoryEntry
from src.schoolops.models.base import utc_now
from src.schoolops.repositories.base import BaseRepository


class DirectoryRepository(BaseRepository[DirectoryEntry]):
    """Repository for the per-tenant user directory."""

    model = DirectoryEntry

    async def upsert_entry(
        self,
        tenant_id: UUID,
        user_id: UUID,
        email: str,
        display_name: str | None,
    ) -> None:
        """Create or overwrite the identity's directory entry (no commit)."""
        now = utc_now()
        stmt = pg_insert(DirectoryEntry).values(
            tenant_id=tenant_id,
            user_id=user_id,
            email=email,
            display_name=display_name,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[DirectoryEntry.tenant_id, DirectoryEntry.user_id],
            set_={"email": email, "display_name": display_name, "updated_at": now},
        )
        await self.session.execute(stmt)

    async def list_by_tenant(
        self,
        tenant_id: UUID,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[DirectoryEntry], str | None, bool]:
        """List directory entries, most recently updated first."""
        query = select(DirectoryEntry).where(DirectoryEntry.tenant_id == tenant_id)
        return await self.paginate(query, cursor, limit, DirectoryEntry.updated_at)

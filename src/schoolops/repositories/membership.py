"""Repository for TenantMembership entity."""

from uuid import UUID

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlmodel import select

from src.schoolops.models import MembershipStatus, TenantMembership
from src.schoolops.models.base import utc_now
from src.schoolops.repositories.base import BaseRepository


class MembershipRepository(BaseRepository[TenantMembership]):
    """Repository for identity-tenant memberships."""

    model = TenantMembership

    async def get_membership(self, tenant_id: UUID, user_id: UUID) -> TenantMembership | None:
        result = await self.session.execute(
            select(TenantMembership).where(
                TenantMembership.tenant_id == tenant_id,
                TenantMembership.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def upsert_active(self, tenant_id: UUID, user_id: UUID, created_by: UUID | None) -> None:
        """Attach the identity to the tenant as active.

        An existing membership is reactivated; ``created_by`` keeps its
        original value.
        """
        now = utc_now()
        stmt = pg_insert(TenantMembership).values(
            tenant_id=tenant_id,
            user_id=user_id,
            status=MembershipStatus.ACTIVE.value,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[TenantMembership.tenant_id, TenantMembership.user_id],
            set_={"status": MembershipStatus.ACTIVE.value, "updated_at": now},
        )
        await self.session.execute(stmt)

"""Repositories for Tenant and TenantBootstrap."""

from uuid import UUID, uuid4

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlmodel import select

from src.schoolops.models import Tenant, TenantBootstrap
from src.schoolops.models.base import utc_now
from src.schoolops.repositories.base import BaseRepository


class TenantRepository(BaseRepository[Tenant]):
    """Repository for the tenant registry."""

    model = Tenant

    async def get_by_slug(self, slug: str) -> Tenant | None:
        """Get tenant by normalized slug."""
        result = await self.session.execute(select(Tenant).where(Tenant.slug == slug))
        return result.scalar_one_or_none()

    async def upsert_by_slug(self, slug: str, name: str, is_active: bool = True) -> Tenant:
        """Create the tenant or update its name and active flag. Idempotent."""
        stmt = (
            pg_insert(Tenant)
            .values(id=uuid4(), slug=slug, name=name, is_active=is_active, created_at=utc_now())
            .on_conflict_do_update(
                index_elements=[Tenant.slug],
                set_={"name": name, "is_active": is_active},
            )
            .returning(Tenant)
        )
        result = await self.session.scalars(
            stmt, execution_options={"populate_existing": True}
        )
        return result.one()


class TenantBootstrapRepository(BaseRepository[TenantBootstrap]):
    """Repository for per-tenant bootstrap lock state."""

    model = TenantBootstrap

    async def is_locked(self, tenant_id: UUID) -> bool:
        result = await self.session.execute(
            select(TenantBootstrap.locked).where(TenantBootstrap.tenant_id == tenant_id)
        )
        return bool(result.scalar_one_or_none())

    async def lock(self, tenant_id: UUID, bootstrapped_by: UUID | None) -> None:
        """Mark the tenant as bootstrapped."""
        now = utc_now()
        stmt = pg_insert(TenantBootstrap).values(
            tenant_id=tenant_id,
            locked=True,
            bootstrapped_at=now,
            bootstrapped_by=bootstrapped_by,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[TenantBootstrap.tenant_id],
            set_={"locked": True, "bootstrapped_at": now, "bootstrapped_by": bootstrapped_by},
        )
        await self.session.execute(stmt)

    async def unlock(self, tenant_id: UUID) -> None:
        """Clear the lock and who ran bootstrap, so it can run again."""
        stmt = pg_insert(TenantBootstrap).values(
            tenant_id=tenant_id, locked=False, bootstrapped_at=None, bootstrapped_by=None
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[TenantBootstrap.tenant_id],
            set_={"locked": False, "bootstrapped_at": None, "bootstrapped_by": None},
        )
        await self.session.execute(stmt)

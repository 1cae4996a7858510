"""Repository for RoleGrant facts."""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlmodel import col, select

from src.schoolops.models import RoleGrant
from src.schoolops.models.base import utc_now
from src.schoolops.repositories.base import BaseRepository


class RoleGrantRepository(BaseRepository[RoleGrant]):
    """Repository for (tenant, identity, role) grants."""

    model = RoleGrant

    async def list_roles(self, tenant_id: UUID, user_id: UUID) -> list[str]:
        """Roles held by an identity within a tenant, sorted by name."""
        result = await self.session.execute(
            select(RoleGrant.role)
            .where(RoleGrant.tenant_id == tenant_id, RoleGrant.user_id == user_id)
            .order_by(RoleGrant.role)
        )
        return list(result.scalars().all())

    async def has_any_role(self, tenant_id: UUID, user_id: UUID, roles: Iterable[str]) -> bool:
        """Check whether the identity holds at least one of ``roles`` in the tenant."""
        result = await self.session.execute(
            select(RoleGrant.role)
            .where(
                RoleGrant.tenant_id == tenant_id,
                RoleGrant.user_id == user_id,
                col(RoleGrant.role).in_(list(roles)),
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def delete_all(self, tenant_id: UUID, user_id: UUID) -> None:
        """Revoke every grant of the identity within the tenant (no commit)."""
        await self.session.execute(
            delete(RoleGrant).where(
                col(RoleGrant.tenant_id) == tenant_id,
                col(RoleGrant.user_id) == user_id,
            )
        )

    async def add_roles(
        self,
        tenant_id: UUID,
        user_id: UUID,
        roles: Iterable[str],
        created_by: UUID | None,
    ) -> None:
        """Insert grants, leaving any that already exist untouched (no commit)."""
        now = utc_now()
        values = [
            {
                "tenant_id": tenant_id,
                "user_id": user_id,
                "role": role,
                "created_by": created_by,
                "created_at": now,
            }
            for role in roles
        ]
        if not values:
            return
        stmt = pg_insert(RoleGrant).values(values).on_conflict_do_nothing(
            index_elements=[RoleGrant.tenant_id, RoleGrant.user_id, RoleGrant.role]
        )
        await self.session.execute(stmt)

    async def roles_by_user(
        self, tenant_id: UUID, user_ids: Iterable[UUID]
    ) -> dict[UUID, list[str]]:
        """Map each identity to its sorted roles within the tenant."""
        ids = list(user_ids)
        if not ids:
            return {}
        result = await self.session.execute(
            select(RoleGrant.user_id, RoleGrant.role)
            .where(RoleGrant.tenant_id == tenant_id, col(RoleGrant.user_id).in_(ids))
            .order_by(RoleGrant.user_id, RoleGrant.role)
        )
        roles: dict[UUID, list[str]] = {}
        for user_id, role in result.all():
            roles.setdefault(user_id, []).append(role)
        return roles

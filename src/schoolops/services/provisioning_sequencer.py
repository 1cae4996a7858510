"""Ordered per-identity side effects of provisioning.

Steps run in a fixed order and each one commits on its own:

1. set the password on the identity
2. upsert an active tenant membership
3. apply the role set (replace: delete all then insert, one transaction)
4. upsert the directory entry
5. append an audit record

The first failing step raises, the audit write included; later steps are
skipped and earlier ones are not compensated. Every step is an upsert, so re-submitting a fixed row
converges to the intended state.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.schoolops.core.exceptions import ProviderError, persistence_error
from src.schoolops.core.identity import IdentityProvider, IdentityProviderError
from src.schoolops.core.logging import get_logger
from src.schoolops.models import AuditAction, RoleGrantPolicy
from src.schoolops.repositories import (
    DirectoryRepository,
    MembershipRepository,
    RoleGrantRepository,
)
from src.schoolops.services.audit_service import AuditService

logger = get_logger(__name__)


class ProvisioningSequencer:
    """Applies password, membership, roles and directory entry for one identity."""

    def __init__(
        self,
        provider: IdentityProvider,
        session: AsyncSession,
        membership_repo: MembershipRepository,
        role_grant_repo: RoleGrantRepository,
        directory_repo: DirectoryRepository,
        audit_service: AuditService,
    ):
        self.provider = provider
        self.session = session
        self.membership_repo = membership_repo
        self.role_grant_repo = role_grant_repo
        self.directory_repo = directory_repo
        self.audit_service = audit_service

    async def set_password(self, user_id: UUID, password: str) -> None:
        """Step 1. Imports are authoritative over credentials.

        Raises:
            ProviderError: With the provider's message.
        """
        try:
            await self.provider.update_password(user_id, password)
        except IdentityProviderError as e:
            raise ProviderError(e.message) from e

    async def _write(self, step: str, operation: Callable[[], Awaitable[None]]) -> None:
        """Run one database step in its own transaction."""
        try:
            await operation()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise persistence_error(step, e) from e

    async def apply(
        self,
        *,
        tenant_id: UUID,
        actor_id: UUID | None,
        user_id: UUID,
        email: str,
        password: str,
        roles: Sequence[str],
        display_name: str | None,
        policy: RoleGrantPolicy,
        audit_action: AuditAction,
        audit_metadata: dict[str, Any] | None = None,
    ) -> None:
        """Run every step for one identity within one tenant.

        Raises:
            ProviderError: The password could not be set.
            PersistenceError: A membership, role, directory or audit write failed.
        """
        await self.set_password(user_id, password)

        await self._write(
            "Membership update",
            lambda: self.membership_repo.upsert_active(tenant_id, user_id, created_by=actor_id),
        )

        async def apply_roles() -> None:
            if policy is RoleGrantPolicy.REPLACE:
                await self.role_grant_repo.delete_all(tenant_id, user_id)
            await self.role_grant_repo.add_roles(tenant_id, user_id, roles, created_by=actor_id)

        await self._write("Role assignment", apply_roles)

        await self._write(
            "Directory update",
            lambda: self.directory_repo.upsert_entry(tenant_id, user_id, email, display_name),
        )

        await self.audit_service.log_success(
            audit_action,
            entity_type="user",
            entity_id=user_id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            metadata=audit_metadata,
            raise_on_error=True,
        )
        logger.debug("Identity provisioned", user_id=str(user_id), policy=policy.value)

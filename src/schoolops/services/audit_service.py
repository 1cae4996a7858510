"""Audit logging service - records provisioning actions for compliance."""

import contextlib
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.schoolops.core.audit_context import get_audit_context
from src.schoolops.core.exceptions import persistence_error
from src.schoolops.core.logging import get_logger
from src.schoolops.models import AuditAction, AuditLog, AuditStatus
from src.schoolops.repositories import AuditLogRepository

logger = get_logger(__name__)

MAX_ERROR_MESSAGE_LENGTH = 1000


class AuditService:
    """Service for recording audit logs.

    Fire-and-forget by default: logging failures should not block
    provisioning. Callers that treat the record as a step of their own
    pass ``raise_on_error`` and get a PersistenceError instead.
    The session is dedicated to audit writes and commits independently of
    the provisioning session.
    """

    def __init__(self, audit_repo: AuditLogRepository, session: AsyncSession):
        self.audit_repo = audit_repo
        self.session = session

    async def log_action(
        self,
        action: AuditAction | str,
        entity_type: str,
        entity_id: UUID | str | None = None,
        tenant_id: UUID | None = None,
        actor_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
        status: AuditStatus = AuditStatus.SUCCESS,
        error_message: str | None = None,
        raise_on_error: bool = False,
    ) -> AuditLog | None:
        """Append an audit record.

        Request metadata (IP, user agent, request_id) comes from the audit
        context. Failures are logged and, unless raise_on_error is set, not
        raised.

        Args:
            action: The action performed (AuditAction enum or string)
            entity_type: Type of entity affected ("user", "school")
            entity_id: Identity id or tenant slug of the affected entity
            tenant_id: Tenant the action applies to, None for platform actions
            actor_id: Identity that performed the action
            metadata: Action-specific details
            status: Success or failure status
            error_message: Error details if status is failure
            raise_on_error: Raise PersistenceError when the record cannot be written

        Returns:
            The created AuditLog, or None if recording failed

        Raises:
            PersistenceError: Recording failed and raise_on_error is set.
        """
        action_value = action.value if isinstance(action, AuditAction) else action
        try:
            ctx = get_audit_context()
            audit_log = AuditLog(
                tenant_id=tenant_id,
                actor_id=actor_id,
                action=action_value,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else None,
                event_metadata=metadata,
                ip_address=ctx.ip_address if ctx else None,
                user_agent=ctx.user_agent if ctx else None,
                request_id=ctx.request_id if ctx else None,
                status=status.value,
                error_message=error_message[:MAX_ERROR_MESSAGE_LENGTH] if error_message else None,
            )

            self.audit_repo.add(audit_log)
            await self.session.commit()

            logger.debug(
                "Audit log recorded",
                action=action_value,
                entity_type=entity_type,
                entity_id=audit_log.entity_id,
            )
            return audit_log

        except Exception as e:
            logger.warning(
                "Failed to record audit log",
                action=action_value,
                entity_type=entity_type,
                error=str(e),
            )
            with contextlib.suppress(Exception):
                await self.session.rollback()
            if raise_on_error:
                raise persistence_error("Audit write", e) from e
            return None

    async def log_success(
        self,
        action: AuditAction | str,
        entity_type: str,
        entity_id: UUID | str | None = None,
        tenant_id: UUID | None = None,
        actor_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
        raise_on_error: bool = False,
    ) -> AuditLog | None:
        """Record a successful action."""
        return await self.log_action(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            metadata=metadata,
            raise_on_error=raise_on_error,
        )

    async def log_failure(
        self,
        action: AuditAction | str,
        entity_type: str,
        error_message: str,
        entity_id: UUID | str | None = None,
        tenant_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditLog | None:
        """Record a rejected action."""
        return await self.log_action(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            tenant_id=tenant_id,
            metadata=metadata,
            status=AuditStatus.FAILURE,
            error_message=error_message,
        )

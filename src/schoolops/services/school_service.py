"""Platform-level school creation."""

from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.schoolops.core.exceptions import (
    BatchShapeError,
    RowValidationError,
    persistence_error,
)
from src.schoolops.core.logging import bind_tenant_context, get_logger
from src.schoolops.core.security import normalize_tenant_slug
from src.schoolops.models import AuditAction, RoleGrantPolicy, Tenant, TenantRole
from src.schoolops.repositories import TenantBootstrapRepository, TenantRepository
from src.schoolops.services.audit_service import AuditService
from src.schoolops.services.identity_resolver import IdentityResolver
from src.schoolops.services.permission_service import PermissionService
from src.schoolops.services.provisioning_sequencer import ProvisioningSequencer
from src.schoolops.services.row_validation import ImportRow, clean_optional, validate_row

logger = get_logger(__name__)

DEFAULT_PRINCIPAL_NAME = "Principal"


class SchoolService:
    """Creates or updates a school and provisions its principal.

    Platform super admins only. A school created here counts as
    bootstrapped, so the bootstrap secret is not needed for it later.
    """

    def __init__(
        self,
        session: AsyncSession,
        tenant_repo: TenantRepository,
        bootstrap_repo: TenantBootstrapRepository,
        permissions: PermissionService,
        resolver: IdentityResolver,
        sequencer: ProvisioningSequencer,
        audit_service: AuditService,
    ):
        self.session = session
        self.tenant_repo = tenant_repo
        self.bootstrap_repo = bootstrap_repo
        self.permissions = permissions
        self.resolver = resolver
        self.sequencer = sequencer
        self.audit_service = audit_service

    async def create_school(
        self,
        actor_id: UUID,
        slug: str | None,
        name: str | None,
        principal_email: str,
        principal_password: str,
        principal_display_name: str | None = None,
        is_active: bool = True,
    ) -> tuple[Tenant, UUID]:
        """Upsert the school by slug and provision its principal.

        Returns:
            Tuple of (school, principal identity id)
        """
        normalized_slug = normalize_tenant_slug(slug)
        if not normalized_slug:
            raise BatchShapeError("Invalid slug")
        school_name = (name or "").strip() or normalized_slug

        await self.permissions.require_platform_admin(actor_id)

        display_name = clean_optional(principal_display_name) or DEFAULT_PRINCIPAL_NAME
        row = ImportRow(
            email=principal_email,
            password=principal_password,
            roles=[TenantRole.PRINCIPAL.value],
            display_name=display_name,
        )
        result = validate_row(row, 0)
        if not result.ok:
            raise RowValidationError(result.errors)

        try:
            tenant = await self.tenant_repo.upsert_by_slug(normalized_slug, school_name, is_active)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise persistence_error("School upsert", e) from e
        bind_tenant_context(tenant.id, tenant.slug)

        await self.resolver.prefetch([result.email])
        identity = await self.resolver.resolve(result.email, principal_password)
        await self.sequencer.apply(
            tenant_id=tenant.id,
            actor_id=actor_id,
            user_id=identity.user_id,
            email=result.email,
            password=principal_password,
            roles=result.normalized_roles,
            display_name=display_name,
            policy=RoleGrantPolicy.MERGE,
            audit_action=AuditAction.USER_CREATED_DIRECT,
            audit_metadata={"email": result.email, "role": TenantRole.PRINCIPAL.value},
        )

        try:
            await self.bootstrap_repo.lock(tenant.id, bootstrapped_by=actor_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise persistence_error("Bootstrap lock", e) from e

        await self.audit_service.log_success(
            AuditAction.SCHOOL_CREATED,
            entity_type="school",
            entity_id=tenant.slug,
            tenant_id=tenant.id,
            actor_id=actor_id,
            metadata={"principalEmail": result.email, "principalUserId": str(identity.user_id)},
        )
        logger.info("School created", principal_user_id=str(identity.user_id))
        return tenant, identity.user_id

"""School bootstrap, its unlock, and master-admin recovery.

Bootstrap and recovery have no authenticated caller. Access is granted by a
deployment secret compared in constant time. Unlocking needs a platform
super admin.
"""

from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.schoolops.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BatchShapeError,
    BootstrapLockedError,
    ConfigurationError,
    RowValidationError,
    TenantNotFoundError,
    persistence_error,
)
from src.schoolops.core.logging import bind_tenant_context, get_logger
from src.schoolops.core.security import normalize_email, normalize_tenant_slug, secret_matches
from src.schoolops.models import AuditAction, RoleGrantPolicy, Tenant, TenantRole
from src.schoolops.repositories import (
    PlatformAdminRepository,
    TenantBootstrapRepository,
    TenantRepository,
)
from src.schoolops.services.audit_service import AuditService
from src.schoolops.services.identity_resolver import IdentityResolver
from src.schoolops.services.provisioning_sequencer import ProvisioningSequencer
from src.schoolops.services.row_validation import (
    MAX_DISPLAY_NAME_LENGTH,
    clean_optional,
    credential_errors,
)

logger = get_logger(__name__)

# The first administrator of a school holds the governance roles as well
BOOTSTRAP_ROLES: tuple[str, ...] = (
    TenantRole.SUPER_ADMIN.value,
    TenantRole.SCHOOL_OWNER.value,
    TenantRole.PRINCIPAL.value,
)
DEFAULT_ADMIN_NAME = "Super Admin"


class BootstrapService:
    """First-administrator provisioning for a school, its unlock, and platform admin recovery."""

    def __init__(
        self,
        session: AsyncSession,
        tenant_repo: TenantRepository,
        bootstrap_repo: TenantBootstrapRepository,
        platform_admin_repo: PlatformAdminRepository,
        resolver: IdentityResolver,
        sequencer: ProvisioningSequencer,
        audit_service: AuditService,
        bootstrap_secret: str | None,
        recovery_secret: str | None,
    ):
        self.session = session
        self.tenant_repo = tenant_repo
        self.bootstrap_repo = bootstrap_repo
        self.platform_admin_repo = platform_admin_repo
        self.resolver = resolver
        self.sequencer = sequencer
        self.audit_service = audit_service
        self.bootstrap_secret = bootstrap_secret
        self.recovery_secret = recovery_secret

    async def _grant_platform_admin(self, user_id: UUID) -> None:
        try:
            await self.platform_admin_repo.grant(user_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise persistence_error("Platform admin grant", e) from e

    async def bootstrap(
        self,
        secret: str | None,
        school_slug: str | None,
        school_name: str | None,
        admin_email: str,
        admin_password: str,
        display_name: str | None = None,
        force: bool = False,
    ) -> tuple[Tenant, UUID]:
        """Create the school and its first administrator, then lock bootstrap.

        A locked school is refused unless ``force`` is set; forcing re-runs
        every step, which resets the administrator's password.

        Returns:
            Tuple of (school, administrator identity id)

        Raises:
            AuthenticationError: Secret unset or mismatched.
            BootstrapLockedError: The school was already bootstrapped.
        """
        if not secret_matches(secret, self.bootstrap_secret):
            logger.warning("Bootstrap rejected: invalid secret")
            await self.audit_service.log_failure(
                AuditAction.SCHOOL_BOOTSTRAPPED,
                entity_type="school",
                entity_id=normalize_tenant_slug(school_slug) or None,
                error_message="Invalid bootstrap secret",
            )
            raise AuthenticationError("Invalid bootstrap secret.")

        slug = normalize_tenant_slug(school_slug)
        if not slug:
            raise BatchShapeError("Invalid schoolSlug")

        email = normalize_email(admin_email)
        name = clean_optional(display_name) or DEFAULT_ADMIN_NAME
        errors = credential_errors(email, admin_password)
        if len(name) > MAX_DISPLAY_NAME_LENGTH:
            errors.append(f"display_name too long (max {MAX_DISPLAY_NAME_LENGTH})")
        if errors:
            raise RowValidationError(errors)

        existing = await self.tenant_repo.get_by_slug(slug)
        if existing is not None and not force and await self.bootstrap_repo.is_locked(existing.id):
            raise BootstrapLockedError("Bootstrap is locked for this school.")

        try:
            tenant = await self.tenant_repo.upsert_by_slug(
                slug, (school_name or "").strip() or slug
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise persistence_error("School upsert", e) from e
        bind_tenant_context(tenant.id, tenant.slug)

        await self.resolver.prefetch([email])
        identity = await self.resolver.resolve(email, admin_password)

        # The administrator is recorded as its own creator
        await self.sequencer.apply(
            tenant_id=tenant.id,
            actor_id=identity.user_id,
            user_id=identity.user_id,
            email=email,
            password=admin_password,
            roles=BOOTSTRAP_ROLES,
            display_name=name,
            policy=RoleGrantPolicy.MERGE,
            audit_action=AuditAction.SCHOOL_BOOTSTRAPPED,
            audit_metadata={"email": email, "roles": list(BOOTSTRAP_ROLES), "force": force},
        )
        await self._grant_platform_admin(identity.user_id)

        try:
            await self.bootstrap_repo.lock(tenant.id, bootstrapped_by=identity.user_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise persistence_error("Bootstrap lock", e) from e

        logger.info("School bootstrapped", admin_user_id=str(identity.user_id), force=force)
        return tenant, identity.user_id

    async def unlock(self, actor_id: UUID, school_slug: str | None) -> Tenant:
        """Allow bootstrap to run again for a school. Platform super admin only.

        Raises:
            BatchShapeError: Unusable slug.
            AuthorizationError: The actor is not a platform super admin.
            TenantNotFoundError: No school has the slug.
        """
        slug = normalize_tenant_slug(school_slug)
        if not slug:
            raise BatchShapeError("Invalid schoolSlug")
        if not await self.platform_admin_repo.is_platform_admin(actor_id):
            logger.info("Bootstrap unlock forbidden")
            raise AuthorizationError("Forbidden")

        tenant = await self.tenant_repo.get_by_slug(slug)
        if tenant is None:
            raise TenantNotFoundError("School not found")
        tenant_id = tenant.id
        bind_tenant_context(tenant_id, slug)

        try:
            await self.bootstrap_repo.unlock(tenant_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise persistence_error("Bootstrap unlock", e) from e

        await self.audit_service.log_success(
            AuditAction.BOOTSTRAP_UNLOCKED,
            entity_type="school",
            entity_id=slug,
            tenant_id=tenant_id,
            actor_id=actor_id,
            metadata={},
        )
        logger.info("Bootstrap unlocked")
        return tenant

    async def recover_master(self, secret: str | None, new_email: str, new_password: str) -> UUID:
        """Make ``new_email`` a platform super admin with the given password.

        An existing identity is re-used and its password reset.

        Raises:
            ConfigurationError: Recovery secret is not configured.
            AuthorizationError: Secret mismatched.
        """
        if not self.recovery_secret:
            raise ConfigurationError("Recovery secret not configured")
        if not secret_matches(secret, self.recovery_secret):
            logger.warning("Master recovery rejected: invalid secret")
            await self.audit_service.log_failure(
                AuditAction.MASTER_ADMIN_RECOVERY,
                entity_type="user",
                error_message="Invalid recovery secret",
                metadata={"email": normalize_email(new_email)},
            )
            raise AuthorizationError("Invalid recovery secret")

        email = normalize_email(new_email)
        errors = credential_errors(email, new_password)
        if errors:
            raise RowValidationError(errors)

        await self.resolver.prefetch([email])
        identity = await self.resolver.resolve(email, new_password)
        await self.sequencer.set_password(identity.user_id, new_password)
        await self._grant_platform_admin(identity.user_id)

        await self.audit_service.log_success(
            AuditAction.MASTER_ADMIN_RECOVERY,
            entity_type="user",
            entity_id=identity.user_id,
            metadata={"email": email, "created": identity.created},
        )
        logger.warning("Master admin recovered", user_id=str(identity.user_id))
        return identity.user_id

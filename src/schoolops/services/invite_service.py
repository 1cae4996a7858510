"""Direct single-identity invite into a tenant."""

from uuid import UUID

from src.schoolops.core.exceptions import BatchShapeError, RowValidationError, TenantNotFoundError
from src.schoolops.core.logging import bind_tenant_context, get_logger
from src.schoolops.core.security import normalize_tenant_slug
from src.schoolops.models import AuditAction, RoleGrantPolicy
from src.schoolops.repositories import TenantRepository
from src.schoolops.services.identity_resolver import IdentityResolver
from src.schoolops.services.permission_service import INVITE_ROLES, PermissionService
from src.schoolops.services.provisioning_sequencer import ProvisioningSequencer
from src.schoolops.services.row_validation import ImportRow, clean_optional, validate_row

logger = get_logger(__name__)


class InviteService:
    """Creates (or re-uses) one identity and attaches it to a tenant with a role.

    An invite adds the role to whatever the identity already holds in the
    tenant; it never revokes.
    """

    def __init__(
        self,
        tenant_repo: TenantRepository,
        permissions: PermissionService,
        resolver: IdentityResolver,
        sequencer: ProvisioningSequencer,
    ):
        self.tenant_repo = tenant_repo
        self.permissions = permissions
        self.resolver = resolver
        self.sequencer = sequencer

    async def invite(
        self,
        actor_id: UUID,
        tenant_slug: str | None,
        email: str,
        password: str,
        role: str,
        display_name: str | None = None,
    ) -> UUID:
        """Provision the identity and return its id.

        Raises:
            BatchShapeError: Unusable tenant slug.
            TenantNotFoundError: No tenant has the slug.
            AuthorizationError: The actor may not invite into the tenant.
            RowValidationError: Email, password, role or display name rejected.
            ProviderError: The identity provider refused the account.
            PersistenceError: A membership, role or directory write failed.
        """
        slug = normalize_tenant_slug(tenant_slug)
        if not slug:
            raise BatchShapeError("Invalid tenantSlug")

        tenant = await self.tenant_repo.get_by_slug(slug)
        if tenant is None:
            raise TenantNotFoundError("School not found")
        bind_tenant_context(tenant.id, tenant.slug)

        await self.permissions.require_tenant_access(actor_id, tenant.id, INVITE_ROLES)

        row = ImportRow(email=email, password=password, roles=[role], display_name=display_name)
        result = validate_row(row, 0)
        if not result.ok:
            raise RowValidationError(result.errors)

        await self.resolver.prefetch([result.email])
        identity = await self.resolver.resolve(result.email, password)
        await self.sequencer.apply(
            tenant_id=tenant.id,
            actor_id=actor_id,
            user_id=identity.user_id,
            email=result.email,
            password=password,
            roles=result.normalized_roles,
            display_name=clean_optional(display_name),
            policy=RoleGrantPolicy.MERGE,
            audit_action=AuditAction.USER_CREATED_DIRECT,
            audit_metadata={"email": result.email, "role": result.normalized_roles[0]},
        )

        logger.info(
            "Identity invited",
            user_id=str(identity.user_id),
            created=identity.created,
            role=result.normalized_roles[0],
        )
        return identity.user_id

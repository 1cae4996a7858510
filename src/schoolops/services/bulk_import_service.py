"""Bulk staff import: dry-run validation and committed provisioning of rows.

Rows are processed one at a time in input order. Validation is a gate:
a commit containing any invalid row is refused before a single side effect
runs. Past the gate, rows are independent and a failing row never stops
the rest of the batch.
"""

from dataclasses import dataclass
from uuid import UUID

from src.schoolops.core.exceptions import (
    BatchShapeError,
    PersistenceError,
    ProviderError,
    TenantNotFoundError,
)
from src.schoolops.core.logging import bind_tenant_context, get_logger
from src.schoolops.core.security import normalize_tenant_slug
from src.schoolops.models import AuditAction, ImportMode, RoleGrantPolicy
from src.schoolops.repositories import TenantRepository
from src.schoolops.services.audit_service import AuditService
from src.schoolops.services.identity_resolver import IdentityResolver
from src.schoolops.services.permission_service import BULK_IMPORT_ROLES, PermissionService
from src.schoolops.services.provisioning_sequencer import ProvisioningSequencer
from src.schoolops.services.row_validation import (
    ImportRow,
    RowResult,
    clean_optional,
    validate_row,
)

logger = get_logger(__name__)

DEFAULT_MAX_ROWS = 500
VALIDATION_GATE_ERROR = "Fix validation errors before committing"


@dataclass
class BulkImportResult:
    """Aggregated outcome of one bulk import call."""

    ok: bool
    mode: ImportMode
    results: list[RowResult]
    error: str | None = None


class BulkImportService:
    """Drives a bulk import for one tenant on behalf of one actor."""

    def __init__(
        self,
        tenant_repo: TenantRepository,
        permissions: PermissionService,
        resolver: IdentityResolver,
        sequencer: ProvisioningSequencer,
        audit_service: AuditService,
        max_rows: int = DEFAULT_MAX_ROWS,
    ):
        self.tenant_repo = tenant_repo
        self.permissions = permissions
        self.resolver = resolver
        self.sequencer = sequencer
        self.audit_service = audit_service
        self.max_rows = max_rows

    def check_shape(
        self, mode: str, tenant_slug: str | None, rows: list[ImportRow]
    ) -> tuple[ImportMode, str]:
        """Reject a malformed batch before any row is inspected.

        Returns:
            The parsed mode and the normalized tenant slug

        Raises:
            BatchShapeError: Unknown mode, unusable slug, empty or oversized row list.
        """
        try:
            import_mode = ImportMode(mode)
        except ValueError as e:
            raise BatchShapeError("Invalid mode") from e

        slug = normalize_tenant_slug(tenant_slug)
        if not slug:
            raise BatchShapeError("Invalid tenantSlug")
        if not rows:
            raise BatchShapeError("rows is required")
        if len(rows) > self.max_rows:
            raise BatchShapeError(f"Too many rows (max {self.max_rows})")
        return import_mode, slug

    async def execute(
        self,
        actor_id: UUID,
        mode: str,
        tenant_slug: str | None,
        rows: list[ImportRow],
        reason: str | None = None,
    ) -> BulkImportResult:
        """Run a dry run or a commit.

        Raises:
            BatchShapeError: Malformed batch.
            TenantNotFoundError: No tenant has the slug.
            AuthorizationError: The actor may not provision for the tenant.
        """
        import_mode, slug = self.check_shape(mode, tenant_slug, rows)

        tenant = await self.tenant_repo.get_by_slug(slug)
        if tenant is None:
            raise TenantNotFoundError("School not found")
        bind_tenant_context(tenant.id, tenant.slug)

        await self.permissions.require_tenant_access(actor_id, tenant.id, BULK_IMPORT_ROLES)

        results = [validate_row(row, index) for index, row in enumerate(rows)]
        invalid_count = sum(1 for result in results if not result.ok)
        logger.info(
            "Bulk import started",
            mode=import_mode.value,
            total_rows=len(results),
            invalid_rows=invalid_count,
        )

        if import_mode is ImportMode.DRY_RUN:
            return BulkImportResult(ok=invalid_count == 0, mode=import_mode, results=results)

        if invalid_count:
            logger.info("Bulk import commit refused", invalid_rows=invalid_count)
            return BulkImportResult(
                ok=False,
                mode=import_mode,
                results=results,
                error=VALIDATION_GATE_ERROR,
            )

        # A failed row step rolls back the shared session and expires the tenant
        return await self._commit(tenant.id, tenant.slug, actor_id, rows, results, reason)

    async def _commit(
        self,
        tenant_id: UUID,
        tenant_slug: str,
        actor_id: UUID,
        rows: list[ImportRow],
        results: list[RowResult],
        reason: str | None,
    ) -> BulkImportResult:
        created_count = 0
        processed_count = 0

        try:
            await self.resolver.prefetch(result.email for result in results)
        except ProviderError as e:
            logger.warning("Identity prefetch failed", error=e.message)
            for result in results:
                result.fail(e.message)
        else:
            for row, result in zip(rows, results, strict=True):
                processed_count += 1
                created = await self._commit_row(tenant_id, actor_id, row, result, reason)
                created_count += int(created)

        ok_count = sum(1 for result in results if result.ok)
        await self.audit_service.log_success(
            AuditAction.BULK_IMPORT_COMMIT,
            entity_type="school",
            entity_id=tenant_slug,
            tenant_id=tenant_id,
            actor_id=actor_id,
            metadata={
                "totalRows": len(results),
                "processedCount": processed_count,
                "createdCount": created_count,
                "okCount": ok_count,
                "errorCount": len(results) - ok_count,
                "reason": reason,
            },
        )
        logger.info(
            "Bulk import committed",
            total_rows=len(results),
            processed=processed_count,
            created=created_count,
            succeeded=ok_count,
            failed=len(results) - ok_count,
        )
        return BulkImportResult(
            ok=ok_count == len(results),
            mode=ImportMode.COMMIT,
            results=results,
        )

    async def _commit_row(
        self,
        tenant_id: UUID,
        actor_id: UUID,
        row: ImportRow,
        result: RowResult,
        reason: str | None,
    ) -> bool:
        """Resolve and provision one validated row. Returns whether an identity was created."""
        created = False
        try:
            identity = await self.resolver.resolve(result.email, row.password)
            created = identity.created
            await self.sequencer.apply(
                tenant_id=tenant_id,
                actor_id=actor_id,
                user_id=identity.user_id,
                email=result.email,
                password=row.password,
                roles=result.normalized_roles,
                display_name=clean_optional(row.display_name),
                policy=RoleGrantPolicy.REPLACE,
                audit_action=AuditAction.BULK_IMPORT_ROW,
                audit_metadata={
                    "email": result.email,
                    "roles": result.normalized_roles,
                    "reason": reason,
                },
            )
        except (ProviderError, PersistenceError) as e:
            result.fail(e.message)
            logger.warning(
                "Bulk import row failed",
                row_number=result.row_number,
                error_type=type(e).__name__,
                error=e.message,
            )
            return created

        result.user_id = identity.user_id
        return created

"""Provisioning API endpoints: bulk import, invite, school creation and tenant records."""

from typing import Annotated

from asgi_correlation_id import correlation_id
from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from src.schoolops.api.dependencies import (
    BulkImportServiceDep,
    CurrentActor,
    InviteServiceDep,
    RecordsServiceDep,
    SchoolServiceDep,
)
from src.schoolops.schemas import (
    AuditLogListResponse,
    AuditLogRead,
    BulkImportRequest,
    BulkImportResponse,
    CreateSchoolRequest,
    CreateSchoolResponse,
    DirectoryListResponse,
    DirectoryMemberRead,
    ImportRowIn,
    InviteRequest,
    InviteResponse,
    RowResultRead,
    SchoolRead,
)
from src.schoolops.services.row_validation import ImportRow

router = APIRouter(prefix="/provisioning", tags=["provisioning"])

CursorQuery = Annotated[str | None, Query(description="Pagination cursor")]
LimitQuery = Annotated[int, Query(ge=1, le=100, description="Items per page")]
ActionQuery = Annotated[str | None, Query(description="Filter by action type")]


def _to_import_row(row: ImportRowIn) -> ImportRow:
    return ImportRow(
        email=row.email,
        password=row.password,
        roles=list(row.roles),
        display_name=row.display_name,
        phone=row.phone,
    )


@router.post(
    "/bulk-import",
    response_model=BulkImportResponse,
    response_model_exclude_none=True,
    summary="Bulk import staff",
    description=(
        "Validate (dry_run) or provision (commit) up to the configured number of rows "
        "for one school. Row failures are reported per row."
    ),
    responses={
        400: {"description": "Malformed batch, unknown school or validation gate refused"},
        401: {"description": "Missing or invalid bearer token"},
        403: {"description": "Caller may not provision for this school"},
    },
)
async def bulk_import(
    request: BulkImportRequest,
    actor: CurrentActor,
    bulk_import_service: BulkImportServiceDep,
) -> BulkImportResponse | JSONResponse:
    """Run a bulk staff import."""
    result = await bulk_import_service.execute(
        actor_id=actor.id,
        mode=request.mode,
        tenant_slug=request.tenant_slug,
        rows=[_to_import_row(row) for row in request.rows],
        reason=request.reason,
    )
    response = BulkImportResponse(
        ok=result.ok,
        mode=result.mode.value,
        results=[RowResultRead.model_validate(r) for r in result.results],
        trace_id=correlation_id.get(),
        error=result.error,
    )
    if result.error:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=response.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
    return response


@router.post(
    "/invite",
    response_model=InviteResponse,
    summary="Provision a single user",
    description="Create or reuse an identity, set its password and grant one role.",
)
async def invite_user(
    request: InviteRequest,
    actor: CurrentActor,
    invite_service: InviteServiceDep,
) -> InviteResponse:
    """Provision one identity into a school."""
    user_id = await invite_service.invite(
        actor_id=actor.id,
        tenant_slug=request.tenant_slug,
        email=request.email,
        password=request.password,
        role=request.role,
        display_name=request.display_name,
    )
    return InviteResponse(user_id=user_id, trace_id=correlation_id.get())


@router.post(
    "/schools",
    response_model=CreateSchoolResponse,
    summary="Create school",
    description="Create or update a school by slug and provision its principal. "
    "Platform super admin only.",
)
async def create_school(
    request: CreateSchoolRequest,
    actor: CurrentActor,
    school_service: SchoolServiceDep,
) -> CreateSchoolResponse:
    """Create a school with its principal."""
    tenant, principal_id = await school_service.create_school(
        actor_id=actor.id,
        slug=request.slug,
        name=request.name,
        principal_email=request.principal_email,
        principal_password=request.principal_password,
        principal_display_name=request.principal_display_name,
        is_active=request.is_active,
    )
    return CreateSchoolResponse(
        school=SchoolRead.model_validate(tenant),
        principal_user_id=principal_id,
        trace_id=correlation_id.get(),
    )


@router.get(
    "/tenants/{slug}/directory",
    response_model=DirectoryListResponse,
    summary="List school directory",
)
async def list_directory(
    slug: str,
    actor: CurrentActor,
    records_service: RecordsServiceDep,
    cursor: CursorQuery = None,
    limit: LimitQuery = 50,
) -> DirectoryListResponse:
    """List provisioned identities with their current roles."""
    tenant = await records_service.get_managed_tenant(actor.id, slug)
    members, next_cursor, has_more = await records_service.list_directory(
        tenant, cursor=cursor, limit=limit
    )
    return DirectoryListResponse(
        items=[
            DirectoryMemberRead(
                user_id=m.entry.user_id,
                email=m.entry.email,
                display_name=m.entry.display_name,
                roles=m.roles,
                updated_at=m.entry.updated_at,
            )
            for m in members
        ],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.get(
    "/tenants/{slug}/audit-logs",
    response_model=AuditLogListResponse,
    summary="List provisioning audit logs",
)
async def list_audit_logs(
    slug: str,
    actor: CurrentActor,
    records_service: RecordsServiceDep,
    cursor: CursorQuery = None,
    limit: LimitQuery = 50,
    action: ActionQuery = None,
) -> AuditLogListResponse:
    """List audit records for a school, newest first."""
    tenant = await records_service.get_managed_tenant(actor.id, slug)
    logs, next_cursor, has_more = await records_service.list_audit_logs(
        tenant, cursor=cursor, limit=limit, action=action
    )
    return AuditLogListResponse(
        items=[AuditLogRead.model_validate(log) for log in logs],
        next_cursor=next_cursor,
        has_more=has_more,
    )

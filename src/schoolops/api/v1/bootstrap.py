"""Bootstrap endpoints.

Bootstrap and recovery run before any operator exists, so they authenticate
with shared secrets from configuration instead of a bearer token. Unlocking
a school takes a platform super admin token.
"""

from asgi_correlation_id import correlation_id
from fastapi import APIRouter

from src.schoolops.api.dependencies import BootstrapServiceDep, CurrentActor
from src.schoolops.core.security import normalize_email
from src.schoolops.schemas import (
    BootstrapRequest,
    BootstrapResponse,
    RecoverMasterRequest,
    RecoverMasterResponse,
    SchoolRead,
    UnlockBootstrapRequest,
    UnlockBootstrapResponse,
)

router = APIRouter(prefix="/bootstrap", tags=["bootstrap"])


@router.post(
    "",
    response_model=BootstrapResponse,
    summary="Bootstrap a school",
    responses={
        401: {"description": "Bootstrap secret missing or wrong"},
        409: {"description": "School already bootstrapped and force not set"},
    },
)
async def bootstrap_school(
    request: BootstrapRequest,
    bootstrap_service: BootstrapServiceDep,
) -> BootstrapResponse:
    """Create a school and its first administrator."""
    tenant, admin_id = await bootstrap_service.bootstrap(
        secret=request.bootstrap_secret,
        school_slug=request.school_slug,
        school_name=request.school_name,
        admin_email=request.admin_email,
        admin_password=request.admin_password,
        display_name=request.display_name,
        force=request.force,
    )
    return BootstrapResponse(
        school=SchoolRead.model_validate(tenant),
        admin_user_id=admin_id,
        trace_id=correlation_id.get(),
    )


@router.post(
    "/unlock",
    response_model=UnlockBootstrapResponse,
    summary="Unlock school bootstrap",
    responses={
        401: {"description": "Missing or invalid bearer token"},
        403: {"description": "Caller is not a platform super admin"},
    },
)
async def unlock_bootstrap(
    request: UnlockBootstrapRequest,
    actor: CurrentActor,
    bootstrap_service: BootstrapServiceDep,
) -> UnlockBootstrapResponse:
    """Let bootstrap run again for a school."""
    tenant = await bootstrap_service.unlock(actor.id, request.school_slug)
    return UnlockBootstrapResponse(
        school=SchoolRead.model_validate(tenant), trace_id=correlation_id.get()
    )


@router.post(
    "/recover-master",
    response_model=RecoverMasterResponse,
    summary="Recover platform master admin",
    responses={
        403: {"description": "Recovery secret wrong"},
        500: {"description": "Recovery secret not configured"},
    },
)
async def recover_master(
    request: RecoverMasterRequest,
    bootstrap_service: BootstrapServiceDep,
) -> RecoverMasterResponse:
    """Grant platform super admin to an identity, creating it if needed."""
    user_id = await bootstrap_service.recover_master(
        secret=request.recovery_secret,
        new_email=request.new_email,
        new_password=request.new_password,
    )
    return RecoverMasterResponse(
        user_id=user_id,
        email=normalize_email(request.new_email),
        trace_id=correlation_id.get(),
    )

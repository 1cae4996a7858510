from fastapi import APIRouter

from src.schoolops.api.v1 import bootstrap, provisioning

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(provisioning.router)
api_router.include_router(bootstrap.router)

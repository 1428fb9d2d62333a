"""
API package for the GOT-ID Cloud backend.

This package aggregates all API routers to be included in the FastAPI
application. The API is versioned under ``/v1``.
"""

from fastapi import APIRouter, Depends
from .v1.auth import router as auth_router
from .v1.health import router as health_router
from .v1.scans import router as scans_router
from .v1.observations import anpr_router, ai_router
from .v1.fusion import router as fusion_router
from ..core.auth import require_auth
from ..core.request_limits import enforce_json_body_limit

api_router = APIRouter()
protected = [Depends(require_auth), Depends(enforce_json_body_limit)]
api_router.include_router(health_router)
api_router.include_router(auth_router, dependencies=[Depends(enforce_json_body_limit)])
api_router.include_router(scans_router, dependencies=protected)
api_router.include_router(anpr_router, dependencies=protected)
api_router.include_router(ai_router, dependencies=protected)
api_router.include_router(fusion_router, dependencies=protected)

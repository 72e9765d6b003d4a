"""
API v1 router aggregation.

This module aggregates all v1 API endpoints under the /v1 prefix.
v1 represents the current stable API version.
"""

from fastapi import APIRouter

from app.routers.v1.load_testing import router as load_testing_router

router = APIRouter(prefix="/v1", tags=["v1"])

# Include all v1 routers
router.include_router(load_testing_router)

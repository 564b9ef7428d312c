"""
API Router

All endpoints are served under /api.
"""

from fastapi import APIRouter

from . import auth, users

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(users.router, prefix="/users", tags=["Users"])


@router.get("/status", tags=["System"])
async def status():
    """Liveness check."""
    return {"status": "ok"}

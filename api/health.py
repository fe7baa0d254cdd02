"""
Health API Router
Liveness endpoint; never reports 503 itself
"""

from fastapi import APIRouter

from database import DatabaseHealthCheck
from timeutils import local_now


router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """
    Service status with a live database probe
    """
    return {
        "status": "ok",
        "timestamp": local_now().isoformat(),
        "database": "connected" if DatabaseHealthCheck.is_connected() else "disconnected",
    }

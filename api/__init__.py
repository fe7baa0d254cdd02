"""
API Module
FastAPI routers for the MedTrack application
"""

from config import settings
from api.health import router as health_router
from api.auth import router as auth_router
from api.users import router as users_router
from api.medicines import router as medicines_router
from api.logs import router as logs_router
from api.analytics import router as analytics_router
from api.assistant import router as assistant_router

from api.deps import (
    get_db,
    get_current_user,
    get_llm_service,
    services,
)


__all__ = [
    # Routers
    "health_router",
    "auth_router",
    "users_router",
    "medicines_router",
    "logs_router",
    "analytics_router",
    "assistant_router",
    # Dependencies
    "get_db",
    "get_current_user",
    "get_llm_service",
    "services",
]


def include_routers(app):
    """
    Include all API routers in the FastAPI app

    Usage:
        from api import include_routers
        include_routers(app)
    """
    app.include_router(health_router, prefix=settings.API_PREFIX)
    app.include_router(auth_router, prefix=settings.API_PREFIX)
    app.include_router(users_router, prefix=settings.API_PREFIX)
    app.include_router(medicines_router, prefix=settings.API_PREFIX)
    app.include_router(logs_router, prefix=settings.API_PREFIX)
    app.include_router(analytics_router, prefix=settings.API_PREFIX)
    app.include_router(assistant_router, prefix=settings.API_PREFIX)

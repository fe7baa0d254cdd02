"""
MedTrack Backend
Main FastAPI application: medicines, dose logs, adherence analytics and assistant
"""

import logging
from contextlib import asynccontextmanager
from http import HTTPStatus
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError

# Configuration and database
from config import settings
from database import init_db, get_db_context, DatabaseHealthCheck
from services.llm_service import LLMService
from timeutils import local_now

from api import include_routers

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


# ==================== LIFESPAN ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENV}")

    # Initialize database; the API keeps serving /health and 503s otherwise
    try:
        init_db()
        app.state.database_available = DatabaseHealthCheck.is_connected()
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        app.state.database_available = False

    if app.state.database_available and settings.SEED_DEMO_DATA:
        from scripts.seed_data import seed_demo_user
        with get_db_context() as db:
            seed_demo_user(db)

    app.state.llm_service = LLMService(settings)

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}")


# ==================== APP INITIALIZATION ====================

app = FastAPI(
    title=settings.APP_NAME,
    description="""
    ## MedTrack API

    Personal medication adherence tracker.

    ### Features
    - **Medicines**: daily reminder times, snoozing, start/end dates
    - **Dose logs**: taken, missed and skipped doses
    - **Analytics**: daily completion, weekday and per-medicine adherence, timing delays
    - **Assistant**: natural-language medicine entry, health chat, insights, translation
    """,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def database_guard(request: Request, call_next):
    """Answer 503 for API calls while the database is unavailable"""
    path = request.url.path
    if (
        path.startswith(settings.API_PREFIX)
        and path != f"{settings.API_PREFIX}/health"
        and not getattr(request.app.state, "database_available", True)
    ):
        return _error_response(
            HTTPStatus.SERVICE_UNAVAILABLE,
            "The database is currently unavailable. Check DATABASE_URL and restart the server.",
            error="Database Connection Error",
        )
    return await call_next(request)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.debug(f"{request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
    return response


# Attach modular API routers (prefix /api)
include_routers(app)


# ==================== EXCEPTION HANDLERS ====================

def _error_response(status_code: int, message, error: str = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error or HTTPStatus(status_code).phrase,
            "message": message,
            "status_code": int(status_code),
            "timestamp": local_now().isoformat()
        }
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    return _error_response(exc.status_code, exc.detail)


@app.exception_handler(OperationalError)
async def database_exception_handler(request, exc: OperationalError):
    logger.error(f"Database error on {request.url.path}: {exc}")
    return _error_response(
        HTTPStatus.SERVICE_UNAVAILABLE,
        "The database is currently unavailable. Please try again shortly.",
        error="Database Connection Error",
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return _error_response(
        HTTPStatus.INTERNAL_SERVER_ERROR,
        "An unexpected error occurred" if not settings.DEBUG else str(exc),
    )


# ==================== ROOT ====================

@app.get("/", tags=["Health"])
async def root():
    """Root endpoint"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": f"{settings.API_PREFIX}/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )

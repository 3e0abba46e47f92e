"""FastAPI application entry point for calldesk.

Call-campaign administration REST API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from calldesk import __version__
from calldesk.api import register_exception_handlers
from calldesk.api.middleware import setup_middleware
from calldesk.config import get_settings
from calldesk.db import close_all_connections, get_db_session
from calldesk.logging import get_logger, setup_logging

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    settings = get_settings()
    logger.info(
        "Starting calldesk API",
        extra={
            "environment": settings.environment,
            "debug": settings.api_debug,
        },
    )

    yield

    logger.info("Shutting down calldesk API")
    await close_all_connections()


settings = get_settings()

app = FastAPI(
    title="calldesk API",
    description="Call-campaign administration REST API",
    version=__version__,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    openapi_url="/openapi.json" if settings.is_development else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
setup_middleware(app)
register_exception_handlers(app)


# =========================
# Health Check Endpoints
# =========================


@app.get("/health", tags=["Health"])
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "calldesk-api"}


@app.get("/health/ready", tags=["Health"])
async def readiness_check():
    """Readiness check that verifies database connectivity."""
    try:
        async with get_db_session() as session:
            await session.execute(text("SELECT 1"))
        postgres = "healthy"
    except Exception as e:
        postgres = f"unhealthy: {e}"

    healthy = postgres == "healthy"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "ready" if healthy else "not_ready",
            "checks": {"postgres": postgres},
        },
    )


# =========================
# API Routers
# =========================

from calldesk.api.clients import router as clients_router

app.include_router(clients_router, tags=["Clients"])


# =========================
# Root Endpoint
# =========================


@app.get("/", tags=["Root"])
async def root():
    """API root endpoint."""
    return {
        "name": "calldesk API",
        "version": __version__,
        "description": "Call-campaign administration",
        "docs": "/docs" if settings.is_development else None,
    }

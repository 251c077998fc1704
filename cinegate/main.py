"""FastAPI application — main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cinegate.config import get_settings
from cinegate.infrastructure.database import init_db
from cinegate.core.logging import configure_logging
from cinegate.core.middleware import setup_middleware
from cinegate.core.exceptions import register_exception_handlers

# Import all models so SQLAlchemy knows about them
from cinegate.domain.models.user import User  # noqa: F401
from cinegate.domain.models.access_code import AccessCode  # noqa: F401
from cinegate.domain.models.favorite import Favorite  # noqa: F401
from cinegate.domain.models.watch_history import WatchHistoryEntry  # noqa: F401

# Import routers
from cinegate.interfaces.api.auth import router as auth_router
from cinegate.interfaces.api.access_codes import router as access_codes_router
from cinegate.interfaces.api.admin import router as admin_login_router
from cinegate.interfaces.api.admin import admin_router
from cinegate.interfaces.api.library import router as library_router

settings = get_settings()

# Configure logging immediately
configure_logging()
logger = structlog.get_logger(__name__)


def _warn_missing_config() -> None:
    """Missing secrets do not stop startup; the affected endpoints answer 500 instead."""
    if not settings.JWT_SECRET:
        logger.warning("JWT_SECRET is not set; sign-in and registration are disabled")
    if not settings.ADMIN_USERNAME or not settings.ADMIN_PASSWORD:
        logger.warning("ADMIN_USERNAME/ADMIN_PASSWORD are not set; admin endpoints are disabled")
    if not settings.PLATFORM_PASSWORD:
        logger.warning("PLATFORM_PASSWORD is not set; password browsing mode is disabled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown events."""
    logger.info("Starting Cinegate...", env=settings.ENVIRONMENT)

    # Create DB tables (dev only; use migrations in production)
    init_db()
    logger.info("Database tables created/verified")

    _warn_missing_config()

    yield

    logger.info("Cinegate stopped")


app = FastAPI(
    title="Cinegate",
    description="API Backend — invite-only accounts, access codes and viewing library",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup Middleware (Correlation ID, Logging, CORS)
setup_middleware(app)

# Exception handling
register_exception_handlers(app)

# Include routers
app.include_router(auth_router)
app.include_router(access_codes_router)
app.include_router(admin_login_router)
app.include_router(admin_router)
app.include_router(library_router)


@app.get("/")
def root():
    return {
        "name": "Cinegate",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}

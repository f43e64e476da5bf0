"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from policyhub import __version__
from policyhub.api.middleware import (
    ErrorHandlingMiddleware,
    RequestContextMiddleware,
    RequestLoggingMiddleware,
    request_validation_exception_handler,
)
from policyhub.api.routers import (
    auth_router,
    drive_router,
    health_router,
    organizations_router,
    settings_router,
)
from policyhub.config.settings import Settings, get_settings
from policyhub.config.validation import get_configuration_summary, validate_or_raise
from policyhub.core.logging import setup_logging
from policyhub.db.config import close_db, configure_database, init_db
from policyhub.drive.proxy import build_drive_client

logger = structlog.get_logger("policyhub.api")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override (useful for testing)

    Returns:
        Configured FastAPI application

    Raises:
        ConfigurationError: If the settings fail startup validation

    Example:
        # Production
        app = create_app()

        # Testing
        app = create_app(settings=Settings(ENVIRONMENT="test"))

        # Run with uvicorn
        uvicorn policyhub.api.app:create_app --factory
    """
    if settings is None:
        settings = get_settings()

    validate_or_raise(settings)
    setup_logging(settings)

    app = FastAPI(
        title="PolicyHub API",
        description="Multi-tenant policy management backend",
        version=__version__,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=_lifespan,
    )

    # Store settings on app state for access in dependencies
    app.state.settings = settings
    app.state.drive_client = None

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

    _configure_middleware(app, settings)
    _configure_routers(app)

    return app


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database pool and Drive client on startup; release both on shutdown."""
    settings: Settings = app.state.settings
    logger.info("application_starting", **get_configuration_summary(settings))

    app.state.drive_client = build_drive_client(settings)
    configure_database(settings)
    try:
        await init_db()
        logger.info("database_ready")
    except (SQLAlchemyError, OSError) as e:
        logger.warning("database_initialization_skipped", error=str(e))

    yield

    logger.info("application_stopping")

    client = getattr(app.state, "drive_client", None)
    if client is not None:
        await client.aclose()
        app.state.drive_client = None

    await close_db()
    logger.info("database_connections_closed")


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure middleware stack.

    Middleware order (outermost to innermost execution):
    1. RequestContextMiddleware - Request id and ContextVar context
    2. RequestLoggingMiddleware - Logs all requests
    3. ErrorHandlingMiddleware - Converts exceptions to HTTP responses
    4. CORSMiddleware - Handles CORS (if configured)

    Starlette runs the last-added middleware first, so they are added in
    reverse order.
    """
    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestContextMiddleware)


def _configure_routers(app: FastAPI) -> None:
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(organizations_router)
    app.include_router(settings_router)
    app.include_router(drive_router)

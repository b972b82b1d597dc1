"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from url_manager.config import settings
from url_manager.core.database import check_db_connection, close_db
from url_manager.core.exceptions import AppException, DatabaseError
from url_manager.core.logging import get_logger, setup_logging
from url_manager.core.redis import close_redis, init_redis
from url_manager.middleware.request_logging import RequestLoggingMiddleware

# Setup logging on module load
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    if await check_db_connection():
        logger.info("database_connected")
    else:
        logger.error("database_connection_failed")

    # Visit tracking degrades to a no-op without Redis
    if settings.track_visits:
        try:
            await init_redis()
        except Exception as e:
            logger.warning("redis_init_failed", error=str(e))

    yield

    logger.info("application_shutting_down")
    await close_redis()
    await close_db()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Slug resolution, redirects and sitemaps",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )

    _setup_middleware(app)
    _setup_exception_handlers(app)
    _setup_routers(app)

    return app


def _setup_middleware(app: FastAPI) -> None:
    """Configure application middleware."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging (runs first, logs all requests)
    app.add_middleware(RequestLoggingMiddleware)


def _setup_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Handle AppException with RFC 7807 format."""
        error_detail = exc.detail
        if isinstance(error_detail, dict):
            error_detail["instance"] = str(request.url.path)

        return JSONResponse(
            status_code=exc.status_code,
            content=error_detail,
            headers={"Content-Type": "application/problem+json"},
        )

    @app.exception_handler(OperationalError)
    async def database_exception_handler(
        request: Request, exc: OperationalError
    ) -> JSONResponse:
        """Storage unavailable: connection lost, timeouts."""
        logger.error("database_unavailable", error=str(exc.orig), path=request.url.path)
        return await app_exception_handler(request, DatabaseError())

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("unhandled_exception", error=str(exc), path=request.url.path)

        return JSONResponse(
            status_code=500,
            content={
                "type": "https://api.urls.local/errors/internal_error",
                "title": "Internal Server Error",
                "status": 500,
                "detail": "An unexpected error occurred" if settings.is_production else str(exc),
                "instance": str(request.url.path),
            },
            headers={"Content-Type": "application/problem+json"},
        )


def _setup_routers(app: FastAPI) -> None:
    """Register routers. The public slug router must stay last."""
    from url_manager.modules.health.router import router as health_router
    from url_manager.modules.urls.public_router import router as public_router
    from url_manager.modules.urls.router import router as urls_router

    # Health checks (no prefix)
    app.include_router(health_router, tags=["Health"])

    app.include_router(
        urls_router,
        prefix=settings.api_prefix,
        tags=["URLs"],
    )

    # Catch-all front controller
    app.include_router(public_router)


# Create app instance
app = create_app()

"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cds_gateway.api.router import api_router
from cds_gateway.core.config import Settings, settings as default_settings
from cds_gateway.core.logging import setup_logging
from cds_gateway.hooks.repository import HookRepository
from cds_gateway.libraries.repository import LibraryRepository
from cds_gateway.middleware.rate_limit import RateLimitConfig, RateLimitMiddleware

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

SERVICE_NAME = "CDS Gateway"
SERVICE_VERSION = "0.1.0"


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application for the given settings."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Load libraries and hooks before serving requests."""
        logger.info(f"Starting {SERVICE_NAME} (env={settings.env})")

        libraries = LibraryRepository(
            check_interval=settings.library_check_interval_seconds,
        )
        libraries.load(settings.libraries_path)
        hooks = HookRepository()
        hooks.load(settings.hooks_path)

        app.state.libraries = libraries
        app.state.hooks = hooks

        yield

        logger.info(f"Shutting down {SERVICE_NAME}")

    app = FastAPI(
        title=f"{SERVICE_NAME} API",
        description="Serves compiled CQL libraries and CDS Hooks services",
        version=SERVICE_VERSION,
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
        openapi_url="/openapi.json" if settings.is_dev else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Health probes are outside the limited prefixes
    app.add_middleware(
        RateLimitMiddleware,
        config=RateLimitConfig(
            requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
        ),
        enabled=settings.rate_limit_enabled and not settings.is_test,
    )

    # CDS Hooks clients call from browser-based EHR apps
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Render HTTP errors as JSON."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail, "status": exc.status_code},
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unhandled exceptions."""
        logger.exception(f"Unhandled exception: {exc}")

        # Don't expose internal errors in production
        message = "Internal Server Error" if settings.is_prod else str(exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": message, "status": status.HTTP_500_INTERNAL_SERVER_ERROR},
        )

    app.include_router(api_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        """Service information."""
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "docs": "/docs" if settings.is_dev else "Disabled in production",
        }

    return app


app = create_app()

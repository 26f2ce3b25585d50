"""FastAPI application factory.

Creates the FastAPI app with lifespan management, exception handlers,
the reset token store, and OpenAPI metadata.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from portal_api import __version__
from portal_api.core.config import Settings, get_settings
from portal_api.core.database import dispose_engine, init_engine
from portal_api.core.logging import setup_logging
from portal_api.lib.reset_tokens import ResetTokenStore
from portal_api.services.errors import PortalError


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle: init engine on startup, dispose on shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_dir)
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)
    logger.info(f"Portal API {__version__} starting ({settings.environment})")

    yield

    await dispose_engine()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to build the app with; loaded from the
            environment when omitted.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Portal API",
        description="Registration, login, roles and password lifecycle for the portal",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.reset_token_store = ResetTokenStore(settings.password_reset_token_ttl_seconds)

    # Register exception handlers
    @app.exception_handler(PortalError)
    async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "code": exc.code},
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # Register middleware and routers
    from portal_api.api.router import create_router, setup_middleware

    setup_middleware(app, settings)
    app.include_router(create_router(settings))

    return app

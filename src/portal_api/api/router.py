"""Root API router with /api/v1 prefix and middleware registration."""

from fastapi import APIRouter, FastAPI

from portal_api.api.middleware import RateLimitMiddleware, SecurityHeadersMiddleware, setup_cors
from portal_api.core.config import Settings


def create_router(settings: Settings) -> APIRouter:
    """Create the root API router with all sub-routers included.

    Args:
        settings: Application settings.

    Returns:
        Configured API router.
    """
    from portal_api.api.v1.auth import router as auth_router
    from portal_api.api.v1.login_logs import login_logs_router
    from portal_api.api.v1.roles import roles_router
    from portal_api.api.v1.users import users_router

    root_router = APIRouter(prefix=settings.api_v1_prefix)
    root_router.include_router(auth_router)
    root_router.include_router(users_router)
    root_router.include_router(roles_router)
    root_router.include_router(login_logs_router)

    return root_router


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware on the FastAPI app.

    Args:
        app: The FastAPI application.
        settings: Application settings.
    """
    setup_cors(app, settings)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_minute=settings.rate_limit_per_minute,
        credential_requests_per_minute=settings.auth_rate_limit_per_minute,
        trusted_proxy_headers=settings.trusted_proxy_header_list,
    )

"""Authentication and password-lifecycle API endpoints.

POST /register, POST /login, POST /password-reset/{request,verify,confirm},
POST /password-policy/check, GET /auth/me, POST /auth/change-password,
GET /health, GET /info.
"""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from portal_api import __version__
from portal_api.api.middleware import get_client_ip
from portal_api.core.config import Settings, get_settings
from portal_api.core.dependencies import (
    get_async_session,
    get_current_user,
    get_email_sender,
    get_password_policy,
    get_reset_token_store,
)
from portal_api.lib.password_policy import PasswordPolicy
from portal_api.lib.reset_tokens import ResetTokenStore
from portal_api.models.user import User
from portal_api.schemas.auth import (
    AuthUserResponse,
    ChangePasswordRequest,
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    PasswordCheckRequest,
    PasswordCheckResponse,
    PasswordResetConfirmRequest,
    PasswordResetRequest,
    PasswordResetVerifyRequest,
    PasswordResetVerifyResponse,
    RegisterRequest,
)
from portal_api.schemas.common import ErrorResponse, MessageResponse
from portal_api.services import auth_service, password_reset_service
from portal_api.services.email_service import EmailSender
from portal_api.services.login_log_service import record_login_attempt_in_background

router = APIRouter(tags=["auth"])

_ERRORS = {400: {"model": ErrorResponse}}


@router.get("/health", status_code=200)
async def health_check() -> dict:
    """Health check endpoint (no authentication required)."""
    return {"status": "healthy"}


@router.get("/info", status_code=200)
async def info(
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict:
    """Return application version and environment."""
    return {"version": __version__, "environment": settings.environment}


@router.post(
    "/register",
    response_model=AuthUserResponse,
    status_code=201,
    responses={**_ERRORS, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def register(
    request: RegisterRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
    policy: Annotated[PasswordPolicy, Depends(get_password_policy)],
) -> AuthUserResponse:
    """Register a new user and return it with a session token."""
    user = await auth_service.register_user(session, request, settings, policy)
    return AuthUserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        verified=user.verified,
        roles=user.role_names,
        created_at=user.created_at,
        token=auth_service.issue_session_token(user, settings),
    )


@router.post("/login", response_model=LoginResponse, responses=_ERRORS)
async def login(
    payload: LoginRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> LoginResponse:
    """Authenticate with email and password.

    Each attempt against a known account is written to the login log after
    the response is sent.
    """
    ip = get_client_ip(request, settings.trusted_proxy_header_list)
    user_agent = request.headers.get("user-agent")

    async def record_attempt(user: User, success: bool) -> None:
        entry = {"user_id": user.id, "success": success, "ip": ip, "user_agent": user_agent}
        if success:
            background_tasks.add_task(record_login_attempt_in_background, **entry)
        else:
            # error responses do not run background tasks
            await record_login_attempt_in_background(**entry)

    result = await auth_service.login_user(
        session,
        payload.email,
        payload.password,
        settings,
        record_attempt=record_attempt,
    )
    user = result.user
    return LoginResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        verified=user.verified,
        roles=user.role_names,
        permissions=user.permissions,
        created_at=user.created_at,
        token=result.token,
        password_age_days=result.password_age_days,
        password_change_recommended=result.password_change_recommended,
    )


@router.post(
    "/password-reset/request",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def request_password_reset(
    payload: PasswordResetRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[ResetTokenStore, Depends(get_reset_token_store)],
    sender: Annotated[EmailSender, Depends(get_email_sender)],
) -> MessageResponse:
    """Email a single-use password reset link."""
    await password_reset_service.request_password_reset(session, payload.email, store, sender, settings)
    return MessageResponse(message="Password reset email sent")


@router.post("/password-reset/verify", response_model=PasswordResetVerifyResponse, responses=_ERRORS)
async def verify_password_reset(
    payload: PasswordResetVerifyRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[ResetTokenStore, Depends(get_reset_token_store)],
) -> PasswordResetVerifyResponse:
    """Consume an emailed reset token and return a short-lived reset grant."""
    grant = await password_reset_service.verify_reset_token(session, payload.token, store, settings)
    return PasswordResetVerifyResponse(
        reset_grant=grant,
        expires_in=settings.password_reset_token_ttl_seconds,
    )


@router.post("/password-reset/confirm", response_model=MessageResponse, responses=_ERRORS)
async def confirm_password_reset(
    payload: PasswordResetConfirmRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
    policy: Annotated[PasswordPolicy, Depends(get_password_policy)],
) -> MessageResponse:
    """Set a new password using a reset grant."""
    await password_reset_service.confirm_password_reset(
        session, payload.reset_grant, payload.password, settings, policy
    )
    return MessageResponse(message="Password updated")


@router.post("/password-policy/check", response_model=PasswordCheckResponse)
async def check_password(
    payload: PasswordCheckRequest,
    policy: Annotated[PasswordPolicy, Depends(get_password_policy)],
) -> PasswordCheckResponse:
    """Advisory strength check; nothing is stored."""
    assessment = await policy.evaluate(payload.password)
    return PasswordCheckResponse(
        ok=assessment.ok,
        failures=assessment.failures,
        message=assessment.message,
        breach_checked=assessment.breach_checked,
    )


@router.get("/auth/me", response_model=CurrentUserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CurrentUserResponse:
    """Get the currently authenticated user's profile."""
    age = await auth_service.current_password_age(session, current_user)
    return CurrentUserResponse(
        id=current_user.id,
        name=current_user.name,
        email=current_user.email,
        verified=current_user.verified,
        roles=current_user.role_names,
        permissions=current_user.permissions,
        created_at=current_user.created_at,
        password_age_days=age,
        password_change_recommended=age is not None and age >= settings.password_max_age_days,
    )


@router.post("/auth/change-password", response_model=MessageResponse, responses=_ERRORS)
async def change_password(
    payload: ChangePasswordRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
    policy: Annotated[PasswordPolicy, Depends(get_password_policy)],
) -> MessageResponse:
    """Change the authenticated user's password."""
    await auth_service.change_password(
        session,
        current_user,
        payload.current_password,
        payload.new_password,
        settings,
        policy,
    )
    return MessageResponse(message="Password updated")

"""FastAPI dependency injection for sessions, auth, permissions and app services."""

import uuid
from collections.abc import AsyncGenerator, Callable
from typing import Annotated, Any

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from portal_api.core.config import Settings, get_settings
from portal_api.core.database import get_session_factory
from portal_api.core.security import ACCESS_TOKEN_TYPE, decode_token
from portal_api.lib.password_policy import PasswordPolicy
from portal_api.lib.reset_tokens import ResetTokenStore
from portal_api.models.role import Permission
from portal_api.models.user import User
from portal_api.services.auth_service import build_password_policy
from portal_api.services.email_service import EmailSender, SmtpEmailSender
from portal_api.services.user_service import get_user

bearer_scheme = HTTPBearer(auto_error=False)


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Yield an async database session with per-request lifecycle."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> User:
    """Decode the bearer session token and return the authenticated user.

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired, of
            the wrong type, or names a user that no longer exists.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception
    try:
        payload = decode_token(credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm)
        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise credentials_exception
        user_id = uuid.UUID(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, TypeError, ValueError) as exc:
        raise credentials_exception from exc

    user = await get_user(session, user_id)
    if user is None:
        raise credentials_exception
    return user


def require_permission(*permissions: Permission) -> Callable[..., Any]:
    """Factory for a dependency requiring every listed permission.

    Permissions are read from the user's current roles, not from the token,
    so role changes take effect immediately.
    """

    async def permission_checker(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        granted = set(current_user.permissions)
        missing = [str(p) for p in permissions if str(p) not in granted]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission: {', '.join(missing)}",
            )
        return current_user

    return permission_checker


def get_reset_token_store(request: Request) -> ResetTokenStore:
    """Return the reset token store created by the app factory."""
    return request.app.state.reset_token_store


def get_password_policy(settings: Annotated[Settings, Depends(get_settings)]) -> PasswordPolicy:
    return build_password_policy(settings)


def get_email_sender(settings: Annotated[Settings, Depends(get_settings)]) -> EmailSender:
    return SmtpEmailSender(settings)

"""Password reset flow.

request -> verify -> confirm. The emailed token is opaque and single use;
verifying it yields a signed grant bound to the user's latest password
history entry, and storing a new password retires that grant.
"""

import uuid

import jwt
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from portal_api.core.config import Settings
from portal_api.core.security import RESET_GRANT_TYPE, create_reset_grant, decode_token
from portal_api.lib.password_policy import PasswordPolicy
from portal_api.lib.reset_tokens import ResetTokenStore
from portal_api.services.auth_service import set_new_password
from portal_api.services.email_service import EmailSender, build_reset_url, send_password_reset_email
from portal_api.services.errors import (
    EmailDeliveryError,
    InvalidOrExpiredTokenError,
    NoPasswordHistoryError,
    UserNotFoundError,
)
from portal_api.services.password_history_service import latest_entry
from portal_api.services.user_service import get_user, get_user_by_email


async def request_password_reset(
    session: AsyncSession,
    email: str,
    store: ResetTokenStore,
    sender: EmailSender,
    settings: Settings,
) -> None:
    """Issue a reset token and email the link to the user.

    Raises:
        UserNotFoundError: If no user has that email.
        EmailDeliveryError: If the email could not be sent; the token is
            discarded so it cannot be used.
    """
    user = await get_user_by_email(session, email)
    if user is None:
        raise UserNotFoundError

    token = store.issue(user.email)
    try:
        await send_password_reset_email(
            sender,
            user.email,
            build_reset_url(settings.frontend_url, token),
            store.ttl_seconds,
        )
    except EmailDeliveryError:
        store.discard(token)
        raise
    logger.info(f"Issued password reset token for user {user.id}")


async def verify_reset_token(
    session: AsyncSession,
    token: str,
    store: ResetTokenStore,
    settings: Settings,
) -> str:
    """Consume a reset token and return a password-reset grant.

    Returns:
        A signed grant valid for ``password_reset_token_ttl_seconds``.

    Raises:
        InvalidOrExpiredTokenError: If the token is unknown, used or expired,
            or its user no longer exists.
        NoPasswordHistoryError: If the user has no stored password.
    """
    email = store.consume(token)
    if email is None:
        raise InvalidOrExpiredTokenError
    user = await get_user_by_email(session, email)
    if user is None:
        raise InvalidOrExpiredTokenError
    entry = await latest_entry(session, user.id)
    if entry is None:
        raise NoPasswordHistoryError

    logger.info(f"Reset token verified for user {user.id}")
    return create_reset_grant(
        subject=str(user.id),
        history_entry_id=str(entry.id),
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_seconds=settings.password_reset_token_ttl_seconds,
    )


async def confirm_password_reset(
    session: AsyncSession,
    grant: str,
    password: str,
    settings: Settings,
    policy: PasswordPolicy,
) -> None:
    """Store a new password authorized by a reset grant.

    Raises:
        InvalidOrExpiredTokenError: If the grant is invalid, expired or
            already used.
        WeakPasswordError: If the password fails the policy.
        PasswordReusedError: If the password was used recently.
    """
    try:
        payload = decode_token(grant, settings.jwt_secret_key, settings.jwt_algorithm)
    except jwt.InvalidTokenError:
        raise InvalidOrExpiredTokenError from None
    if payload.get("type") != RESET_GRANT_TYPE:
        raise InvalidOrExpiredTokenError

    try:
        user_id = uuid.UUID(payload["sub"])
        history_entry_id = uuid.UUID(payload["phid"])
    except (KeyError, TypeError, ValueError):
        raise InvalidOrExpiredTokenError from None

    # held until set_new_password commits, so a concurrent confirm sees the new entry
    user = await get_user(session, user_id, for_update=True)
    if user is None:
        raise InvalidOrExpiredTokenError
    entry = await latest_entry(session, user.id)
    if entry is None or entry.id != history_entry_id:
        logger.warning(f"Rejected stale password reset grant for user {user.id}")
        raise InvalidOrExpiredTokenError

    await set_new_password(session, user, password, settings, policy)
    logger.info(f"Password reset completed for user {user.id}")

"""Authentication service.

Handles registration, login, session token issuance and password changes.
Every successful password set goes through ``set_new_password`` so the
user's hash and the history ledger never diverge.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal_api.core.config import Settings
from portal_api.core.security import create_access_token, hash_password, verify_password
from portal_api.lib.password_policy import BreachChecker, PasswordPolicy
from portal_api.models.user import User
from portal_api.schemas.auth import RegisterRequest
from portal_api.services.errors import (
    DuplicateEmailError,
    EmailNotFoundError,
    InvalidCredentialsError,
    MissingCredentialsError,
    NoPasswordHistoryError,
    PasswordReusedError,
    WeakPasswordError,
)
from portal_api.services.password_history_service import (
    append_entry,
    is_reused,
    latest_entry,
    password_age_days,
)
from portal_api.services.role_service import resolve_roles
from portal_api.services.user_service import get_user_by_email, normalize_email

RecordAttempt = Callable[[User, bool], Awaitable[None]]


@dataclass
class LoginResult:
    """Successful login outcome."""

    user: User
    token: str
    password_age_days: int | None
    password_change_recommended: bool


def build_password_policy(settings: Settings) -> PasswordPolicy:
    """Construct the password policy described by the settings."""
    checker = None
    if settings.password_breach_check_enabled:
        checker = BreachChecker(settings.breach_api_url, timeout=settings.breach_check_timeout)
    return PasswordPolicy(
        min_length=settings.password_min_length,
        dictionary_check=settings.password_dictionary_check_enabled,
        breach_checker=checker,
        block_on_upstream_failure=settings.block_on_upstream_failure,
    )


async def enforce_password_policy(policy: PasswordPolicy, password: str) -> None:
    """Evaluate a password and reject it if any check fails.

    Raises:
        WeakPasswordError: With a message listing the failed requirements.
    """
    assessment = await policy.evaluate(password)
    if not assessment.ok:
        raise WeakPasswordError(assessment.message)


def issue_session_token(user: User, settings: Settings) -> str:
    """Sign a session token naming the user and their roles."""
    return create_access_token(
        subject=str(user.id),
        roles=user.role_names,
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.jwt_access_token_expire_minutes,
    )


async def register_user(
    session: AsyncSession,
    request: RegisterRequest,
    settings: Settings,
    policy: PasswordPolicy,
) -> User:
    """Create a user with an initial password history entry.

    Args:
        session: The database session.
        request: Registration data (email already normalized).
        settings: Application settings.
        policy: Password policy to enforce.

    Returns:
        The created User with roles loaded.

    Raises:
        DuplicateEmailError: If the email is already registered.
        RoleNotFoundError: If a requested (or the default) role does not exist.
        WeakPasswordError: If the password fails the policy.
    """
    email = normalize_email(request.email)
    if await get_user_by_email(session, email) is not None:
        raise DuplicateEmailError

    roles = await resolve_roles(session, request.roles or [settings.default_role_name])
    await enforce_password_policy(policy, request.password)

    hashed = hash_password(request.password)
    user = User(
        name=request.name,
        email=email,
        sex=request.sex,
        national_id=request.national_id,
        hashed_password=hashed,
        roles=roles,
    )
    session.add(user)
    try:
        await session.flush()
        append_entry(session, user, hashed)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise DuplicateEmailError from None
    await session.refresh(user)
    logger.info(f"Registered user {user.id} with roles {user.role_names}")
    return user


async def login_user(
    session: AsyncSession,
    email: str | None,
    password: str | None,
    settings: Settings,
    *,
    record_attempt: RecordAttempt | None = None,
) -> LoginResult:
    """Authenticate a user against their latest password history entry.

    Args:
        session: The database session.
        email: Submitted email (may be missing).
        password: Submitted plaintext password (may be missing).
        settings: Application settings.
        record_attempt: Called with ``(user, success)`` once the account
            is known, so the caller can write the login log.

    Returns:
        The LoginResult with a signed session token.

    Raises:
        MissingCredentialsError: If email or password is absent.
        InvalidCredentialsError: If the password is wrong, or the email is
            unknown and ``login_reveal_unknown_email`` is off.
        EmailNotFoundError: If the email is unknown and
            ``login_reveal_unknown_email`` is on.
        NoPasswordHistoryError: If the user has no stored password.
    """
    if not email or not email.strip() or not password:
        raise MissingCredentialsError

    user = await get_user_by_email(session, email)
    if user is None:
        logger.info("Login rejected: unknown email")
        if settings.login_reveal_unknown_email:
            raise EmailNotFoundError
        raise InvalidCredentialsError

    entry = await latest_entry(session, user.id)
    if entry is None:
        logger.error(f"User {user.id} has no password history entry")
        raise NoPasswordHistoryError

    if not verify_password(password, entry.hashed_password):
        logger.info(f"Login rejected for user {user.id}: wrong password")
        if record_attempt is not None:
            await record_attempt(user, False)
        raise InvalidCredentialsError

    age = password_age_days(entry)
    result = LoginResult(
        user=user,
        token=issue_session_token(user, settings),
        password_age_days=age,
        password_change_recommended=age >= settings.password_max_age_days,
    )
    if record_attempt is not None:
        await record_attempt(user, True)
    logger.info(f"User {user.id} logged in")
    return result


async def set_new_password(
    session: AsyncSession,
    user: User,
    password: str,
    settings: Settings,
    policy: PasswordPolicy,
) -> None:
    """Validate and store a new password for an existing user.

    Raises:
        WeakPasswordError: If the password fails the policy.
        PasswordReusedError: If it matches one of the recent history entries.
    """
    await enforce_password_policy(policy, password)
    if await is_reused(session, user.id, password, settings.password_history_depth):
        raise PasswordReusedError

    hashed = hash_password(password)
    user.hashed_password = hashed
    append_entry(session, user, hashed)
    await session.commit()
    logger.info(f"Stored new password for user {user.id}")


async def change_password(
    session: AsyncSession,
    user: User,
    current_password: str,
    new_password: str,
    settings: Settings,
    policy: PasswordPolicy,
) -> None:
    """Change an authenticated user's password.

    Raises:
        NoPasswordHistoryError: If the user has no stored password.
        InvalidCredentialsError: If ``current_password`` is wrong.
        WeakPasswordError: If the new password fails the policy.
        PasswordReusedError: If the new password was used recently.
    """
    entry = await latest_entry(session, user.id)
    if entry is None:
        raise NoPasswordHistoryError
    if not verify_password(current_password, entry.hashed_password):
        raise InvalidCredentialsError("Current password is incorrect")
    await set_new_password(session, user, new_password, settings, policy)


async def current_password_age(session: AsyncSession, user: User) -> int | None:
    """Days since the user's latest password set, or None without history."""
    entry = await latest_entry(session, user.id)
    return password_age_days(entry) if entry is not None else None


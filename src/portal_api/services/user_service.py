"""User lookup and administration."""

import uuid

from loguru import logger
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal_api.models.user import User
from portal_api.services.errors import UserNotFoundError
from portal_api.services.role_service import resolve_roles

LIKE_ESCAPE = "\\"


def normalize_email(email: str) -> str:
    """Canonical stored form of an email address."""
    return email.strip().lower()


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so ``value`` matches literally."""
    return value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2).replace("%", f"{LIKE_ESCAPE}%").replace("_", f"{LIKE_ESCAPE}_")


async def get_user(session: AsyncSession, user_id: uuid.UUID, *, for_update: bool = False) -> User | None:
    """Get a user by ID.

    Args:
        session: The database session.
        user_id: The UUID of the user to retrieve.
        for_update: Lock the row until the transaction ends (``SELECT ... FOR UPDATE``).

    Returns:
        The User if found, None otherwise.
    """
    query = select(User).where(User.id == user_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def get_user_or_404(session: AsyncSession, user_id: uuid.UUID) -> User:
    user = await get_user(session, user_id)
    if user is None:
        raise UserNotFoundError
    return user


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    """Get a user by email (normalized before lookup), roles loaded."""
    result = await session.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def list_users(
    session: AsyncSession,
    *,
    search: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[User], int]:
    """List users with optional search and pagination.

    Args:
        session: The database session.
        search: Case-insensitive substring matched against name or email.
        page: Page number (1-based).
        page_size: Items per page.

    Returns:
        Tuple of (users list, total count), newest users first.
    """
    query = select(User)
    count_query = select(func.count(User.id))
    if search and search.strip():
        pattern = f"%{escape_like(search.strip().lower())}%"
        condition = or_(
            func.lower(User.name).like(pattern, escape=LIKE_ESCAPE),
            User.email.like(pattern, escape=LIKE_ESCAPE),
        )
        query = query.where(condition)
        count_query = count_query.where(condition)

    total = (await session.execute(count_query)).scalar_one()

    offset = (page - 1) * page_size
    result = await session.execute(query.order_by(User.created_at.desc()).offset(offset).limit(page_size))
    users = list(result.scalars().all())
    return users, total


async def update_user(
    session: AsyncSession,
    user: User,
    *,
    roles: list[str] | None = None,
    verified: bool | None = None,
) -> User:
    """Update a user's roles and/or verification flag.

    Raises:
        RoleNotFoundError: If any role name is unknown.
    """
    if roles is not None:
        user.roles = await resolve_roles(session, roles)
    if verified is not None:
        user.verified = verified
    await session.commit()
    await session.refresh(user)
    logger.info(f"Updated user {user.id}: roles={user.role_names} verified={user.verified}")
    return user

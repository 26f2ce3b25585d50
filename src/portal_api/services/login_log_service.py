"""Login log service.

Records every login attempt for a known account and queries the trail.
"""

import uuid

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal_api.core.database import session_scope
from portal_api.models.login_log import LoginLogEntry


async def record_login_attempt(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    success: bool,
    ip: str | None = None,
    user_agent: str | None = None,
) -> LoginLogEntry:
    """Create an immutable login log record.

    Args:
        session: The database session.
        user_id: The account the attempt was made against.
        success: Whether the credentials were accepted.
        ip: Client IP address.
        user_agent: Client User-Agent header.

    Returns:
        The created LoginLogEntry.
    """
    entry = LoginLogEntry(
        user_id=user_id,
        success=success,
        ip=ip,
        user_agent=user_agent[:512] if user_agent else None,
    )
    session.add(entry)
    await session.commit()
    return entry


async def record_login_attempt_in_background(
    *,
    user_id: uuid.UUID,
    success: bool,
    ip: str | None = None,
    user_agent: str | None = None,
) -> None:
    """Record a login attempt after the response has been sent.

    Uses its own session. Failures are logged and not raised.
    """
    try:
        async with session_scope() as session:
            await record_login_attempt(session, user_id=user_id, success=success, ip=ip, user_agent=user_agent)
    except Exception:
        logger.exception(f"Failed to record login attempt for user {user_id}")


async def list_login_logs(
    session: AsyncSession,
    *,
    user_id: uuid.UUID | None = None,
    success: bool | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[LoginLogEntry], int]:
    """Query login logs with optional filters, newest first.

    Returns:
        Tuple of (login log records, total count).
    """
    query = select(LoginLogEntry)
    count_query = select(func.count(LoginLogEntry.id))

    if user_id is not None:
        query = query.where(LoginLogEntry.user_id == user_id)
        count_query = count_query.where(LoginLogEntry.user_id == user_id)
    if success is not None:
        query = query.where(LoginLogEntry.success == success)
        count_query = count_query.where(LoginLogEntry.success == success)

    total = (await session.execute(count_query)).scalar_one()

    offset = (page - 1) * page_size
    query = query.order_by(LoginLogEntry.timestamp.desc()).offset(offset).limit(page_size)
    result = await session.execute(query)
    return list(result.scalars().all()), total

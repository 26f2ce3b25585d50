"""Password history ledger.

Entries are appended, never updated. The newest entry is the password
of record for login; older entries back reuse prevention.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal_api.core.security import verify_password
from portal_api.models.password_history import PasswordHistoryEntry
from portal_api.models.user import User


def append_entry(session: AsyncSession, user: User, hashed_password: str) -> PasswordHistoryEntry:
    """Stage one history entry for ``user``; the caller commits.

    Args:
        session: The database session.
        user: A flushed user (its id must be assigned).
        hashed_password: The bcrypt hash being stored.

    Returns:
        The pending PasswordHistoryEntry.
    """
    entry = PasswordHistoryEntry(user_id=user.id, hashed_password=hashed_password)
    session.add(entry)
    return entry


async def recent_entries(session: AsyncSession, user_id: uuid.UUID, limit: int) -> list[PasswordHistoryEntry]:
    """Return up to ``limit`` entries for a user, newest first."""
    result = await session.execute(
        select(PasswordHistoryEntry)
        .where(PasswordHistoryEntry.user_id == user_id)
        .order_by(PasswordHistoryEntry.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def latest_entry(session: AsyncSession, user_id: uuid.UUID) -> PasswordHistoryEntry | None:
    """Return the user's most recent entry, or None if the ledger is empty."""
    entries = await recent_entries(session, user_id, limit=1)
    return entries[0] if entries else None


async def is_reused(session: AsyncSession, user_id: uuid.UUID, password: str, depth: int) -> bool:
    """Check a plaintext password against the last ``depth`` entries.

    Args:
        session: The database session.
        user_id: Owner of the ledger.
        password: Candidate plaintext password.
        depth: How many recent entries to compare against.

    Returns:
        True if the password matches any of them.
    """
    entries = await recent_entries(session, user_id, limit=depth)
    return any(verify_password(password, entry.hashed_password) for entry in entries)


def password_age_days(entry: PasswordHistoryEntry, now: datetime | None = None) -> int:
    """Whole days elapsed since the entry was written."""
    now = now or datetime.now(UTC)
    created = entry.created_at
    # SQLite hands back naive datetimes; stored values are UTC
    if created.tzinfo is None:
        created = created.replace(tzinfo=UTC)
    return max(0, (now - created).days)

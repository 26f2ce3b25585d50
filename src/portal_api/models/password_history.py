"""PasswordHistoryEntry model: append-only ledger of password hashes."""

import uuid

from sqlalchemy import ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from portal_api.models.base import Base, CreatedAtMixin, UUIDMixin


class PasswordHistoryEntry(Base, UUIDMixin, CreatedAtMixin):
    """One stored password hash. Write-only (no updates or deletes)."""

    __tablename__ = "password_history"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    __table_args__ = (Index("ix_password_history_user_created", "user_id", "created_at"),)

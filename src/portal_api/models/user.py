"""User model: the credential store."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal_api.models.base import Base, CreatedAtMixin, UUIDMixin
from portal_api.models.role import user_roles

if TYPE_CHECKING:
    from portal_api.models.role import Role


class User(Base, UUIDMixin, CreatedAtMixin):
    """Registered portal user.

    ``email`` is stored trimmed and lower-cased; the unique index is the
    final arbiter of uniqueness when two registrations race.
    ``hashed_password`` mirrors the newest password history entry.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    sex: Mapped[str] = mapped_column(String(50), nullable=False)
    national_id: Mapped[str] = mapped_column(String(20), nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")

    roles: Mapped[list["Role"]] = relationship(secondary=user_roles, lazy="selectin")  # noqa: F821

    @property
    def role_names(self) -> list[str]:
        return [role.name for role in self.roles]

    @property
    def permissions(self) -> list[str]:
        """Union of role permissions, first-seen order."""
        seen: dict[str, None] = {}
        for role in self.roles:
            for permission in role.permissions or []:
                seen.setdefault(permission, None)
        return list(seen)

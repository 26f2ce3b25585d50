"""Role model: a named bundle of permission strings attached to users."""

from enum import StrEnum

from sqlalchemy import JSON, Column, ForeignKey, String, Table, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from portal_api.models.base import Base, CreatedAtMixin, UUIDMixin


class Permission(StrEnum):
    """Closed set of permission strings a role may grant."""

    USERS_READ = "users:read"
    USERS_WRITE = "users:write"
    ROLES_READ = "roles:read"
    ROLES_WRITE = "roles:write"
    LOGIN_LOGS_READ = "login_logs:read"
    CONTENT_READ = "content:read"
    CONTENT_WRITE = "content:write"


# Deleting a role removes its association rows, never the users.
user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Uuid(as_uuid=True), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base, UUIDMixin, CreatedAtMixin):
    """Named permission bundle.

    Attributes:
        name: Unique display name (e.g., "Student").
        description: Optional free-text description.
        permissions: Ordered list of ``Permission`` values.
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    permissions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

"""ORM models. Importing this package registers every table on Base.metadata for Alembic."""

from portal_api.models.login_log import LoginLogEntry
from portal_api.models.password_history import PasswordHistoryEntry
from portal_api.models.role import Permission, Role
from portal_api.models.user import User

__all__ = [
    "LoginLogEntry",
    "PasswordHistoryEntry",
    "Permission",
    "Role",
    "User",
]

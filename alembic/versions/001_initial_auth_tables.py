"""Initial migration: users, roles, user_roles, password_history, login_logs.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""

import uuid
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("sex", sa.String(50), nullable=False),
        sa.Column("national_id", sa.String(20), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("verified", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "roles",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("permissions", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_roles_name", "roles", ["name"], unique=True)

    op.create_table(
        "user_roles",
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role_id", UUID(as_uuid=True), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "password_history",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_password_history_user_created", "password_history", ["user_id", "created_at"])

    op.create_table(
        "login_logs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("ip", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("success", sa.Boolean, nullable=False),
    )
    op.create_index("ix_login_logs_timestamp", "login_logs", ["timestamp"])
    op.create_index("ix_login_logs_user_id", "login_logs", ["user_id"])
    op.create_index("ix_login_logs_success", "login_logs", ["success"])

    # Default role for self-registration and an administrator role.
    roles = sa.table(
        "roles",
        sa.column("id", UUID(as_uuid=True)),
        sa.column("name", sa.String),
        sa.column("description", sa.String),
        sa.column("permissions", JSONB),
    )
    op.bulk_insert(
        roles,
        [
            {
                "id": uuid.UUID("6f1d7c2e-3a4b-4f5e-9c1d-2b3a4c5d6e7f"),
                "name": "Student",
                "description": "Default role for self-registered users",
                "permissions": ["content:read"],
            },
            {
                "id": uuid.UUID("0a9b8c7d-6e5f-4a3b-8c2d-1e0f9a8b7c6d"),
                "name": "Admin",
                "description": "Full administrative access",
                "permissions": [
                    "users:read",
                    "users:write",
                    "roles:read",
                    "roles:write",
                    "login_logs:read",
                    "content:read",
                    "content:write",
                ],
            },
        ],
    )


def downgrade() -> None:
    op.drop_table("login_logs")
    op.drop_table("password_history")
    op.drop_table("user_roles")
    op.drop_table("roles")
    op.drop_table("users")

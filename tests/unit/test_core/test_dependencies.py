"""Tests for FastAPI dependency injection module."""

import uuid
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from portal_api.core.config import Settings
from portal_api.core.dependencies import (
    get_current_user,
    get_email_sender,
    get_password_policy,
    get_reset_token_store,
    require_permission,
)
from portal_api.core.security import create_access_token, create_reset_grant
from portal_api.lib.reset_tokens import ResetTokenStore
from portal_api.models.role import Permission
from portal_api.models.user import User
from portal_api.services.email_service import SmtpEmailSender


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestGetCurrentUser:
    async def test_valid_token_returns_user(
        self, async_session: AsyncSession, student_user: User, student_token: str, settings: Settings
    ) -> None:
        user = await get_current_user(_bearer(student_token), async_session, settings)
        assert user.id == student_user.id

    async def test_missing_credentials_rejected(self, async_session: AsyncSession, settings: Settings) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(None, async_session, settings)
        assert exc_info.value.status_code == 401
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    async def test_garbage_token_rejected(self, async_session: AsyncSession, settings: Settings) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_bearer("not-a-jwt"), async_session, settings)
        assert exc_info.value.status_code == 401

    async def test_reset_grant_is_not_a_session_token(
        self, async_session: AsyncSession, student_user: User, settings: Settings
    ) -> None:
        grant = create_reset_grant(str(student_user.id), str(uuid.uuid4()), settings.jwt_secret_key)
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_bearer(grant), async_session, settings)
        assert exc_info.value.status_code == 401

    async def test_unknown_user_rejected(self, async_session: AsyncSession, settings: Settings) -> None:
        token = create_access_token(str(uuid.uuid4()), ["Student"], settings.jwt_secret_key)
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_bearer(token), async_session, settings)
        assert exc_info.value.status_code == 401

    async def test_non_uuid_subject_rejected(self, async_session: AsyncSession, settings: Settings) -> None:
        token = create_access_token("someone", ["Student"], settings.jwt_secret_key)
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_bearer(token), async_session, settings)
        assert exc_info.value.status_code == 401


class TestRequirePermission:
    """Tests for require_permission factory."""

    async def test_user_with_permission_passes(self) -> None:
        checker = require_permission(Permission.USERS_READ)
        user = MagicMock()
        user.permissions = ["users:read", "content:read"]

        result = await checker(current_user=user)
        assert result is user

    async def test_all_permissions_required(self) -> None:
        checker = require_permission(Permission.ROLES_READ, Permission.ROLES_WRITE)
        user = MagicMock()
        user.permissions = ["roles:read"]

        with pytest.raises(HTTPException) as exc_info:
            await checker(current_user=user)
        assert exc_info.value.status_code == 403
        assert "roles:write" in str(exc_info.value.detail)

    async def test_user_without_permissions_rejected(self) -> None:
        checker = require_permission(Permission.LOGIN_LOGS_READ)
        user = MagicMock()
        user.permissions = []

        with pytest.raises(HTTPException) as exc_info:
            await checker(current_user=user)
        assert exc_info.value.status_code == 403


class TestAppServices:
    def test_reset_token_store_comes_from_app_state(self) -> None:
        store = ResetTokenStore(ttl_seconds=60)
        request = MagicMock()
        request.app.state.reset_token_store = store
        assert get_reset_token_store(request) is store

    def test_password_policy_follows_settings(self, settings: Settings) -> None:
        policy = get_password_policy(settings)
        assert policy.min_length == settings.password_min_length
        assert policy.dictionary_check is False
        assert policy.breach_checker is None

    def test_breach_checker_enabled(self, settings: Settings) -> None:
        enabled = settings.model_copy(update={"password_breach_check_enabled": True})
        assert get_password_policy(enabled).breach_checker is not None

    def test_email_sender_is_smtp(self, settings: Settings) -> None:
        assert isinstance(get_email_sender(settings), SmtpEmailSender)

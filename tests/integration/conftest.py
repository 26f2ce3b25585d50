"""Fixtures for API tests against the full application on SQLite."""

from collections.abc import AsyncGenerator, Iterator
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from portal_api.core.config import Settings, get_settings
from portal_api.core.dependencies import get_async_session, get_email_sender, get_password_policy
from portal_api.lib.password_policy import PasswordPolicy
from portal_api.main import create_app


class OutboxSender:
    """Email sender that keeps messages in memory."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str, str]] = []

    async def send(self, to_address: str, subject: str, body: str) -> None:
        self.messages.append((to_address, subject, body))


@pytest.fixture
def outbox() -> OutboxSender:
    return OutboxSender()


@pytest.fixture
def login_log_writer() -> Iterator[AsyncMock]:
    """Replace the standalone-session login log writer with a mock."""
    with patch("portal_api.api.v1.auth.record_login_attempt_in_background", new_callable=AsyncMock) as writer:
        yield writer


@pytest.fixture
def app(
    settings: Settings,
    policy: PasswordPolicy,
    async_session: AsyncSession,
    outbox: OutboxSender,
    login_log_writer: AsyncMock,
) -> FastAPI:
    """Application wired to the test database session."""
    application = create_app(settings)

    async def _session() -> AsyncGenerator[AsyncSession]:
        yield async_session

    application.dependency_overrides[get_async_session] = _session
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_password_policy] = lambda: policy
    application.dependency_overrides[get_email_sender] = lambda: outbox
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

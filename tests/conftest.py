"""Shared test fixtures for async database, sessions, roles, users and auth tokens."""

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from portal_api.core.config import Settings
from portal_api.core.security import hash_password
from portal_api.lib.password_policy import PasswordPolicy
from portal_api.models.base import Base
from portal_api.models.password_history import PasswordHistoryEntry
from portal_api.models.role import Permission, Role
from portal_api.models.user import User
from portal_api.services.auth_service import issue_session_token

STRONG_PASSWORD = "Tr4vel!Quokka#Blue"
OTHER_STRONG_PASSWORD = "Mxq7$Lunar*Fjord92"


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key-not-for-production-use",
        jwt_algorithm="HS256",
        jwt_access_token_expire_minutes=30,
        password_breach_check_enabled=False,
        password_dictionary_check_enabled=False,
        frontend_url="https://portal.example.com",
    )


@pytest.fixture
def policy() -> PasswordPolicy:
    """Offline password policy: composition rules only."""
    return PasswordPolicy(min_length=12, dictionary_check=False, breach_checker=None)


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine shared across connections."""
    engine = create_async_engine("sqlite+aiosqlite://", echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create a per-test async session."""
    session_factory = async_sessionmaker(async_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def student_role(async_session: AsyncSession) -> Role:
    """The default self-registration role."""
    role = Role(name="Student", description="Default role", permissions=[Permission.CONTENT_READ.value])
    async_session.add(role)
    await async_session.commit()
    return role


@pytest.fixture
async def admin_role(async_session: AsyncSession) -> Role:
    """A role holding every permission."""
    role = Role(name="Admin", description="Administrators", permissions=[p.value for p in Permission])
    async_session.add(role)
    await async_session.commit()
    return role


async def make_user(
    session: AsyncSession,
    *,
    email: str,
    roles: list[Role],
    password: str = STRONG_PASSWORD,
    name: str = "Test User",
) -> User:
    """Persist a user with one password history entry."""
    hashed = hash_password(password)
    user = User(
        name=name,
        email=email,
        sex="F",
        national_id="1234567",
        hashed_password=hashed,
        roles=roles,
    )
    session.add(user)
    await session.flush()
    session.add(PasswordHistoryEntry(user_id=user.id, hashed_password=hashed))
    await session.commit()
    return user


@pytest.fixture
async def student_user(async_session: AsyncSession, student_role: Role) -> User:
    """A registered student with ``STRONG_PASSWORD``."""
    return await make_user(async_session, email="student@example.com", roles=[student_role], name="Ana Student")


@pytest.fixture
async def admin_user(async_session: AsyncSession, admin_role: Role) -> User:
    """A registered administrator with ``STRONG_PASSWORD``."""
    return await make_user(async_session, email="admin@example.com", roles=[admin_role], name="Ada Admin")


@pytest.fixture
def admin_token(admin_user: User, settings: Settings) -> str:
    """Session token for the administrator."""
    return issue_session_token(admin_user, settings)


@pytest.fixture
def student_token(student_user: User, settings: Settings) -> str:
    """Session token for the student."""
    return issue_session_token(student_user, settings)

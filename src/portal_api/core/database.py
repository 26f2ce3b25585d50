"""Process-wide async engine and session factory.

``init_engine`` is called once by the application lifespan or by a CLI
command before it touches the database. Request handlers receive sessions
through ``core.dependencies.get_async_session``; work that outlives a
request, such as background login-log writes, opens ``session_scope()``.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

_POSTGRES_POOL = {"pool_size": 10, "max_overflow": 5, "pool_pre_ping": True}


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the factory built by ``init_engine``.

    Raises:
        RuntimeError: If ``init_engine`` has not run (or the engine was disposed).
    """
    if _session_factory is None:
        msg = "No database engine; call init_engine() before opening sessions"
        raise RuntimeError(msg)
    return _session_factory


def _engine_options(database_url: str, schema: str | None, options: dict) -> dict:
    if database_url.startswith("sqlite"):
        # in-memory SQLite needs every session on one connection
        options.setdefault("poolclass", StaticPool)
        return options
    if schema is not None:
        connect_args = dict(options.pop("connect_args", None) or {})
        connect_args["server_settings"] = {"search_path": f"{schema},public"}
        options["connect_args"] = connect_args
    if options.get("poolclass") is None:
        for key, value in _POSTGRES_POOL.items():
            options.setdefault(key, value)
    return options


def init_engine(database_url: str, *, schema: str | None = None, **kwargs: object) -> AsyncEngine:
    """Build the engine and session factory and make them current.

    Args:
        database_url: Async SQLAlchemy URL (asyncpg in production, aiosqlite in tests).
        schema: Postgres schema searched before ``public``. Ignored for SQLite.
        **kwargs: Extra ``create_async_engine`` options.

    Returns:
        The new engine.
    """
    global _engine, _session_factory  # noqa: PLW0603
    _engine = create_async_engine(database_url, **_engine_options(database_url, schema, dict(kwargs)))
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _engine


@asynccontextmanager
async def session_scope() -> AsyncGenerator[AsyncSession]:
    """Open a standalone session, rolling back if the block raises."""
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    """Close pooled connections and forget the current engine."""
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is None:
        return
    engine, _engine, _session_factory = _engine, None, None
    await engine.dispose()

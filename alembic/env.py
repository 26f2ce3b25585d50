"""Alembic environment for the async SQLAlchemy models.

The database URL and optional schema come from the application settings,
never from alembic.ini, so migrations and the app always agree.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool, text
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

import portal_api.models  # noqa: F401  (registers every table on Base.metadata)
from portal_api.core.config import Settings, get_settings
from portal_api.models.base import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure(settings: Settings, **kwargs: object) -> None:
    if settings.database_schema is not None:
        kwargs["version_table_schema"] = settings.database_schema
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)


def run_migrations_offline() -> None:
    """Emit SQL to stdout without a database connection."""
    settings = get_settings()
    _configure(
        settings,
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync_migrations(connection: Connection, settings: Settings) -> None:
    if settings.database_schema is not None:
        connection.execute(text(f'SET search_path TO "{settings.database_schema}", public'))
    _configure(settings, connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations over an async engine, creating the schema first if set."""
    settings = get_settings()
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = settings.database_url
    engine = async_engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    async with engine.connect() as connection:
        if settings.database_schema is not None:
            await connection.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{settings.database_schema}"'))
            await connection.commit()
        await connection.run_sync(_run_sync_migrations, settings)

    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())

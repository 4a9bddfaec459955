"""Alembic migrations for the categories database.

The URL is read from the service settings (``DATABASE_CONFIG__DATABASE_URL``)
rather than alembic.ini, and online runs go through asyncpg.
"""

import asyncio

from alembic import context
from loguru import logger
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

import magazenn.domain.categories.models  # noqa: F401
from magazenn.core.config import get_settings
from magazenn.infrastructure.database.base import Base

COMPARE_OPTIONS = {"compare_type": True, "compare_server_default": True}


def _migrate(connection: Connection) -> None:
    context.configure(
        connection=connection, target_metadata=Base.metadata, **COMPARE_OPTIONS
    )
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_online() -> None:
    db_config = get_settings().database_config
    engine = create_async_engine(
        db_config.database_url, echo=db_config.echo, poolclass=pool.NullPool
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


def _migrate_offline() -> None:
    """Print the SQL instead of running it."""
    context.configure(
        url=get_settings().database_config.database_url,
        target_metadata=Base.metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **COMPARE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    logger.info("Generating migration SQL offline")
    _migrate_offline()
else:
    logger.info("Running migrations against the database")
    asyncio.run(_migrate_online())

"""One async engine per process and the sessions handed to requests.

The engine is created lazily from ``database_config`` the first time it is
needed, so importing the application never opens a connection. When
``log_config.enable_sql_logging`` is on, statements slower than
``slow_query_threshold_ms`` are reported with their parameters sanitised.
"""

import threading
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from weakref import WeakKeyDictionary

from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.engine.interfaces import DBAPICursor, ExecutionContext
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from magazenn.core.config import get_settings
from magazenn.core.context import RequestContext
from magazenn.core.error_context import sanitize_sql_params

POOL_RECYCLE_SECONDS = 3600
COMMAND_TIMEOUT_SECONDS = 60
MAX_LOGGED_STATEMENT_LENGTH = 500
MESSAGE_STATEMENT_LENGTH = 100

_query_start_times: WeakKeyDictionary[ExecutionContext, float] = WeakKeyDictionary()


def _before_cursor_execute(
    _conn: Connection,
    _cursor: DBAPICursor,
    _statement: str,
    _parameters: Any,  # noqa: ANN401 - DBAPI parameters have no common type
    context: ExecutionContext,
    _executemany: bool,
) -> None:
    _query_start_times[context] = time.perf_counter()


def _after_cursor_execute(
    _conn: Connection,
    cursor: DBAPICursor,
    statement: str,
    parameters: Any,  # noqa: ANN401 - DBAPI parameters have no common type
    context: ExecutionContext,
    executemany: bool,
) -> None:
    started = _query_start_times.pop(context, None)
    if started is None:
        return

    elapsed_ms = (time.perf_counter() - started) * 1000
    threshold_ms = get_settings().log_config.slow_query_threshold_ms
    if elapsed_ms < threshold_ms:
        return

    # Collapse whitespace so multi-line statements fit on one log line
    query = " ".join(statement.split())[:MAX_LOGGED_STATEMENT_LENGTH]
    logger.warning(
        "Slow query detected: {}... Duration: {:.2f}ms",
        query[:MESSAGE_STATEMENT_LENGTH],
        elapsed_ms,
        query=query,
        duration_ms=round(elapsed_ms, 2),
        rows_affected=getattr(cursor, "rowcount", -1),
        parameters=sanitize_sql_params(parameters),
        correlation_id=RequestContext.get_correlation_id(),
        executemany=executemany,
        threshold_ms=threshold_ms,
    )


def create_database_engine(database_url: str | None = None) -> AsyncEngine:
    """Build the async engine from ``database_config``.

    Args:
        database_url: Overrides the configured URL.
    """
    settings = get_settings()
    config = settings.database_config
    sql_logging = settings.log_config.enable_sql_logging

    engine = create_async_engine(
        database_url or config.database_url,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
        pool_pre_ping=config.pool_pre_ping,
        pool_recycle=POOL_RECYCLE_SECONDS,
        echo=config.echo,
        connect_args={"command_timeout": COMMAND_TIMEOUT_SECONDS},
    )

    if sql_logging:
        # Cursor events exist on the sync engine only
        for name, listener in (
            ("before_cursor_execute", _before_cursor_execute),
            ("after_cursor_execute", _after_cursor_execute),
        ):
            event.listen(engine.sync_engine, name, listener)

    logger.info(
        "Created database engine - pool_size: {}, max_overflow: {}, sql_logging: {}",
        config.pool_size,
        config.max_overflow,
        sql_logging,
    )
    return engine


class _DatabaseManager:
    """Lazily built engine and session factory, shared by the process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def get_engine(self) -> AsyncEngine:
        with self._lock:
            if self._engine is None:
                self._engine = create_database_engine()
            return self._engine

    def get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine()
        with self._lock:
            if self._session_factory is None:
                # Loaded categories stay readable after the request commits
                self._session_factory = async_sessionmaker(
                    engine, class_=AsyncSession, expire_on_commit=False
                )
            return self._session_factory

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database engine disposed")
        self.reset()


_db_manager = _DatabaseManager()


def get_engine() -> AsyncEngine:
    return _db_manager.get_engine()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return _db_manager.get_session_factory()


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Open a session that commits when the block exits cleanly.

    Any exception raised inside the block rolls the session back and is
    re-raised.
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            logger.debug("Database session rolled back")
            raise
        await session.commit()


async def close_database() -> None:
    await _db_manager.close()


async def check_database_connection() -> tuple[bool, str | None]:
    """Run ``SELECT 1`` against the store.

    Returns:
        tuple[bool, str | None]: ``(True, None)`` when the database answers,
            ``(False, reason)`` otherwise.
    """
    try:
        async with get_engine().connect() as connection:
            await connection.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        return False, str(e)
    return True, None

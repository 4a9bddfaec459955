"""Async SQLAlchemy persistence used by the categories domain."""

from magazenn.infrastructure.database.base import Base, BaseModel
from magazenn.infrastructure.database.dependencies import DatabaseSession, get_db
from magazenn.infrastructure.database.repository import BaseRepository
from magazenn.infrastructure.database.session import (
    check_database_connection,
    close_database,
    get_async_session,
    get_engine,
)

__all__ = [
    "Base",
    "BaseModel",
    "BaseRepository",
    "DatabaseSession",
    "check_database_connection",
    "close_database",
    "get_async_session",
    "get_db",
    "get_engine",
]

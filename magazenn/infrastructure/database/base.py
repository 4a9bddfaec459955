"""Declarative base shared by the service's tables.

Constraint names follow ``NAMING_CONVENTION`` so Alembic migrations refer
to them by stable names. Every table gets a UUID ``id`` assigned on insert
plus ``created_at``/``updated_at`` columns filled in by the database.
"""

import uuid
from datetime import datetime
from typing import Final

from sqlalchemy import DateTime, MetaData, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

NAMING_CONVENTION: Final[dict[str, str]] = {
    "pk": "pk_%(table_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ix": "ix_%(column_0_label)s",
}


def _timestamp_column(*, on_update: bool = False) -> Mapped[datetime]:
    return mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now() if on_update else None,
    )


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class BaseModel(Base):
    """Abstract table with a generated UUID key and audit timestamps."""

    __abstract__ = True

    # Uuid maps to the native uuid type on PostgreSQL
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = _timestamp_column()
    updated_at: Mapped[datetime] = _timestamp_column(on_update=True)

"""Generic data access for models keyed by a UUID.

``BaseRepository`` works on the session it is given and never commits;
the request's session dependency decides whether the work is kept.
"""

import uuid
from collections.abc import Mapping, Sequence
from typing import Generic, TypeVar

from loguru import logger
from sqlalchemy import Select, func, select
from sqlalchemy import delete as sql_delete
from sqlalchemy.ext.asyncio import AsyncSession

from magazenn.infrastructure.database.base import BaseModel

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """Queries shared by every table with a UUID ``id``.

    Subclasses bind the model and add their own lookups:

        class CategoryRepository(BaseRepository[Category]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, Category)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    @property
    def _model_name(self) -> str:
        return self.model_class.__name__

    def _ordered(self) -> Select[tuple[T]]:
        return select(self.model_class).order_by(self.model_class.id)

    async def get_by_id(self, entity_id: uuid.UUID) -> T | None:
        logger.debug("Fetching {} by ID: {}", self._model_name, entity_id)
        result = await self.session.execute(
            select(self.model_class).where(self.model_class.id == entity_id)
        )
        return result.scalar_one_or_none()

    async def get_all(self) -> list[T]:
        """Every row, ordered by id."""
        result = await self.session.execute(self._ordered())
        rows = list(result.scalars().all())
        logger.debug("Retrieved {} {} instances", len(rows), self._model_name)
        return rows

    async def get_at_offset(self, offset: int) -> T | None:
        """The row at position ``offset`` of the id ordering, if any."""
        result = await self.session.execute(self._ordered().offset(offset).limit(1))
        return result.scalar_one_or_none()

    async def count(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(self.model_class)
        )
        return result.scalar() or 0

    async def create(self, obj: T) -> T:
        """Insert ``obj`` and load its generated id and timestamps."""
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)
        logger.info("Created {} instance with ID: {}", self._model_name, obj.id)
        return obj

    async def create_many(self, objs: Sequence[T]) -> list[T]:
        """Insert all of ``objs`` in a single flush."""
        self.session.add_all(objs)
        await self.session.flush()
        logger.info("Created {} {} instances", len(objs), self._model_name)
        return list(objs)

    async def update(self, instance: T, data: Mapping[str, object]) -> T:
        """Copy ``data`` onto a loaded row and flush it.

        The primary key is never overwritten; keys the model does not have
        are skipped with a warning.
        """
        for field, value in data.items():
            if field == "id":
                continue
            if not hasattr(instance, field):
                logger.warning(
                    "Attempted to update non-existent field '{}' on {}",
                    field,
                    self._model_name,
                )
                continue
            setattr(instance, field, value)

        await self.session.flush()
        await self.session.refresh(instance)
        logger.info(
            "Updated {} instance ID {} - fields: {}",
            self._model_name,
            instance.id,
            list(data),
        )
        return instance

    async def delete(self, entity_id: uuid.UUID) -> bool:
        """Delete the row with ``entity_id``; False when there was none."""
        result = await self.session.execute(
            sql_delete(self.model_class).where(self.model_class.id == entity_id)
        )
        deleted = bool(result.rowcount)
        logger.log(
            "INFO" if deleted else "DEBUG",
            "{} {} ID: {}",
            "Deleted" if deleted else "Nothing to delete for",
            self._model_name,
            entity_id,
        )
        return deleted

"""Data access for Category rows."""

import random
import uuid

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from magazenn.domain.categories.models import Category
from magazenn.infrastructure.database.repository import BaseRepository


def parse_category_id(value: uuid.UUID | str) -> uuid.UUID | None:
    """Return ``value`` as a UUID, or None if it is not a valid identifier."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return None


class CategoryRepository(BaseRepository[Category]):
    """Repository for managing data operations on a Category."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Category)

    async def list_all(self) -> list[Category]:
        """Return every category, ordered by id."""
        return await self.get_all()

    async def list_all_where_name_like(self, name: str | None) -> list[Category]:
        """Return the categories whose name contains ``name``, ignoring case.

        Args:
            name: Substring to look for. ``%`` and ``_`` match literally.

        Returns:
            list[Category]: The matching categories; empty when ``name`` is None.
        """
        if name is None:
            return []

        stmt = (
            select(Category)
            .where(Category.name.icontains(name, autoescape=True))
            .order_by(Category.id)
        )
        result = await self.session.execute(stmt)
        categories = list(result.scalars().all())

        logger.debug(
            "Found {} categories with name like '{}'", len(categories), name
        )
        return categories

    async def get_by_id(self, entity_id: uuid.UUID | str) -> Category | None:
        """Find a category by id; malformed identifiers find nothing."""
        category_id = parse_category_id(entity_id)
        if category_id is None:
            logger.debug("Invalid category id: {}", entity_id)
            return None
        return await super().get_by_id(category_id)

    async def find_random(self) -> Category | None:
        """Pick one category uniformly at random.

        Returns:
            Category | None: A random category, or None when the table is empty.
        """
        count = await self.count()
        if count == 0:
            return None

        return await self.get_at_offset(random.randrange(count))  # noqa: S311

    async def delete_all(self) -> int:
        """Delete every category, one row at a time.

        Returns:
            int: The number of rows deleted.
        """
        deleted = 0
        for category in await self.list_all():
            if await self.delete(category.id):
                deleted += 1

        logger.info("Deleted {} categories", deleted)
        return deleted

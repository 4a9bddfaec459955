"""Business operations on categories.

The service validates every record before it is written and implements the
two update flavours:

- **full update** overwrites every field except the id with the input
- **partial update** overwrites only the fields present and non-null in the
  input, then validates the merged record

Lookups that find nothing return None; the HTTP layer decides what that
means for the client.
"""

import uuid
from collections.abc import Mapping, Sequence

from loguru import logger

from magazenn.core.observability import trace_operation
from magazenn.domain.categories.models import Category
from magazenn.domain.categories.repository import (
    CategoryRepository,
    parse_category_id,
)
from magazenn.domain.categories.validation import CategoryData, validate_category

UPDATABLE_FIELDS = tuple(CategoryData.model_fields)


class CategoryService:
    """Service class containing the business methods for categories.

    Args:
        repository: Repository bound to the session of the current unit of work.
    """

    def __init__(self, repository: CategoryRepository) -> None:
        self.repository = repository

    async def find_all_categories(self) -> list[Category]:
        with trace_operation("CategoryService.find_all_categories"):
            logger.debug("Getting all categories")
            return await self.repository.list_all()

    async def find_all_categories_having_name(self, name: str | None) -> list[Category]:
        with trace_operation(
            "CategoryService.find_all_categories_having_name", **{"arg.name": name}
        ):
            logger.debug("Finding all categories having name = {}", name)
            return await self.repository.list_all_where_name_like(name)

    async def find_category_by_id(self, category_id: uuid.UUID | str) -> Category | None:
        with trace_operation(
            "CategoryService.find_category_by_id", **{"arg.id": str(category_id)}
        ):
            logger.debug("Finding category by id = {}", category_id)
            return await self.repository.get_by_id(category_id)

    async def find_random_category(self) -> Category | None:
        with trace_operation("CategoryService.find_random_category"):
            logger.debug("Finding a random category")
            return await self.repository.find_random()

    async def persist_category(self, data: Mapping[str, object]) -> Category:
        """Validate and store a new category.

        Args:
            data: Field values of the new category. Any ``id`` is ignored.

        Returns:
            Category: The stored category with its generated id.

        Raises:
            ValidationError: If the field constraints are violated.
        """
        with trace_operation("CategoryService.persist_category"):
            validated = validate_category(data)
            logger.debug("Persisting category: {}", validated)
            return await self.repository.create(Category(**validated.model_dump()))

    async def replace_category(
        self, category_id: uuid.UUID | str, data: Mapping[str, object]
    ) -> Category | None:
        """Overwrite every field of an existing category except its id.

        Fields missing from ``data`` are cleared to their defaults.

        Returns:
            Category | None: The replaced category, or None if no category
                has this id (nothing is created in that case).

        Raises:
            ValidationError: If ``data`` violates the field constraints.
        """
        with trace_operation(
            "CategoryService.replace_category", **{"arg.id": str(category_id)}
        ):
            validated = validate_category(data)
            logger.debug("Replacing category {}: {}", category_id, validated)

            existing = await self.repository.get_by_id(category_id)
            if existing is None:
                return None

            return await self.repository.update(existing, validated.model_dump())

    async def partial_update_category(
        self, category_id: uuid.UUID | str, data: Mapping[str, object]
    ) -> Category | None:
        """Merge the non-null fields of ``data`` into an existing category.

        The merged record is validated before anything is written.

        Returns:
            Category | None: The updated category, or None if no category has
                this id.

        Raises:
            ValidationError: If the merged record violates the field constraints.
        """
        with trace_operation(
            "CategoryService.partial_update_category", **{"arg.id": str(category_id)}
        ):
            logger.info("Partially updating category {}: {}", category_id, dict(data))

            existing = await self.repository.get_by_id(category_id)
            if existing is None:
                return None

            changes = {
                field: data[field]
                for field in UPDATABLE_FIELDS
                if data.get(field) is not None
            }
            merged = {field: getattr(existing, field) for field in UPDATABLE_FIELDS}
            merged.update(changes)
            validate_category(merged)

            return await self.repository.update(existing, changes)

    async def replace_all_categories(
        self, categories: Sequence[Mapping[str, object]]
    ) -> list[Category]:
        """Delete every category and store ``categories`` in their place.

        All inputs are validated before anything is deleted. The delete and
        the insert are two separate repository operations.

        Raises:
            ValidationError: If any input violates the field constraints.
        """
        with trace_operation(
            "CategoryService.replace_all_categories",
            **{"arg.categories": len(categories)},
        ):
            logger.debug("Replacing all categories")
            validated = [validate_category(category) for category in categories]

            await self.repository.delete_all()
            return await self.repository.create_many(
                [Category(**item.model_dump()) for item in validated]
            )

    async def delete_category(self, category_id: uuid.UUID | str) -> None:
        """Delete a category; a missing or malformed id is a no-op."""
        with trace_operation(
            "CategoryService.delete_category", **{"arg.id": str(category_id)}
        ):
            logger.debug("Deleting category by id = {}", category_id)
            parsed_id = parse_category_id(category_id)
            if parsed_id is not None:
                await self.repository.delete(parsed_id)

    async def delete_all_categories(self) -> None:
        with trace_operation("CategoryService.delete_all_categories"):
            logger.debug("Deleting all categories")
            await self.repository.delete_all()

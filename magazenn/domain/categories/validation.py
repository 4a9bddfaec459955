"""Field constraints of a Category and their enforcement.

``CategoryData`` is the single definition of what a valid category looks
like. The HTTP schemas build on it and the service runs every candidate
record through ``validate_category`` before it is written, including the
result of merging a partial update into an existing row.
"""

from collections.abc import Mapping

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from magazenn.core.exceptions import ValidationError
from magazenn.domain.categories.models import (
    DESCRIPTION_MAX_LENGTH,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
)


class CategoryData(BaseModel):
    """The writable fields of a category."""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(
        ...,
        min_length=NAME_MIN_LENGTH,
        max_length=NAME_MAX_LENGTH,
        description="Name of the category",
        examples=["Electronics"],
    )
    description: str | None = Field(
        default=None,
        max_length=DESCRIPTION_MAX_LENGTH,
        description="Optional free text description",
        examples=["Electronics"],
    )


def violations_by_field(exc: pydantic.ValidationError) -> dict[str, list[str]]:
    """Group pydantic error messages by the dotted path of the failing field."""
    violations: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", ())) or "root"
        violations.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return violations


def validate_category(candidate: Mapping[str, object]) -> CategoryData:
    """Check a candidate category against the field constraints.

    Args:
        candidate: Field values of the category to check. Unknown keys
            (such as ``id``) are ignored.

    Returns:
        CategoryData: The validated field values.

    Raises:
        ValidationError: If any constraint is violated. The error context
            holds the violations keyed by field name.
    """
    try:
        return CategoryData.model_validate(dict(candidate))
    except pydantic.ValidationError as exc:
        violations = violations_by_field(exc)
        raise ValidationError(
            "Category validation failed",
            context={"validation_errors": violations},
            cause=exc,
        ) from exc

"""Request and response bodies of the category endpoints.

Incoming bodies may carry an ``id`` of any JSON type; it is accepted and
ignored, the path id or the storage is authoritative.
"""

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from magazenn.domain.categories.validation import CategoryData


class CategoryWrite(CategoryData):
    """Body of a create or full replace request."""

    id: Any = Field(
        default=None,
        description="Ignored; identifiers are assigned by the service",
        exclude=True,
    )


class CategoryPatch(BaseModel):
    """Body of a partial update.

    Fields left out or set to null keep their stored value. Constraints are
    checked on the merged category, not here.
    """

    id: Any = Field(default=None, exclude=True)
    name: str | None = Field(default=None, examples=["Home Appliances"])
    description: str | None = Field(default=None)


class CategoryRead(BaseModel):
    """A stored category."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(..., description="Identifier of the category")
    name: str = Field(..., examples=["Electronics"])
    description: str | None = Field(default=None, examples=["Electronics"])

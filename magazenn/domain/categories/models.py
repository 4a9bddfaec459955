"""Database model for a Category."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from magazenn.infrastructure.database.base import BaseModel

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 300


class Category(BaseModel):
    """A product category.

    The name is mandatory and between 3 and 50 characters; the description
    is optional and at most 300 characters. Length rules are enforced by
    ``validate_category`` before any write, the column sizes only back them up.
    """

    __tablename__ = "category"

    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(
        String(DESCRIPTION_MAX_LENGTH), nullable=True
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name!r})>"

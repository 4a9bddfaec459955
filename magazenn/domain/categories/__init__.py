"""The Category resource: model, validation, repository and service."""

from magazenn.domain.categories.models import Category
from magazenn.domain.categories.repository import CategoryRepository
from magazenn.domain.categories.service import CategoryService

__all__ = ["Category", "CategoryRepository", "CategoryService"]

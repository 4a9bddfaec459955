"""FastAPI dependencies wiring the category service to the request session."""

from typing import Annotated

from fastapi import Depends

from magazenn.domain.categories.repository import CategoryRepository
from magazenn.domain.categories.service import CategoryService
from magazenn.infrastructure.database.dependencies import DatabaseSession


async def get_category_repository(db: DatabaseSession) -> CategoryRepository:
    return CategoryRepository(db)


async def get_category_service(
    repository: Annotated[CategoryRepository, Depends(get_category_repository)],
) -> CategoryService:
    return CategoryService(repository)


CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]

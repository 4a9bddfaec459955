"""REST resource for categories under ``/api/categories``.

Path identifiers are typed as UUIDs, so a malformed id fails request
validation and is answered with 400 before the service is reached.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Query, Request, Response, status
from fastapi.responses import PlainTextResponse

from magazenn.api.constants import CATEGORIES_PATH, HELLO_MESSAGE
from magazenn.api.schemas.categories import CategoryPatch, CategoryRead, CategoryWrite
from magazenn.api.schemas.errors import ErrorResponse
from magazenn.core.exceptions import NotFoundError
from magazenn.domain.categories.dependencies import CategoryServiceDep

ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
}

router = APIRouter(prefix=CATEGORIES_PATH, tags=["categories"])


def category_not_found(category_id: uuid.UUID) -> NotFoundError:
    return NotFoundError(
        "Category not found", context={"category_id": str(category_id)}
    )


@router.get("", response_model=list[CategoryRead], name="list_categories")
async def list_categories(
    service: CategoryServiceDep,
    name_filter: Annotated[
        str | None, Query(description="Only return categories whose name contains this")
    ] = None,
) -> list[CategoryRead]:
    """List all categories, optionally filtered by name."""
    if name_filter is None:
        categories = await service.find_all_categories()
    else:
        categories = await service.find_all_categories_having_name(name_filter)
    return [CategoryRead.model_validate(category) for category in categories]


@router.get(
    "/random",
    response_model=CategoryRead,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
async def get_random_category(service: CategoryServiceDep) -> CategoryRead:
    category = await service.find_random_category()
    if category is None:
        raise NotFoundError("No categories available")
    return CategoryRead.model_validate(category)


@router.get("/hello", response_class=PlainTextResponse)
async def hello() -> str:
    return HELLO_MESSAGE


@router.get(
    "/{category_id}",
    response_model=CategoryRead,
    responses=ERROR_RESPONSES,
    name="get_category",
)
async def get_category(
    category_id: uuid.UUID, service: CategoryServiceDep
) -> CategoryRead:
    category = await service.find_category_by_id(category_id)
    if category is None:
        raise category_not_found(category_id)
    return CategoryRead.model_validate(category)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
)
async def create_category(
    body: CategoryWrite, request: Request, service: CategoryServiceDep
) -> Response:
    """Create a category; the ``Location`` header points at the new resource."""
    category = await service.persist_category(body.model_dump())
    location = request.url_for("get_category", category_id=str(category.id))
    return Response(
        status_code=status.HTTP_201_CREATED, headers={"Location": str(location)}
    )


@router.put(
    "",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
)
async def replace_all_categories(
    body: list[CategoryWrite], request: Request, service: CategoryServiceDep
) -> Response:
    """Replace every stored category with the given list."""
    await service.replace_all_categories([item.model_dump() for item in body])
    location = request.url_for("list_categories")
    return Response(
        status_code=status.HTTP_201_CREATED, headers={"Location": str(location)}
    )


@router.put(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=ERROR_RESPONSES,
)
async def replace_category(
    category_id: uuid.UUID, body: CategoryWrite, service: CategoryServiceDep
) -> Response:
    """Overwrite every field of an existing category; never creates one."""
    category = await service.replace_category(category_id, body.model_dump())
    if category is None:
        raise category_not_found(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{category_id}", response_model=CategoryRead, responses=ERROR_RESPONSES)
async def update_category(
    category_id: uuid.UUID, body: CategoryPatch, service: CategoryServiceDep
) -> CategoryRead:
    """Update only the fields present and non-null in the body."""
    category = await service.partial_update_category(category_id, body.model_dump())
    if category is None:
        raise category_not_found(category_id)
    return CategoryRead.model_validate(category)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
)
async def delete_category(
    category_id: uuid.UUID, service: CategoryServiceDep
) -> Response:
    await service.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_all_categories(service: CategoryServiceDep) -> Response:
    await service.delete_all_categories()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""Server-rendered HTML listing of the categories."""

from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from magazenn.api.schemas.categories import CategoryRead
from magazenn.domain.categories.dependencies import CategoryServiceDep

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

router = APIRouter(include_in_schema=False)

templates = Jinja2Templates(directory=TEMPLATES_DIR)


@router.get("/", response_class=HTMLResponse)
async def show_index(
    request: Request,
    service: CategoryServiceDep,
    name_filter: Annotated[str | None, Query()] = None,
) -> HTMLResponse:
    if name_filter:
        categories = await service.find_all_categories_having_name(name_filter)
    else:
        categories = await service.find_all_categories()

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "categories": [CategoryRead.model_validate(c) for c in categories],
            "name_filter": name_filter or "",
        },
    )

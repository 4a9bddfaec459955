"""Default response class of the categories API."""

from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ORJSONResponse(JSONResponse):
    """Render bodies with orjson, keys sorted.

    UUIDs and datetimes are handled natively; pydantic models are dumped in
    JSON mode first.
    """

    def render(self, content: Any) -> bytes:  # noqa: ANN401
        payload = (
            content.model_dump(mode="json") if isinstance(content, BaseModel) else content
        )
        return orjson.dumps(payload, option=orjson.OPT_SORT_KEYS)

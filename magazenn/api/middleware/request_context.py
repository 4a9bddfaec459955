"""Correlation id of every request.

Taken from the ``X-Correlation-ID`` header or generated, then stored in
``RequestContext``, bound to the request's log lines and echoed back.
"""

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from magazenn.api.constants import CORRELATION_ID_HEADER
from magazenn.core.context import RequestContext, generate_correlation_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = request.headers.get(CORRELATION_ID_HEADER)
        if not correlation_id:
            correlation_id = generate_correlation_id()
        RequestContext.set_correlation_id(correlation_id)

        # Left set afterwards so exception handlers still report it
        with logger.contextualize(correlation_id=correlation_id):
            response = await call_next(request)

        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response

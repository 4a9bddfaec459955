"""Rendering of failures as ErrorResponse bodies.

Every error leaves the API as an ``ErrorResponse`` body. Client mistakes
(``ValidationError``, malformed bodies or path parameters) map to 400,
missing resources to 404, and everything unexpected to 500.
"""

import traceback
from typing import Any, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from magazenn.api.constants import HTTP_500_INTERNAL_SERVER_ERROR
from magazenn.api.schemas.errors import ErrorResponse, ServiceInfo
from magazenn.api.utils.responses import ORJSONResponse
from magazenn.core.config import Settings, get_settings
from magazenn.core.context import RequestContext, generate_request_id
from magazenn.core.error_context import sanitize_error_context
from magazenn.core.exceptions import ErrorCode, MagazennError, Severity

# HTTPException statuses with a code of their own; other 4xx are BAD_REQUEST
HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.VALIDATION_ERROR,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
}

E = TypeVar("E", bound=Exception)


def get_service_info(settings: Settings) -> ServiceInfo:
    return ServiceInfo(
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )


def status_code_for(exc: MagazennError) -> int:
    return exc.http_status


def _error_response(
    status_code: int,
    error_code: ErrorCode | str,
    message: str,
    severity: Severity,
    *,
    details: dict[str, Any] | None = None,
    debug_info: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> Response:
    """Render an ``ErrorResponse`` stamped with the request's identifiers."""
    body = ErrorResponse(
        error_code=error_code.value if isinstance(error_code, ErrorCode) else error_code,
        message=message,
        details=details,
        correlation_id=RequestContext.get_correlation_id(),
        request_id=generate_request_id(),
        severity=severity.value,
        service_info=get_service_info(get_settings()),
        debug_info=debug_info,
    )
    return ORJSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


def _request_fields(request: Request) -> dict[str, str]:
    return {"method": request.method, "path": request.url.path}


def _expect(exc: Exception, expected: type[E]) -> E:
    if not isinstance(exc, expected):
        msg = f"Expected {expected.__name__}, got {type(exc).__name__}"
        raise TypeError(msg)
    return exc


async def magazenn_error_handler(request: Request, exc: Exception) -> Response:
    """Answer a ``MagazennError`` with the status its class maps to."""
    exc = _expect(exc, MagazennError)

    status_code = status_code_for(exc)
    log = logger.warning if exc.is_expected else logger.error
    log(
        "{} answered with {}: {}",
        type(exc).__name__,
        exc.error_code,
        exc.message,
        correlation_id=RequestContext.get_correlation_id(),
        status_code=status_code,
        **sanitize_error_context(
            exc, {**_request_fields(request), "error_code": exc.error_code}
        ),
    )

    debug_info = None
    if get_settings().environment == "development":
        debug_info = {
            "stack_trace": exc.stack_trace,
            "error_context": exc.context,
            "exception_type": type(exc).__name__,
        }
        if exc.cause:
            debug_info["cause"] = {
                "type": type(exc.cause).__name__,
                "message": str(exc.cause),
            }

    return _error_response(
        status_code,
        exc.error_code,
        exc.message,
        exc.severity,
        details=exc.context or None,
        debug_info=debug_info,
    )


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    exc = _expect(exc, RequestValidationError)

    # ("body", "name") -> "name", ("body", 1, "name") -> "1.name"
    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ())[1:]]
        field = ".".join(part for part in location if part != "__root__") or "root"
        field_errors.setdefault(field, []).append(error.get("msg", "Invalid value"))

    logger.warning(
        "Request validation failed",
        correlation_id=RequestContext.get_correlation_id(),
        status_code=status.HTTP_400_BAD_REQUEST,
        **sanitize_error_context(
            exc, {**_request_fields(request), "validation_errors": field_errors}
        ),
    )

    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        ErrorCode.VALIDATION_ERROR,
        "Request validation failed",
        Severity.LOW,
        details={"validation_errors": field_errors},
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Answer a Starlette ``HTTPException``: unknown routes, wrong methods."""
    exc = _expect(exc, HTTPException)

    if exc.status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        error_code, severity = ErrorCode.INTERNAL_ERROR, Severity.HIGH
    else:
        error_code = HTTP_ERROR_CODES.get(exc.status_code, ErrorCode.BAD_REQUEST)
        severity = Severity.LOW

    logger.warning(
        "HTTP error {}",
        exc.status_code,
        correlation_id=RequestContext.get_correlation_id(),
        **sanitize_error_context(
            exc,
            {**_request_fields(request), "status": exc.status_code, "detail": exc.detail},
        ),
    )

    return _error_response(
        exc.status_code,
        error_code,
        str(exc.detail),
        severity,
        headers=exc.headers,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Turn any unhandled exception into a 500.

    Outside development the client only learns that something failed.
    """
    logger.exception(
        "Unhandled {} while serving the request",
        type(exc).__name__,
        correlation_id=RequestContext.get_correlation_id(),
        **sanitize_error_context(exc, _request_fields(request)),
    )

    if get_settings().environment == "production":
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorCode.INTERNAL_ERROR,
            "An internal server error occurred",
            Severity.CRITICAL,
        )

    exception_type = type(exc).__name__
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.INTERNAL_ERROR,
        f"Internal server error: {exception_type}",
        Severity.CRITICAL,
        details={"error": str(exc), "type": exception_type},
        debug_info={
            "stack_trace": traceback.format_tb(exc.__traceback__),
            "error_context": {"error_message": str(exc), "error_args": list(exc.args)},
            "exception_type": exception_type,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MagazennError, magazenn_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.debug("Error handlers installed")

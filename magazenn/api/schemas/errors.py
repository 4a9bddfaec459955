"""The body of every error answered by the categories API."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class ServiceInfo(BaseModel):
    name: str
    version: str
    environment: str


class ErrorResponse(BaseModel):
    """An error as seen by API clients.

    Constraint violations of a category are listed per field under
    ``details["validation_errors"]``; a missing category has its id under
    ``details["category_id"]``. ``debug_info`` is only filled in development.
    """

    error_code: str = Field(..., examples=["VALIDATION_ERROR", "NOT_FOUND"])
    message: str = Field(..., examples=["Category not found"])
    details: dict[str, Any] | None = Field(
        default=None,
        examples=[{"validation_errors": {"name": ["too short"]}}],
    )
    correlation_id: str | None = None
    request_id: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    severity: str | None = None
    service_info: ServiceInfo | None = None
    debug_info: dict[str, Any] | None = None

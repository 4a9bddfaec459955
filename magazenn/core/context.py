"""Identifiers that follow a request through logs, spans and error bodies.

The correlation id may come from the client and is echoed back; the request
id is minted per error response.
"""

import uuid
from contextvars import ContextVar
from typing import ClassVar


class RequestContext:
    """Correlation id of the request being handled by the current task."""

    _correlation_id: ClassVar[ContextVar[str | None]] = ContextVar(
        "correlation_id", default=None
    )

    @classmethod
    def set_correlation_id(cls, correlation_id: str) -> None:
        cls._correlation_id.set(correlation_id)

    @classmethod
    def get_correlation_id(cls) -> str | None:
        return cls._correlation_id.get()

    @classmethod
    def clear(cls) -> None:
        cls._correlation_id.set(None)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Return a fresh ``req-<uuid4>`` identifier."""
    return f"req-{uuid.uuid4()}"

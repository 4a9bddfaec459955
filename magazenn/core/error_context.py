"""Redaction of secrets in logged data.

A key is sensitive when it matches ``DEFAULT_SENSITIVE_PATTERN`` or contains
one of the ``log_config.sensitive_fields`` names. Helpers here always return
new containers and leave their input untouched.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any, Final

from magazenn.core.config import get_settings

REDACTED: Final[str] = "[REDACTED]"

DEFAULT_SENSITIVE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"password|passwd|secret|token|api[_-]?key|authorization|credential"
    r"|private[_-]?key|session|connection[_-]?string",
    re.IGNORECASE,
)

# Deeper structures are redacted wholesale
MAX_DEPTH: Final[int] = 10


@lru_cache(maxsize=1)
def _get_sensitive_fields() -> list[str]:
    return get_settings().log_config.sensitive_fields


def is_sensitive_field(field_name: str) -> bool:
    if DEFAULT_SENSITIVE_PATTERN.search(field_name):
        return True
    lowered = field_name.lower()
    return any(name.lower() in lowered for name in _get_sensitive_fields())


def sanitize_value(value: object, field_name: str = "", depth: int = 0) -> object:
    """Redact ``value`` if its key is sensitive, recursing into containers.

    List and tuple items have no key of their own, so only the dicts
    inside them are inspected.
    """
    if depth > MAX_DEPTH or (field_name and is_sensitive_field(field_name)):
        return REDACTED

    match value:
        case dict():
            return {
                key: sanitize_value(item, str(key), depth + 1)
                for key, item in value.items()
            }
        case list() | tuple():
            items = (sanitize_value(item, "", depth + 1) for item in value)
            return tuple(items) if isinstance(value, tuple) else list(items)
        case _:
            return value


def sanitize_dict(data: dict[str, Any]) -> dict[str, Any]:
    return {key: sanitize_value(value, key) for key, value in data.items()}


def sanitize_error_context(
    error: Exception, context: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Describe ``error`` for a log line, merged with the redacted ``context``."""
    return {
        "error_type": type(error).__name__,
        "error_message": str(error),
        **sanitize_dict(context or {}),
    }


def sanitize_sql_params(params: object) -> object:
    """Redact bound SQL parameters.

    Named parameters are checked by key. Positional ones carry no name to
    judge by and pass through; any other shape is redacted outright.
    """
    if params is None or isinstance(params, list | tuple):
        return params
    if isinstance(params, dict):
        return sanitize_dict(params)
    return REDACTED

"""Loguru setup for the categories service.

Development gets a colored console line that shows the request context
bound with ``logger.contextualize``; every other environment gets one JSON
object per line. Records emitted through the standard library (uvicorn,
SQLAlchemy, alembic) are forwarded to Loguru so both end up in one stream.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, Final, cast

import orjson
from loguru import logger

if TYPE_CHECKING:
    from magazenn.core.config import Settings


class _LoggingState:
    configured = False


_state = _LoggingState()

DEFAULT_LOG_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)
CORRELATION_ID_DISPLAY_LENGTH: Final[int] = 8
MAX_FIELD_VALUE_LENGTH: Final[int] = 100
# Shown first, highlighted, without their key
HIGHLIGHTED_FIELDS: Final[tuple[str, ...]] = (
    "correlation_id",
    "request_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
)
STDLIB_LOGGERS_TO_REPLACE: Final[tuple[str, ...]] = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
)


def _escape(value: object) -> str:
    """Make ``value`` print literally inside a Loguru format string."""
    return str(value).replace("{", "{{").replace("}", "}}").replace("<", r"\<")


def _highlighted(field: str, value: object) -> str:
    if field == "correlation_id":
        value = str(value)[:CORRELATION_ID_DISPLAY_LENGTH]
    elif field == "duration_ms":
        value = f"{value}ms"
    return f"<yellow>{_escape(value)}</yellow>"


def _shortened(value: object) -> str:
    text = str(value)
    if len(text) <= MAX_FIELD_VALUE_LENGTH:
        return text
    return text[: MAX_FIELD_VALUE_LENGTH - 3] + "..."


def _context_fragments(extra: dict[str, Any]) -> list[str]:
    fragments = [
        _highlighted(field, extra[field])
        for field in HIGHLIGHTED_FIELDS
        if extra.get(field) is not None
    ]
    fragments.extend(
        f"<dim>{_escape(key)}={_escape(_shortened(value))}</dim>"
        for key, value in extra.items()
        if key not in HIGHLIGHTED_FIELDS and not key.startswith("_") and value is not None
    )
    return fragments


def format_console_with_context(record: dict[str, Any]) -> str:
    """Build the Loguru format string of one console line.

    The message and context values are escaped, so only the markup added
    here is interpreted. A record missing the expected keys falls back to
    ``DEFAULT_LOG_FORMAT``.
    """
    try:
        columns = [
            f"<green>{record['time'].strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]}</green>",
            f"<level>{record['level'].name: <8}</level>",
            f"<cyan>{record['name']}:{record['function']}:{record['line']}</cyan>",
        ]
    except (AttributeError, TypeError, ValueError, KeyError):
        return DEFAULT_LOG_FORMAT + "\n"

    if fragments := _context_fragments(record.get("extra") or {}):
        columns.append(" ".join(f"[{fragment}]" for fragment in fragments))
    columns.append(_escape(record.get("message", "")))

    line = " | ".join(columns)
    if record.get("exception"):
        line += "\n{exception}"
    return line + "\n"


def serialize_for_json(record: dict[str, Any]) -> str:
    """Render a record as one JSON line; unknown types become strings."""
    entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }
    entry.update(
        (key, value)
        for key, value in (record.get("extra") or {}).items()
        if not key.startswith("_")
    )

    if exception := record.get("exception"):
        entry["exception"] = {
            "type": exception.type.__name__ if exception.type else None,
            "value": str(exception.value) if exception.value else None,
        }

    return orjson.dumps(entry, default=str, option=orjson.OPT_NON_STR_KEYS).decode() + "\n"


class InterceptHandler(logging.Handler):
    """Standard library handler that re-emits records through Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip the logging module's own frames to report the real caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _write_json_line(message: object) -> None:
    sys.stdout.write(serialize_for_json(cast("Any", message).record))
    sys.stdout.flush()


def setup_logging(settings: Settings) -> None:
    """Install the sink chosen by ``log_config``; later calls do nothing."""
    if _state.configured:
        return

    formatter_type = settings.log_config.log_formatter_type or "console"
    level = settings.log_config.log_level

    logger.remove()
    if formatter_type == "json":
        logger.add(_write_json_line, level=level, enqueue=True, diagnose=False)
    else:
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in STDLIB_LOGGERS_TO_REPLACE:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [InterceptHandler()]
        stdlib_logger.propagate = False

    _state.configured = True
    logger.info("Logging configured with {} formatter", formatter_type, log_level=level)

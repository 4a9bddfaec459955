"""Errors raised by the categories service.

``MagazennError`` carries everything the error handlers need to build a
response: a code, a severity, optional context and the original cause.
Subclasses fix the code, the severity and the HTTP status they map to.
"""

import hashlib
import traceback
from enum import Enum
from typing import Any, ClassVar

FINGERPRINT_FRAMES = 5


class ErrorCode(Enum):
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    # Client errors that are neither validation nor lookup failures
    BAD_REQUEST = "BAD_REQUEST"


class Severity(Enum):
    """How urgently an error needs attention.

    LOW and MEDIUM errors are part of normal operation and logged as
    warnings; HIGH and CRITICAL are logged as errors.
    """

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class MagazennError(Exception):
    """Base class of the service's errors.

    Args:
        error_code: An ``ErrorCode`` or a custom code string.
        message: Human-readable description, returned to the client.
        severity: Defaults to MEDIUM.
        context: Extra data for the response ``details`` and the logs.
        cause: The exception this error wraps, if any.
    """

    http_status: ClassVar[int] = 500

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

        # Without this constructor's frame
        self.stack_trace = traceback.format_stack()[:-1]
        self.fingerprint = self._fingerprint()

    def _fingerprint(self) -> str:
        """Hash the error type and the service frames that raised it.

        Errors raised from the same place with the same code share a
        fingerprint, whatever their message.
        """
        frames = [
            f"{frame.filename}:{frame.lineno}"
            for frame in traceback.extract_stack()[-FINGERPRINT_FRAMES - 2 : -2]
            if "/magazenn/" in frame.filename
        ]
        key = ":".join([type(self).__name__, self.error_code, *frames])
        return hashlib.sha256(key.encode()).hexdigest()[:16]

    @property
    def is_expected(self) -> bool:
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        context = f", context={self.context}" if self.context else ""
        return (
            f"{type(self).__name__}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context})"
        )


class _ClientError(MagazennError):
    """An error caused by the request rather than by the service."""

    default_code: ClassVar[ErrorCode]

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            error_code or self.default_code, message, Severity.LOW, context, cause
        )


class ValidationError(_ClientError):
    """A category, given or merged, breaks a field constraint.

    ``context["validation_errors"]`` maps each field to its violations.
    """

    default_code = ErrorCode.VALIDATION_ERROR
    http_status = 400


class NotFoundError(_ClientError):
    default_code = ErrorCode.NOT_FOUND
    http_status = 404

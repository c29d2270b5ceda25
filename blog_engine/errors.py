"""
User-facing error values and retry helpers.

Every failure that reaches a user is described by an AppError carrying an
ErrorKind discriminant. user_message() turns an AppError into one entry of a
fixed message table, so raw exception text is never shown for server
errors. retry() re-runs transient outbound calls with exponential backoff.
"""

import asyncio
import logging
import random
import re
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, TypeVar

from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from .constants import (
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_BASE_DELAY,
    RETRYABLE_CLIENT_STATUSES,
)
from .models.validation import FieldValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

GENERIC_MESSAGE = "An unexpected error occurred."


class ErrorKind(str, Enum):
    """Closed set of error kinds shown to users."""

    API = "api"
    NETWORK = "network"
    VALIDATION = "validation"
    AUTH = "auth"
    UNKNOWN = "unknown"


class AppError(Exception):
    """
    A classified error.

    Attributes:
        kind: Error kind discriminant
        message: Developer-facing message
        status: HTTP status code (API errors)
        field: Offending field (validation errors)
        data: Response payload that came with the error
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str = "",
        status: int | None = None,
        field: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status
        self.field = field
        self.data = data

    def __repr__(self) -> str:
        return f"AppError(kind={self.kind.value!r}, status={self.status!r}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.status is not None:
            payload["status"] = self.status
        if self.field is not None:
            payload["field"] = self.field
        return payload


def api_error(message: str, status: int, data: dict[str, Any] | None = None) -> AppError:
    return AppError(ErrorKind.API, message, status=status, data=data)


def network_error(message: str = "Network connection failed") -> AppError:
    return AppError(ErrorKind.NETWORK, message)


def validation_error(message: str, field: str | None = None) -> AppError:
    return AppError(ErrorKind.VALIDATION, message, status=400, field=field)


def auth_error(message: str = "Authentication failed") -> AppError:
    return AppError(ErrorKind.AUTH, message, status=401)


API_STATUS_MESSAGES: dict[int, str] = {
    400: "Invalid request. Please check your input and try again.",
    401: "Your session has expired. Please log in again.",
    403: "You don't have permission to perform this action.",
    404: "The requested resource was not found.",
    409: "This resource already exists or conflicts with existing data.",
    422: "Validation failed. Please check your input.",
    429: "Too many requests. Please try again later.",
    500: "Server error. Please try again later or contact support.",
}


def user_message(error: BaseException) -> str:
    """
    Translate an error into the message shown to the user.

    Args:
        error: Any exception; AppError values are mapped by kind and status

    Returns:
        Human-readable message
    """
    if not isinstance(error, AppError):
        return str(error) or GENERIC_MESSAGE

    kind = error.kind
    if kind is ErrorKind.API:
        if error.status in API_STATUS_MESSAGES:
            return API_STATUS_MESSAGES[error.status]
        return error.message or GENERIC_MESSAGE
    if kind is ErrorKind.NETWORK:
        return "Network connection failed. Please check your internet connection."
    if kind is ErrorKind.VALIDATION:
        return error.message or "Please check your input and try again."
    if kind is ErrorKind.AUTH:
        return "Authentication failed. Please log in again."
    if kind is ErrorKind.UNKNOWN:
        return error.message or GENERIC_MESSAGE
    raise ValueError(f"Unhandled error kind: {kind!r}")


def form_errors(error: BaseException) -> dict[str, str]:
    """
    Per-field messages carried by an API error.

    Returns an empty dict when the error has no ``data["errors"]`` mapping.
    """
    if not isinstance(error, AppError) or error.kind is not ErrorKind.API:
        return {}
    errors = (error.data or {}).get("errors")
    if not isinstance(errors, dict):
        return {}
    return {str(field): str(message) for field, message in errors.items()}


_DUPLICATE_VALUE = re.compile(r"dup key: \{ ?(?P<value>.*?) ?\}")


def classify_exception(exc: BaseException) -> AppError:
    """
    Map an exception raised while serving a request to an AppError.

    Driver and model errors become 400s with a descriptive message; anything
    unrecognised becomes a 500 with a generic message.
    """
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, FieldValidationError):
        return validation_error(exc.message, field=exc.field)
    if isinstance(exc, InvalidId):
        return api_error(f"Invalid id: {exc}", 400)
    if isinstance(exc, DuplicateKeyError):
        match = _DUPLICATE_VALUE.search(str(exc))
        value = match.group("value") if match else "value"
        return api_error(f"Duplicate field value: {value}. Please use another value!", 400)

    logger.error(f"Unclassified error: {exc!r}", exc_info=exc)
    return AppError(ErrorKind.UNKNOWN, "Something went wrong!", status=500)


def is_retryable(error: BaseException) -> bool:
    """Client errors (4xx) are final, except request timeout and rate limiting."""
    status = getattr(error, "status", None)
    if isinstance(status, int) and 400 <= status < 500:
        return status in RETRYABLE_CLIENT_STATUSES
    return True


async def retry(
    fn: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_RETRY_ATTEMPTS,
    base_delay: float = DEFAULT_RETRY_BASE_DELAY,
) -> T:
    """
    Call ``fn`` until it succeeds, up to ``max_attempts`` times in total.

    Waits ``base_delay * 2 ** (attempt - 1)`` plus up to ``base_delay`` of
    random jitter between attempts. Non-retryable errors are raised at once.

    Args:
        fn: Zero-argument async callable
        max_attempts: Total number of calls
        base_delay: Base delay in seconds

    Returns:
        The first successful result

    Raises:
        The last error once attempts are exhausted
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

    last_error: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            return await fn()
        except Exception as e:
            last_error = e
            if not is_retryable(e):
                raise
            if attempt == max_attempts:
                break

            delay = base_delay * 2 ** (attempt - 1) + random.random() * base_delay
            logger.warning(
                f"Attempt {attempt}/{max_attempts} failed, retrying in {delay:.2f}s: {e}"
            )
            await asyncio.sleep(delay)

    assert last_error is not None
    raise last_error

"""Classified errors.

Every error carries a stable ``kind`` that drives fallback and retry decisions:

- ``GenerationTimeout`` always reaches the caller.
- ``TransportError`` / ``ApiError`` / ``ParseError`` are downgraded once to the
  fallback generator.
- ``StoreError`` subclasses never leave the repository; they degrade to the local store.
- ``ExternalRateLimit`` is retried with backoff by the exporter.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Stable error classification."""

    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    API = "api"
    PARSE = "parse"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORE = "store"
    RATE_LIMIT = "rate_limit"
    BOARD = "board"


class ScreenflowError(Exception):
    """Base for all classified errors."""

    kind: ErrorKind = ErrorKind.API

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ============================================================================
# Generation
# ============================================================================


class GenerationError(ScreenflowError):
    """Completion call or its response failed."""


class GenerationTimeout(GenerationError):
    """The completion call did not finish before the deadline."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, timeout: float | None = None, message: str | None = None) -> None:
        if message is None:
            message = (
                f"Screen generation timed out after {timeout:g}s"
                if timeout is not None
                else "Screen generation timed out"
            )
        super().__init__(message)
        self.timeout = timeout


class TransportError(GenerationError):
    """Network-level failure (DNS, connect, reset)."""

    kind = ErrorKind.TRANSPORT


class ApiError(GenerationError):
    """Non-2xx response from the completion endpoint or a proxy in front of it."""

    kind = ErrorKind.API

    def __init__(self, status: int, message: str | None = None) -> None:
        super().__init__(message or f"Completion API request failed with status {status}")
        self.status = status


class ParseError(GenerationError):
    """Completion text is not a valid screen-set document."""

    kind = ErrorKind.PARSE


# ============================================================================
# Storage
# ============================================================================


class StoreError(ScreenflowError):
    """Primary store operation failed."""

    kind = ErrorKind.STORE


class NotFoundError(StoreError):
    """Row addressed by id does not exist."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(StoreError):
    """Concurrent writer won a uniqueness race."""

    kind = ErrorKind.CONFLICT


# ============================================================================
# Board export
# ============================================================================


class BoardApiError(ScreenflowError):
    """Non-2xx response from the board API."""

    kind = ErrorKind.BOARD

    def __init__(self, status: int, message: str | None = None) -> None:
        super().__init__(message or f"Board API request failed with status {status}")
        self.status = status


class ExternalRateLimit(BoardApiError):
    """429 (rate limited) or 409 (conflict) from the board API; safe to retry."""

    kind = ErrorKind.RATE_LIMIT


RETRYABLE_BOARD_STATUSES = frozenset({409, 429})


def describe_error(error: BaseException) -> str:
    """User-facing wording for a failed generation, by error kind."""
    kind = getattr(error, "kind", None)
    match kind:
        case ErrorKind.TIMEOUT:
            return (
                "The screen generation process timed out. "
                "Please try again later when the server is less busy."
            )
        case ErrorKind.TRANSPORT:
            return "We could not reach the AI service. Please check your connection and try again."
        case ErrorKind.API | ErrorKind.PARSE:
            return "We encountered an issue with our AI service. Please try again later."
        case _:
            return "Unable to generate screens at this time. Please try again later."


__all__ = [
    "ErrorKind",
    "ScreenflowError",
    "GenerationError",
    "GenerationTimeout",
    "TransportError",
    "ApiError",
    "ParseError",
    "StoreError",
    "NotFoundError",
    "ConflictError",
    "BoardApiError",
    "ExternalRateLimit",
    "RETRYABLE_BOARD_STATUSES",
    "describe_error",
]

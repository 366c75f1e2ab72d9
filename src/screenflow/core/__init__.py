"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .errors import (
    ErrorKind,
    ScreenflowError,
    GenerationError,
    GenerationTimeout,
    TransportError,
    ApiError,
    ParseError,
    StoreError,
    NotFoundError,
    ConflictError,
    BoardApiError,
    ExternalRateLimit,
    RETRYABLE_BOARD_STATUSES,
    describe_error,
)
from .validate import ValidationError, ValidationResult, RequestValidator
from .logging_config import configure_logging, get_logger, LogContext
from .json import (
    extract_json,
    strip_code_fences,
    safe_json_dumps,
    JSONParseError,
    validate_json_size,
    validate_json_depth,
)
from .cache import LRUCache, Stats


def create_container(settings: Settings | None = None):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(settings)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
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
    # Validation
    "ValidationError",
    "ValidationResult",
    "RequestValidator",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # JSON
    "extract_json",
    "strip_code_fences",
    "safe_json_dumps",
    "JSONParseError",
    "validate_json_size",
    "validate_json_depth",
    # DI
    "create_container",
    # Caching
    "LRUCache",
    "Stats",
]

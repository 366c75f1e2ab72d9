"""Input validation primitives."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict


# Validation limits
MAX_RESPONSE_SIZE = 512 * 1024  # 512KB of completion text
MAX_JSON_DEPTH = 20
MAX_FIELD_LENGTH = 10_000


class ValidationError(Exception):
    """Validation failed."""

    pass


@dataclass(frozen=True)
class ValidationResult:
    """Validation error with details (for Result pattern)."""

    message: str
    field: str | None = None
    value: Any | None = None


class RequestValidator(BaseModel):
    """Base validator with strict configuration."""

    model_config = ConfigDict(
        str_strip_whitespace=True, validate_assignment=True, extra="forbid", frozen=True
    )

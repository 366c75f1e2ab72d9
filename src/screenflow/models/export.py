"""Board export types."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class Priority(str, Enum):
    """Feature priority (MoSCoW)."""

    MUST = "MUST"
    SHOULD = "SHOULD"
    COULD = "COULD"
    WONT = "WONT"

    @classmethod
    def parse(cls, value: Any) -> "Priority | None":
        """Case-insensitive lookup; None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().upper().replace("'", "")
        try:
            return cls(normalized)
        except ValueError:
            return None

    @property
    def exportable(self) -> bool:
        return self in (Priority.MUST, Priority.SHOULD)


class ExportFeature(BaseModel):
    """One feature candidate for a board card."""

    title: str
    description: str = ""
    priority: Priority | None = None

    @field_validator("priority", mode="before")
    @classmethod
    def _parse_priority(cls, value: Any) -> Priority | None:
        return Priority.parse(value)

    @property
    def exportable(self) -> bool:
        return self.priority is not None and self.priority.exportable


class BoardList(BaseModel):
    id: str
    name: str
    closed: bool = False


class BoardSummary(BaseModel):
    id: str
    name: str
    url: str = ""


class CardError(BaseModel):
    """A card that could not be created, with the reason."""

    feature: str
    error: str


class ExportResult(BaseModel):
    """Outcome of one export call."""

    success: bool
    message: str
    cards_created: int = 0
    board_url: str | None = None
    errors: list[CardError] = Field(default_factory=list)
    # Features dropped by the priority filter
    skipped: int = 0

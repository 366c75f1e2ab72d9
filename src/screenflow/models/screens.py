"""Screen-set domain model.

A ``ScreenSet`` is the aggregate of every ``Screen`` generated for one parent
document plus the single ``AppFlow`` (ordered ``FlowStep`` journey) that links them.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, Field, model_validator
from returns.result import Failure, Result, Success

from ..core.id import new_app_flow_id, new_element_id, new_flow_step_id, new_screen_id
from ..core.json import safe_json_dumps
from ..core.validate import ValidationError, ValidationResult

METADATA_ELEMENT_TYPE = "_metadata"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _stringify(value: Any) -> str:
    """Coerce a loosely typed property value to the string form it is stored in."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return safe_json_dumps(value)


# ============================================================================
# UI Elements
# ============================================================================


class ElementBase(BaseModel):
    """Shared shape of every element variant.

    Typed fields are listed in ``known_fields``; any other property key lands in
    ``extra`` so nothing the model produced is lost.
    """

    known_fields: ClassVar[tuple[str, ...]] = ()

    id: str = Field(default_factory=new_element_id)
    extra: dict[str, str] = Field(default_factory=dict)

    @property
    def properties(self) -> dict[str, str]:
        """Flat string map of typed and extra properties."""
        props: dict[str, str] = {}
        for name in self.known_fields:
            value = getattr(self, name)
            if value is not None:
                props[name] = value
        props.update(self.extra)
        return props

    @property
    def stored_type(self) -> str:
        return self.type  # type: ignore[attr-defined]

    @classmethod
    def from_properties(
        cls, properties: dict[str, Any] | None, element_id: str | None = None, **fields: Any
    ):
        known: dict[str, str] = {}
        extra: dict[str, str] = {}
        for key, value in (properties or {}).items():
            key = str(key)
            if key in cls.known_fields:
                known[key] = _stringify(value)
            else:
                extra[key] = _stringify(value)
        if element_id:
            fields["id"] = element_id
        return cls(**known, **fields, extra=extra)


class ImageElement(ElementBase):
    known_fields: ClassVar[tuple[str, ...]] = ("description",)

    type: Literal["image"] = "image"
    description: str | None = None


class InputElement(ElementBase):
    known_fields: ClassVar[tuple[str, ...]] = ("description",)

    type: Literal["input"] = "input"
    description: str | None = None


class TextElement(ElementBase):
    known_fields: ClassVar[tuple[str, ...]] = ("content",)

    type: Literal["text"] = "text"
    content: str | None = None


class ButtonElement(ElementBase):
    known_fields: ClassVar[tuple[str, ...]] = ("content", "action")

    type: Literal["button"] = "button"
    content: str | None = None
    action: str | None = None


class UnknownElement(ElementBase):
    """Element whose type is missing or outside the known vocabulary."""

    type: Literal["unknown"] = "unknown"
    declared_type: str | None = None

    @property
    def stored_type(self) -> str:
        return self.declared_type or "unknown"


UiElement = Annotated[
    Union[ImageElement, InputElement, TextElement, ButtonElement, UnknownElement],
    Field(discriminator="type"),
]

_ELEMENT_TYPES: dict[str, type[ElementBase]] = {
    "image": ImageElement,
    "input": InputElement,
    "text": TextElement,
    "button": ButtonElement,
}


def make_element(
    element_type: Any, properties: dict[str, Any] | None = None, element_id: str | None = None
) -> UiElement:
    """Build the typed variant for ``element_type``; anything unrecognised becomes UnknownElement."""
    raw_type = element_type.strip() if isinstance(element_type, str) else ""
    normalized = raw_type.lower()
    variant = _ELEMENT_TYPES.get(normalized)
    if variant is not None:
        return variant.from_properties(properties, element_id)

    declared = raw_type if raw_type and normalized != "unknown" else None
    return UnknownElement.from_properties(properties, element_id, declared_type=declared)


def element_to_record(element: ElementBase) -> dict[str, Any]:
    return {"id": element.id, "type": element.stored_type, "properties": element.properties}


def element_from_record(record: dict[str, Any]) -> UiElement:
    properties = record.get("properties")
    return make_element(
        record.get("type"),
        properties if isinstance(properties, dict) else {},
        record.get("id") or None,
    )


# ============================================================================
# Screens and flow
# ============================================================================


class Screen(BaseModel):
    """One generated screen."""

    id: str = Field(default_factory=new_screen_id)
    parent_document_id: str
    name: str
    description: str = ""
    feature_id: str | None = None
    elements: list[UiElement] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)


class FlowStep(BaseModel):
    """One ordered entry of the user journey, optionally pointing at a screen."""

    id: str = Field(default_factory=new_flow_step_id)
    description: str = ""
    screen_id: str | None = None
    position: int = Field(default=0, ge=0)
    # Raw reference text from the model response; not persisted
    screen_reference: str | None = None


class AppFlow(BaseModel):
    """Ordered user journey for one parent document."""

    id: str = Field(default_factory=new_app_flow_id)
    parent_document_id: str
    steps: list[FlowStep] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)

    def renumbered(self) -> "AppFlow":
        """Copy with ``steps[i].position == i``."""
        steps = [step.model_copy(update={"position": index}) for index, step in enumerate(self.steps)]
        return self.model_copy(update={"steps": steps})

    def with_step_added(
        self, description: str, screen_id: str | None = None, index: int | None = None
    ) -> "AppFlow":
        steps = list(self.steps)
        step = FlowStep(description=description, screen_id=screen_id)
        if index is None:
            steps.append(step)
        else:
            steps.insert(max(0, min(index, len(steps))), step)
        return self.model_copy(update={"steps": steps}).renumbered()

    def with_step_edited(self, step_id: str, description: str, screen_id: str | None) -> "AppFlow":
        if not any(step.id == step_id for step in self.steps):
            raise ValidationError(f"Unknown flow step: {step_id}")
        steps = [
            step.model_copy(update={"description": description, "screen_id": screen_id})
            if step.id == step_id
            else step
            for step in self.steps
        ]
        return self.model_copy(update={"steps": steps}).renumbered()

    def with_step_removed(self, step_id: str) -> "AppFlow":
        steps = [step for step in self.steps if step.id != step_id]
        return self.model_copy(update={"steps": steps}).renumbered()


class ScreenSet(BaseModel):
    """Aggregate unit of generation, persistence and deletion."""

    screens: list[Screen] = Field(default_factory=list)
    app_flow: AppFlow

    @model_validator(mode="after")
    def _screens_share_parent(self) -> "ScreenSet":
        parent_id = self.app_flow.parent_document_id
        for screen in self.screens:
            if screen.parent_document_id != parent_id:
                raise ValueError(
                    f"Screen {screen.id} belongs to {screen.parent_document_id}, not {parent_id}"
                )
        return self

    @classmethod
    def empty(cls, parent_document_id: str) -> "ScreenSet":
        """Empty set with a freshly minted AppFlow id."""
        return cls(screens=[], app_flow=AppFlow(parent_document_id=parent_document_id))

    @property
    def parent_document_id(self) -> str:
        return self.app_flow.parent_document_id

    @property
    def is_empty(self) -> bool:
        return not self.screens and not self.app_flow.steps

    def screen_by_name(self, name: str) -> Screen | None:
        """First screen with exactly this name, in list order."""
        return next((screen for screen in self.screens if screen.name == name), None)

    def screen_ids(self) -> set[str]:
        return {screen.id for screen in self.screens}


def check_invariants(screen_set: ScreenSet) -> Result[None, ValidationResult]:
    """Verify step links point into the set and positions are contiguous."""
    screen_ids = screen_set.screen_ids()
    for index, step in enumerate(screen_set.app_flow.steps):
        if step.screen_id is not None and step.screen_id not in screen_ids:
            return Failure(
                ValidationResult(
                    f"Step {step.id} references a screen outside the set",
                    field="screen_id",
                    value=step.screen_id,
                )
            )
        if step.position != index:
            return Failure(
                ValidationResult(
                    f"Step {step.id} has position {step.position}, expected {index}",
                    field="position",
                    value=step.position,
                )
            )
    return Success(None)


__all__ = [
    "METADATA_ELEMENT_TYPE",
    "ElementBase",
    "ImageElement",
    "InputElement",
    "TextElement",
    "ButtonElement",
    "UnknownElement",
    "UiElement",
    "make_element",
    "element_to_record",
    "element_from_record",
    "Screen",
    "FlowStep",
    "AppFlow",
    "ScreenSet",
    "check_invariants",
    "utcnow",
]

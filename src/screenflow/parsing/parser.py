"""Screen-set parser - completion text to a cross-linked ScreenSet."""

from typing import Any

from ..core import get_logger
from ..core.errors import ParseError
from ..core.json import JSONParseError, extract_json, validate_json_depth, validate_json_size
from ..core.validate import MAX_JSON_DEPTH, MAX_RESPONSE_SIZE
from ..models.screens import AppFlow, FlowStep, Screen, ScreenSet, UiElement, make_element

logger = get_logger(__name__)

DEFAULT_SCREEN_NAME = "Unnamed Screen"


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _as_text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


class ScreenSetParser:
    """Parses completion output shaped as
    ``{appFlow: {steps: [{description, screenReference}]}, screens: [{name, description, elements}]}``.
    """

    def __init__(self, repair: bool = False):
        self.repair = repair

    def parse(self, text: str, parent_document_id: str) -> ScreenSet:
        """
        Parse completion text into a fully linked ScreenSet.

        Every screen, element and step gets a fresh id. Step positions follow
        array order and ``screenReference`` resolves to the first screen with
        exactly that name; unmatched references leave ``screen_id`` unset.

        Args:
            text: Raw completion text (code fences and surrounding prose allowed)
            parent_document_id: Document the screen set belongs to

        Returns:
            ScreenSet; empty when the document has neither ``screens`` nor ``appFlow``

        Raises:
            ParseError: If the text holds no decodable JSON object
        """
        try:
            validate_json_size(text, MAX_RESPONSE_SIZE, "Completion response")
            document = extract_json(text, repair=self.repair)
            validate_json_depth(document, MAX_JSON_DEPTH)
        except JSONParseError as e:
            logger.warning("response_parse_failed", error=str(e))
            raise ParseError(f"Invalid screen response: {e}") from e

        if "screens" not in document and "appFlow" not in document:
            logger.warning("response_schema_empty", keys=list(document.keys())[:10])

        screens = [
            self._build_screen(raw, parent_document_id)
            for raw in _as_list(document.get("screens"))
            if isinstance(raw, dict)
        ]

        raw_flow = document.get("appFlow")
        raw_steps = _as_list(raw_flow.get("steps")) if isinstance(raw_flow, dict) else []
        steps = self._build_steps(raw_steps, screens)

        logger.info(
            "response_parsed",
            parent_id=parent_document_id,
            screens=len(screens),
            steps=len(steps),
            linked=sum(1 for step in steps if step.screen_id),
        )
        return ScreenSet(
            screens=screens,
            app_flow=AppFlow(parent_document_id=parent_document_id, steps=steps),
        )

    def _build_screen(self, raw: dict[str, Any], parent_document_id: str) -> Screen:
        feature_id = _as_text(raw.get("featureId")).strip()
        return Screen(
            parent_document_id=parent_document_id,
            name=_as_text(raw.get("name")) or DEFAULT_SCREEN_NAME,
            description=_as_text(raw.get("description")),
            feature_id=feature_id or None,
            elements=self._build_elements(_as_list(raw.get("elements"))),
        )

    def _build_elements(self, raw_elements: list[Any]) -> list[UiElement]:
        elements: list[UiElement] = []
        for raw in raw_elements:
            if not isinstance(raw, dict):
                # Bare strings are treated as text content
                if isinstance(raw, str):
                    elements.append(make_element("text", {"content": raw}))
                continue
            properties = raw.get("properties")
            elements.append(
                make_element(raw.get("type"), properties if isinstance(properties, dict) else {})
            )
        return elements

    def _build_steps(self, raw_steps: list[Any], screens: list[Screen]) -> list[FlowStep]:
        # First screen wins when names collide
        by_name: dict[str, str] = {}
        for screen in screens:
            by_name.setdefault(screen.name, screen.id)

        steps: list[FlowStep] = []
        for raw in raw_steps:
            if isinstance(raw, str):
                raw = {"description": raw}
            elif not isinstance(raw, dict):
                continue

            reference = raw.get("screenReference")
            reference = reference if isinstance(reference, str) else None
            steps.append(
                FlowStep(
                    description=_as_text(raw.get("description")),
                    screen_id=by_name.get(reference) if reference is not None else None,
                    position=len(steps),
                    screen_reference=reference,
                )
            )
        return steps


_default_parser = ScreenSetParser()


def parse_screen_set(text: str, parent_document_id: str) -> ScreenSet:
    """Parse with the default (non-repairing) parser."""
    return _default_parser.parse(text, parent_document_id)


__all__ = ["DEFAULT_SCREEN_NAME", "ScreenSetParser", "parse_screen_set"]

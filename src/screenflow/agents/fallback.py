"""Fallback Generator - deterministic, network-free basic screens."""

from ..core import get_logger
from ..models.documents import Brief, FeatureDocument
from ..models.screens import (
    AppFlow,
    ButtonElement,
    FlowStep,
    InputElement,
    Screen,
    ScreenSet,
    TextElement,
)
from .features import FeatureRef, extract_features

logger = get_logger(__name__)

LOGIN_SCREEN = "Login Screen"
HOME_SCREEN = "Home Screen"
MAX_FEATURE_SCREENS = 2


class Templates:
    """Element templates."""

    @staticmethod
    def text(content: str) -> TextElement:
        return TextElement(content=content)

    @staticmethod
    def input(description: str) -> InputElement:
        return InputElement(description=description)

    @staticmethod
    def button(content: str, action: str) -> ButtonElement:
        return ButtonElement(content=content, action=action)


class FallbackGenerator:
    """Builds a minimal but valid ScreenSet from the brief and document alone.

    Output is a Login and a Home screen plus up to two feature screens, with a
    journey that visits them in that order. Names and element content depend
    only on the inputs; ids are fresh on every call.
    """

    def __init__(self) -> None:
        self.templates = Templates()

    def generate(self, brief: Brief, document: FeatureDocument) -> ScreenSet:
        parent_id = document.id
        product = brief.display_name
        features = extract_features(document.content)[:MAX_FEATURE_SCREENS]

        screens = [
            self._login_screen(parent_id, product),
            self._home_screen(parent_id, product, features),
            *(self._feature_screen(parent_id, feature) for feature in features),
        ]
        by_name: dict[str, str] = {}
        for screen in screens:
            by_name.setdefault(screen.name, screen.id)

        journey = [
            ("User logs in to the application", LOGIN_SCREEN),
            ("User views the home dashboard", HOME_SCREEN),
            *((f"User navigates to the {f.name} feature", f"{f.name} Screen") for f in features),
        ]
        steps = [
            FlowStep(
                description=description,
                screen_id=by_name.get(reference),
                position=index,
                screen_reference=reference,
            )
            for index, (description, reference) in enumerate(journey)
        ]

        logger.info(
            "fallback_generated",
            parent_id=parent_id,
            screens=len(screens),
            features=[f.id for f in features],
        )
        return ScreenSet(
            screens=screens, app_flow=AppFlow(parent_document_id=parent_id, steps=steps)
        )

    def _login_screen(self, parent_id: str, product: str) -> Screen:
        t = self.templates
        return Screen(
            parent_document_id=parent_id,
            name=LOGIN_SCREEN,
            description="User authentication screen",
            feature_id="authentication",
            elements=[
                t.text(f"Welcome to {product}"),
                t.input("Email input field"),
                t.input("Password input field"),
                t.button("Login", f"Navigate to {HOME_SCREEN}"),
            ],
        )

    def _home_screen(self, parent_id: str, product: str, features: list[FeatureRef]) -> Screen:
        t = self.templates
        return Screen(
            parent_document_id=parent_id,
            name=HOME_SCREEN,
            description="Main dashboard for the application",
            feature_id="dashboard",
            elements=[
                t.text(f"{product} Dashboard"),
                t.text("Welcome back, User"),
                *(t.button(f.name, f"Navigate to {f.name} Screen") for f in features),
            ],
        )

    def _feature_screen(self, parent_id: str, feature: FeatureRef) -> Screen:
        t = self.templates
        return Screen(
            parent_document_id=parent_id,
            name=f"{feature.name} Screen",
            description=f"Screen for the {feature.name} feature",
            feature_id=feature.id,
            elements=[
                t.text(feature.name),
                t.text(f"This screen handles the {feature.name} functionality"),
                t.button("Back to Home", f"Navigate to {HOME_SCREEN}"),
            ],
        )


def generate_fallback(brief: Brief, document: FeatureDocument) -> ScreenSet:
    """Module-level convenience over a fresh FallbackGenerator."""
    return FallbackGenerator().generate(brief, document)


__all__ = ["FallbackGenerator", "Templates", "generate_fallback", "LOGIN_SCREEN", "HOME_SCREEN"]

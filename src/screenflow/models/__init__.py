"""
Models package - screen sets, generation inputs and board export types.
"""

from .config import CompletionConfig, CompletionModel
from .documents import Brief, FeatureDocument, GenerationRequest
from .export import BoardList, BoardSummary, CardError, ExportFeature, ExportResult, Priority
from .screens import (
    METADATA_ELEMENT_TYPE,
    AppFlow,
    ButtonElement,
    ElementBase,
    FlowStep,
    ImageElement,
    InputElement,
    Screen,
    ScreenSet,
    TextElement,
    UiElement,
    UnknownElement,
    check_invariants,
    element_from_record,
    element_to_record,
    make_element,
)

__all__ = [
    # Completion
    "CompletionConfig",
    "CompletionModel",
    # Inputs
    "Brief",
    "FeatureDocument",
    "GenerationRequest",
    # Screen sets
    "METADATA_ELEMENT_TYPE",
    "AppFlow",
    "ButtonElement",
    "ElementBase",
    "FlowStep",
    "ImageElement",
    "InputElement",
    "Screen",
    "ScreenSet",
    "TextElement",
    "UiElement",
    "UnknownElement",
    "check_invariants",
    "element_from_record",
    "element_to_record",
    "make_element",
    # Export
    "BoardList",
    "BoardSummary",
    "CardError",
    "ExportFeature",
    "ExportResult",
    "Priority",
]

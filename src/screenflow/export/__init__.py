"""Board export of prioritized features."""

from .exporter import (
    TARGET_LIST_NAMES,
    ExportDeadlineExceeded,
    FeatureExporter,
    card_description,
    card_title,
)

__all__ = [
    "FeatureExporter",
    "ExportDeadlineExceeded",
    "TARGET_LIST_NAMES",
    "card_title",
    "card_description",
]

"""Request handlers."""

from .export import ExportHandler
from .screens import LOCAL_DATA_NOTICE, ScreensHandler, ScreensOutcome

__all__ = ["ExportHandler", "ScreensHandler", "ScreensOutcome", "LOCAL_DATA_NOTICE"]

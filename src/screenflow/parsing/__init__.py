"""Completion-response parsing."""

from .parser import DEFAULT_SCREEN_NAME, ScreenSetParser, parse_screen_set

__all__ = ["DEFAULT_SCREEN_NAME", "ScreenSetParser", "parse_screen_set"]

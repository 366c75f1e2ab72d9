"""HTTP clients for the completion endpoint and the board API."""

from .board import DEFAULT_LIST_NAME, BoardClient
from .completion import CompletionClient

__all__ = ["BoardClient", "CompletionClient", "DEFAULT_LIST_NAME"]

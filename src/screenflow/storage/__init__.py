"""Screen-set persistence: relational primary store plus local fallback."""

from .local import LocalCache
from .relational import SqlScreenStore, create_store_engine
from .repository import ScreenRepository

__all__ = ["LocalCache", "SqlScreenStore", "ScreenRepository", "create_store_engine"]

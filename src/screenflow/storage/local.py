"""Process-local fallback store for screen sets."""

from ..core import get_logger
from ..core.cache import LRUCache
from ..core.json import dumps_bytes, loads
from ..models.screens import AppFlow, Screen, ScreenSet

logger = get_logger(__name__)


class LocalCache:
    """
    Screen sets keyed by parent document id, serialized with orjson.

    Used by the repository only when the primary store fails. Entries are
    stored as bytes so callers never share mutable state with the cache.
    """

    def __init__(self, max_size: int = 1000, ttl_seconds: float | None = None) -> None:
        self._cache: LRUCache[bytes] = LRUCache(
            max_size=max_size, ttl_seconds=ttl_seconds, on_evict=self._evicted
        )

    @staticmethod
    def _evicted(parent_id: str) -> None:
        logger.warning("local_evicted", parent_id=parent_id)

    def get(self, parent_id: str) -> ScreenSet | None:
        raw = self._cache.get(parent_id)
        if raw is None:
            return None
        return ScreenSet.model_validate(loads(raw))

    def put(self, screen_set: ScreenSet) -> ScreenSet:
        """Store ``screen_set`` for its parent; an existing entry keeps its flow id."""
        parent_id = screen_set.parent_document_id
        existing = self.get(parent_id)
        flow = screen_set.app_flow
        if existing is not None:
            flow = flow.model_copy(update={"id": existing.app_flow.id})

        stored = screen_set.model_copy(update={"app_flow": flow.renumbered()})
        self._write(stored)
        return stored

    def find_by_flow_id(self, app_flow_id: str) -> ScreenSet | None:
        """Entry whose flow id (or parent id) equals ``app_flow_id``."""
        for parent_id, raw in self._cache.items():
            screen_set = ScreenSet.model_validate(loads(raw))
            if screen_set.app_flow.id == app_flow_id or parent_id == app_flow_id:
                return screen_set
        return None

    def delete_by_flow_id(self, app_flow_id: str) -> bool:
        screen_set = self.find_by_flow_id(app_flow_id)
        if screen_set is None:
            return False
        return self._cache.delete(screen_set.parent_document_id)

    def update_app_flow(self, app_flow: AppFlow) -> AppFlow | None:
        """Swap in ``app_flow`` for its parent's entry. None if there is no entry."""
        existing = self.get(app_flow.parent_document_id)
        if existing is None:
            return None
        flow = app_flow.renumbered()
        self._write(existing.model_copy(update={"app_flow": flow}))
        return flow

    def update_screen(self, screen: Screen) -> Screen | None:
        """Replace the screen with the same id. None if it is not cached."""
        existing = self.get(screen.parent_document_id)
        if existing is None or screen.id not in existing.screen_ids():
            return None
        screens = [screen if s.id == screen.id else s for s in existing.screens]
        self._write(existing.model_copy(update={"screens": screens}))
        return screen

    def clear(self) -> None:
        self._cache.clear()

    def _write(self, screen_set: ScreenSet) -> None:
        self._cache.set(screen_set.parent_document_id, dumps_bytes(screen_set.model_dump(mode="json")))
        logger.debug("local_write", parent_id=screen_set.parent_document_id, entries=len(self._cache))

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, parent_id: str) -> bool:
        return parent_id in self._cache


__all__ = ["LocalCache"]

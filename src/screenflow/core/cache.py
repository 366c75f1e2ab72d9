"""Bounded in-memory LRU map with optional expiry.

Backs the local fallback store: entries are evicted least-recently-used first
once ``max_size`` is reached, and ``on_evict`` is told which key was dropped.
"""

import time
from collections import OrderedDict
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class Stats:
    """Counters since creation."""

    size: int = 0
    max_size: int = 0
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


class LRUCache(Generic[T]):
    """
    Generic LRU map keyed by string.

    Examples:
        >>> cache = LRUCache[bytes](max_size=2)
        >>> cache.set("doc-1", b"...")
        >>> "doc-1" in cache
        True
    """

    def __init__(
        self,
        max_size: int = 100,
        ttl_seconds: float | None = None,
        on_evict: Callable[[str], None] | None = None,
    ):
        """
        Args:
            max_size: Entry limit
            ttl_seconds: Entry lifetime (None keeps entries until evicted)
            on_evict: Called with the key of each entry dropped for space
        """
        if max_size <= 0:
            raise ValueError("max_size must be positive")

        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self.on_evict = on_evict

        self._entries: OrderedDict[str, tuple[T, float]] = OrderedDict()
        self._stats = Stats(max_size=max_size)

    def _expired(self, stored_at: float) -> bool:
        return self.ttl_seconds is not None and time.time() - stored_at >= self.ttl_seconds

    def _sync_size(self) -> None:
        self._stats.size = len(self._entries)

    def get(self, key: str) -> T | None:
        """Value for ``key`` (refreshing its recency), or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            self._stats.misses += 1
            return None

        value, stored_at = entry
        if self._expired(stored_at):
            del self._entries[key]
            self._sync_size()
            self._stats.expirations += 1
            self._stats.misses += 1
            return None

        self._entries.move_to_end(key)
        self._stats.hits += 1
        return value

    def set(self, key: str, value: T) -> None:
        self._entries.pop(key, None)
        self._entries[key] = (value, time.time())

        while len(self._entries) > self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            self._stats.evictions += 1
            if self.on_evict is not None:
                self.on_evict(evicted)

        self._sync_size()

    def delete(self, key: str) -> bool:
        """Remove ``key``; False if it was not present."""
        removed = self._entries.pop(key, None) is not None
        self._sync_size()
        return removed

    def items(self) -> Iterator[tuple[str, T]]:
        """Live entries, oldest first, without refreshing recency."""
        for key, (value, stored_at) in list(self._entries.items()):
            if not self._expired(stored_at):
                yield key, value

    def clear(self) -> None:
        self._entries.clear()
        self._sync_size()

    @property
    def stats(self) -> Stats:
        return self._stats

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        # Membership does not refresh recency
        return key in self._entries


__all__ = ["LRUCache", "Stats"]

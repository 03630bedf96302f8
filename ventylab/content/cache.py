"""
Bounded LRU cache for normalized lessons.

The cache is an ordinary object: whoever builds the loader owns it and passes
it in, so tests and separate loaders never share hidden state.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Generic, TypeVar

from loguru import logger

MAX_CACHE_SIZE = 50

V = TypeVar("V")


class LRUContentCache(Generic[V]):
    """Least-recently-used cache with a fixed capacity."""

    def __init__(self, max_size: int = MAX_CACHE_SIZE):
        if max_size < 1:
            raise ValueError(f"Cache size must be at least 1, got {max_size}")
        self.max_size = max_size
        self._entries: OrderedDict[str, V] = OrderedDict()

    def get(self, key: str) -> V | None:
        """Return the cached value and mark it most recently used, or None on a miss."""
        if key not in self._entries:
            return None
        self._entries.move_to_end(key)
        return self._entries[key]

    def set(self, key: str, value: V) -> None:
        """Insert or replace a value, evicting the least recently used entry when full."""
        self._entries.pop(key, None)
        if len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Cache evicted: {evicted}")
        self._entries[key] = value

    def has(self, key: str) -> bool:
        """Membership test; does not change recency."""
        return key in self._entries

    def clear(self) -> None:
        self._entries.clear()
        logger.debug("Cache cleared")

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

"""Bounded least-recently-used cache for compiled templates.

The cache itself is not synchronized: its owner (FileLoader) serializes
every call under the loader lock. Reads promote recency, so even ``get``
counts as a mutation.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


@dataclass
class CacheStats:
    """Statistics for cache performance monitoring."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    cache_size: int = 0
    max_size: int = 0

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        return self.hits / self.total_requests if self.total_requests else 0.0


class LRUCache(Generic[K, V]):
    """LRU cache with a fixed capacity.

    Entries are kept in an OrderedDict from least to most recently used;
    inserting into a full cache evicts the first entry.
    """

    def __init__(self, max_size: int):
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self._entries: "OrderedDict[K, V]" = OrderedDict()
        self._stats = CacheStats(max_size=max_size)

    def get(self, key: K) -> Optional[V]:
        """Return the cached value and mark it most recently used, or None on a miss."""
        if key not in self._entries:
            self._stats.misses += 1
            logger.debug(f"Cache miss for {key!r}")
            return None

        self._entries.move_to_end(key)
        self._stats.hits += 1
        logger.debug(f"Cache hit for {key!r}")
        return self._entries[key]

    def put(self, key: K, value: V) -> None:
        """Insert or replace `key` as most recently used, evicting the oldest entry if full."""
        if key in self._entries:
            self._entries.move_to_end(key)
            self._entries[key] = value
            return

        if len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            self._stats.evictions += 1
            logger.debug(f"Evicted {evicted!r} from cache (max_size={self.max_size})")

        self._entries[key] = value
        self._stats.cache_size = len(self._entries)

    def put_if_absent(self, key: K, value: V) -> V:
        """Insert `value` unless an entry for `key` already exists.

        An existing entry wins and is promoted; the new value is discarded.
        """
        if key in self._entries:
            self._entries.move_to_end(key)
            return self._entries[key]
        self.put(key, value)
        return value

    def pop(self, key: K) -> Optional[V]:
        value = self._entries.pop(key, None)
        self._stats.cache_size = len(self._entries)
        return value

    def keys(self) -> List[K]:
        """Keys from least to most recently used."""
        return list(self._entries)

    @property
    def stats(self) -> CacheStats:
        """Snapshot of the current statistics."""
        s = self._stats
        return CacheStats(
            hits=s.hits,
            misses=s.misses,
            evictions=s.evictions,
            cache_size=len(self._entries),
            max_size=self.max_size,
        )

    def __contains__(self, key: object) -> bool:
        return key in self._entries


__all__ = ["CacheStats", "LRUCache"]

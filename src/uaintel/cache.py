"""Bounded in-memory store for classification results.

Entries are never overwritten: the first write for a key wins. When the
entry count goes over capacity the oldest insertions are evicted first
(FIFO). Reads do not refresh an entry's position.
"""

import threading
from collections import OrderedDict
from collections.abc import Hashable
from typing import Any, Generic, TypeVar

from uaintel.common.logging import get_logger
from uaintel.common.metrics import CACHE_EVICTIONS, CACHE_HITS, CACHE_MISSES, CACHE_SIZE

logger = get_logger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class ResultCache(Generic[K, V]):
    """Thread-safe FIFO cache with first-write-wins semantics.

    Usage:
        cache = ResultCache(max_records=4000)

        if (hit := cache.read(key)) is not None:
            return hit

        result = classify()
        cache.write(key, result)
    """

    def __init__(self, max_records: int = 4000) -> None:
        """Initialize cache.

        Args:
            max_records: Maximum number of entries kept.
        """
        if max_records < 1:
            raise ValueError("max_records must be at least 1")
        self._max_records = max_records
        self._cache: OrderedDict[K, V] = OrderedDict()
        self._lock = threading.Lock()

        # Statistics
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def max_records(self) -> int:
        return self._max_records

    def contains(self, key: K) -> bool:
        with self._lock:
            return key in self._cache

    def read(self, key: K) -> V | None:
        """Get a stored value, or None on a miss."""
        with self._lock:
            value = self._cache.get(key)
            if value is None:
                self._misses += 1
                CACHE_MISSES.inc()
                return None
            self._hits += 1
            CACHE_HITS.inc()
            return value

    def write(self, key: K, value: V) -> bool:
        """Store a value unless the key is already present.

        Returns:
            True if the value was stored, False if the key existed.
        """
        with self._lock:
            if key in self._cache:
                return False

            self._cache[key] = value
            self._evict_over_capacity()
            CACHE_SIZE.set(len(self._cache))

        logger.debug("Cache store", entries=len(self._cache), max_records=self._max_records)
        return True

    def resize(self, max_records: int) -> None:
        """Change capacity, evicting immediately if now over it."""
        if max_records < 1:
            raise ValueError("max_records must be at least 1")
        with self._lock:
            self._max_records = max_records
            self._evict_over_capacity()
            CACHE_SIZE.set(len(self._cache))

    def clear(self) -> int:
        """Clear all entries.

        Returns:
            Number of entries cleared.
        """
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            CACHE_SIZE.set(0)
        return count

    def size(self) -> int:
        with self._lock:
            return len(self._cache)

    @property
    def stats(self) -> dict[str, Any]:
        """Get a consistent snapshot of cache statistics."""
        with self._lock:
            entries = len(self._cache)
            hits = self._hits
            misses = self._misses
            evictions = self._evictions
            max_records = self._max_records

        total = hits + misses
        hit_rate = (hits / total * 100) if total > 0 else 0.0

        return {
            "entries": entries,
            "max_records": max_records,
            "hits": hits,
            "misses": misses,
            "evictions": evictions,
            "hit_rate_percent": round(hit_rate, 2),
        }

    def _evict_over_capacity(self) -> None:
        # Caller holds the lock
        while len(self._cache) > self._max_records:
            key, _ = self._cache.popitem(last=False)
            self._evictions += 1
            CACHE_EVICTIONS.inc()
            logger.debug("Cache evict", key=key)

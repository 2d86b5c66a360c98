"""Request-keyed response cache for the sentiment feed.

Raw decoded API bodies are cached under the exact request URL. The URL
embeds asset, cursor and window end, so two different windows never share
an entry.

Invalidation is all-or-nothing: clear() is the only way entries leave the
cache unless max_entries is set. With the default (no bound) the cache
grows for the lifetime of the process; that is a known limitation, and
max_entries exists to cap it where memory matters.
"""

from __future__ import annotations

import copy
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any


@dataclass
class CacheStats:
    """Statistics for cache performance monitoring."""

    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate as hits / total operations."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def reset(self) -> None:
        """Reset all counters to zero."""
        self.hits = 0
        self.misses = 0


class ResponseCache:
    """In-memory cache of raw API responses keyed by request URL.

    Every operation holds an internal lock, so a reader never sees a
    half-written entry even when fetch cycles overlap. There is no TTL.

    Attributes:
        max_entries: Optional LRU bound. None means unbounded.
        stats: Cache statistics for monitoring.

    Example:
        cache = ResponseCache()

        body = cache.get(url)
        if body is None:
            body = requests.get(url, timeout=30).json()
            cache.put(url, body)
    """

    def __init__(self, max_entries: int | None = None) -> None:
        """Initialize cache.

        Args:
            max_entries: Maximum entries before LRU eviction. None disables
                         eviction entirely.
        """
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self.max_entries = max_entries
        self.stats = CacheStats()
        self._lock = threading.Lock()
        # OrderedDict maintains insertion order for LRU tracking
        self._entries: OrderedDict[str, dict[str, Any]] = OrderedDict()

    def get(self, key: str) -> dict[str, Any] | None:
        """Get the cached body for a request key.

        Args:
            key: Full request URL.

        Returns:
            Cached body if present, None otherwise. Callers get their own
            copy; mutating it leaves the cached entry unchanged.
        """
        with self._lock:
            body = self._entries.get(key)
            if body is None:
                self.stats.misses += 1
                return None

            if self.max_entries is not None:
                self._entries.move_to_end(key)
            self.stats.hits += 1
            return copy.deepcopy(body)

    def put(self, key: str, value: dict[str, Any]) -> None:
        """Store a decoded body under a request key.

        Args:
            key: Full request URL.
            value: Decoded JSON body.
        """
        with self._lock:
            if key in self._entries:
                del self._entries[key]

            if self.max_entries is not None:
                while len(self._entries) >= self.max_entries:
                    self._entries.popitem(last=False)

            self._entries[key] = copy.deepcopy(value)

    def clear(self) -> None:
        """Remove all entries and reset stats."""
        with self._lock:
            self._entries.clear()
            self.stats.reset()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


# Process-wide cache shared by every fetcher that is not given its own
_global_cache: ResponseCache | None = None
_global_cache_lock = threading.Lock()


def get_global_cache() -> ResponseCache:
    """Get or create the process-wide cache instance.

    Returns:
        The global ResponseCache instance.
    """
    global _global_cache
    with _global_cache_lock:
        if _global_cache is None:
            _global_cache = ResponseCache()
        return _global_cache

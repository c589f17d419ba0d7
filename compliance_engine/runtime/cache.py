"""
In-memory lookup cache for one evaluation session.

Holds the reentrancy lock flag, individually resolved parameters and the
compiled parameter map of each active profile set.
"""

from __future__ import annotations

from typing import Any
import threading


class LookupCache:
    """Thread-safe key/value store with existence checks.

    Entries never expire; keys are bounded by the parameters and profile
    sets seen during the session.
    """

    def __init__(self):
        self._cache: dict[str, Any] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def has(self, key: str) -> bool:
        """Check if a key is cached."""
        with self._lock:
            return key in self._cache

    def get(self, key: str, default: Any = None) -> Any:
        """Get a cached value.

        Args:
            key: The cache key
            default: Returned when the key is not cached

        Returns:
            The cached value, or default
        """
        with self._lock:
            if key in self._cache:
                self._hits += 1
                return self._cache[key]
            self._misses += 1
            return default

    def set(self, key: str, value: Any) -> None:
        """Store a value."""
        with self._lock:
            self._cache[key] = value

    def invalidate_all(self) -> int:
        """Drop every entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            return count

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total = self._hits + self._misses
            hit_rate = self._hits / total if total > 0 else 0.0
            return {
                "size": len(self._cache),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": hit_rate,
            }

    def __contains__(self, key: str) -> bool:
        return self.has(key)

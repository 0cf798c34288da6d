"""In-memory cache with TTL support.

Holds provider responses that rarely change (team searches, team schedules)
so that detail enrichment does not repeat upstream calls inside one process.
Scores are never cached: they depend on the reference time of each request.
"""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached value with expiration (monotonic seconds)."""

    value: Any
    expires_at: float


class TTLCache:
    """Thread-safe in-memory cache with TTL and LRU size limit.

    Usage:
        cache = TTLCache(default_ttl_seconds=3600, max_size=1000)
        cache.set("key", value)
        result = cache.get("key")  # None if missing or expired
    """

    DEFAULT_MAX_SIZE = 2000

    def __init__(
        self,
        default_ttl_seconds: int = 3600,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._cache: OrderedDict[str, CacheEntry] = OrderedDict()
        self._default_ttl = default_ttl_seconds
        self._max_size = max_size
        self._clock = clock
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Any | None:
        """Get value if present and not expired."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None or self._clock() >= entry.expires_at:
                if entry is not None:
                    del self._cache[key]
                self._misses += 1
                return None
            self._cache.move_to_end(key)
            self._hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Set value with optional custom TTL."""
        ttl = ttl_seconds if ttl_seconds else self._default_ttl
        with self._lock:
            self._cache[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)
            self._cache.move_to_end(key)
            # Evict least recently used beyond max size (0 = unlimited)
            while self._max_size > 0 and len(self._cache) > self._max_size:
                self._cache.popitem(last=False)

    def delete(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        """Clear all cached values and counters."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns count removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, v in self._cache.items() if now >= v.expires_at]
            for key in expired:
                del self._cache[key]
        if expired:
            logger.debug("[CACHE] Removed %d expired entries", len(expired))
        return len(expired)

    @property
    def size(self) -> int:
        return len(self._cache)

    def stats(self) -> dict:
        with self._lock:
            total_requests = self._hits + self._misses
            return {
                "entries": len(self._cache),
                "max_size": self._max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total_requests, 3) if total_requests else 0,
            }


# Cache TTL constants (seconds)
CACHE_TTL_TEAM_SEARCH = 24 * 60 * 60  # team ids are stable
CACHE_TTL_TEAM_SCHEDULE = 60 * 60  # fixtures get added/rescheduled


def make_cache_key(*parts: object) -> str:
    """Create a cache key from parts."""
    return ":".join(str(p) for p in parts)

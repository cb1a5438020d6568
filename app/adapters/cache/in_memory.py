"""In-memory TTL cache for route responses (MVP).

Notes:
- Per-process only: each worker/instance has its own independent cache.
- Thread-safe: uses a lock around shared state.
- Expired entries are evicted lazily on read; cleanup() is meant to be
  scheduled periodically so write-once keys don't accumulate.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

from app.adapters.cache.base import AbstractCache

logger = logging.getLogger(__name__)


@dataclass
class CacheItem:
    """Container for cached values with expiration metadata."""

    value: Any
    expires_at: float


class InMemoryTTLCache(AbstractCache):
    """Dict-backed cache where every entry carries its own TTL."""

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize the cache.

        Args:
            clock: Time source returning UNIX time in seconds.
        """
        self._clock = clock
        self._store: dict[str, CacheItem] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"InMemoryTTLCache(size={len(self._store)}, hits={self._hits}, "
            f"misses={self._misses}, evictions={self._evictions})"
        )

    def get(self, key: str) -> Any | None:
        with self._lock:
            item = self._store.get(key)
            if item is None:
                self._misses += 1
                logger.debug("cache.miss", extra={"cache_key": key, "reason": "not_found"})
                return None

            if self._clock() > item.expires_at:
                del self._store[key]
                self._evictions += 1
                self._misses += 1
                logger.debug("cache.miss", extra={"cache_key": key, "reason": "expired"})
                return None

            self._hits += 1
            logger.debug("cache.hit", extra={"cache_key": key})
            return item.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            self._store[key] = CacheItem(value=value, expires_at=self._clock() + ttl_seconds)
            logger.debug(
                "cache.set",
                extra={"cache_key": key, "ttl_s": ttl_seconds, "size": len(self._store)},
            )

    def delete(self, key: str) -> None:
        with self._lock:
            if self._store.pop(key, None) is not None:
                logger.debug("cache.delete", extra={"cache_key": key})

    def invalidate_where(self, predicate: Callable[[str], bool]) -> int:
        with self._lock:
            # Snapshot keys; the dict can't change size while iterating.
            doomed = [key for key in self._store if predicate(key)]
            for key in doomed:
                del self._store[key]

        if doomed:
            logger.debug("cache.invalidate", extra={"removed": len(doomed)})
        return len(doomed)

    def cleanup(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [key for key, item in self._store.items() if now > item.expires_at]
            for key in expired:
                del self._store[key]
            self._evictions += len(expired)
            remaining = len(self._store)

        logger.info("cache.cleanup", extra={"removed": len(expired), "size": remaining})
        return len(expired)

    def size(self) -> int:
        with self._lock:
            return len(self._store)

    def clear(self) -> None:
        """Remove all cached entries and reset counters."""
        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def stats(self) -> dict[str, int]:
        """Return lightweight cache metrics without exposing values."""
        with self._lock:
            return {
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

"""In-memory TTL cache used to avoid repeated LLM classification calls.

Per-process only; unlike quota counts, a cold cache is merely slower, never
wrong, so it does not need a shared store.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass
class CacheItem(Generic[V]):
    value: V
    expires_at: float


class SimpleTTLCache(Generic[V]):
    """Thread-safe, in-memory TTL cache with LRU eviction.

    Attributes:
        ttl_seconds: Time-to-live applied to all entries.
        max_entries: Maximum number of cached items (None for unlimited).
    """

    def __init__(self, ttl_seconds: int = 3600, max_entries: int | None = 1024) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._store: OrderedDict[str, CacheItem[V]] = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def get(self, key: str) -> V | None:
        """Return the cached value, or None when missing or expired."""

        with self._lock:
            item = self._store.get(key)
            if item is None:
                self._misses += 1
                logger.debug("cache.miss", extra={"cache_key": key[:16], "reason": "not_found"})
                return None

            if time.time() > item.expires_at:
                self._evict_single(key)
                self._misses += 1
                logger.debug("cache.miss", extra={"cache_key": key[:16], "reason": "expired"})
                return None

            self._hits += 1
            self._store.move_to_end(key)
            logger.debug("cache.hit", extra={"cache_key": key[:16]})
            return item.value

    def set(self, key: str, value: V) -> None:
        with self._lock:
            self._evict_expired_locked()
            self._store[key] = CacheItem(value=value, expires_at=time.time() + self._ttl)
            self._store.move_to_end(key)
            self._evict_if_over_capacity_locked()

            logger.debug(
                "cache.set",
                extra={"cache_key": key[:16], "size": len(self._store), "ttl_s": self._ttl},
            )

    def clear(self) -> None:
        """Remove all cached entries and reset counters."""

        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def stats(self) -> dict[str, int | None]:
        with self._lock:
            return {
                "ttl_seconds": self._ttl,
                "max_entries": self._max_entries,
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def _evict_single(self, key: str) -> None:
        if self._store.pop(key, None) is not None:
            self._evictions += 1

    def _evict_expired_locked(self) -> None:
        now = time.time()
        for key in [k for k, item in self._store.items() if item.expires_at <= now]:
            self._evict_single(key)

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_entries is None:
            return
        while len(self._store) > self._max_entries:
            # least recently used first
            self._store.popitem(last=False)
            self._evictions += 1

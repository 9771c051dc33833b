# link_preview/cache.py
"""
In-memory TTL cache and the cache-aside helper used by the service.

Failures are cached exactly like successes. There is no single-flight
coordination: two concurrent misses on one key both compute and both store,
and the later store wins.
"""
from __future__ import annotations

import asyncio
import math
import time
from typing import Awaitable, Callable, Generic, Hashable, Optional, TypeVar

import cachetools

from link_preview.logger import get_logger
from link_preview.models import Outcome

__all__ = ("MAX_AGE", "TTLCache", "get_or_compute")

MAX_AGE = 86400  # 1 day in seconds

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

log = get_logger("cache")


class TTLCache(Generic[K, V]):
    """Concurrency-safe mapping whose entries expire *ttl* seconds after insertion.

    Only time-based expiry applies; the number of entries is unbounded.
    """

    def __init__(self, ttl: float = MAX_AGE, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be > 0")
        self.ttl = ttl
        self._entries: cachetools.TTLCache = cachetools.TTLCache(maxsize=math.inf, ttl=ttl, timer=clock)
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: K) -> Optional[V]:
        """Return the live value for *key*, or None."""
        async with self._lock:
            return self._entries.get(key)

    async def insert(self, key: K, value: V) -> None:
        """Store *value* under *key* with a fresh timestamp, replacing any previous entry."""
        async with self._lock:
            self._entries[key] = value

    async def purge_expired(self) -> int:
        """Physically remove expired entries; returns how many were dropped."""
        async with self._lock:
            expired = self._entries.expire()
        if expired:
            log.debug("Purged %d expired cache entries", len(expired))
        return len(expired)


async def get_or_compute(
    cache: TTLCache[str, Outcome],
    url: str,
    compute: Callable[[], Awaitable[Outcome]],
) -> Outcome:
    """Return the cached outcome for *url*, computing and storing it on a miss."""
    cached = await cache.get(url)
    if cached is not None:
        log.debug("Cache hit: %s", url)
        return cached
    log.debug("Cache miss: %s", url)
    outcome = await compute()
    await cache.insert(url, outcome)
    return outcome

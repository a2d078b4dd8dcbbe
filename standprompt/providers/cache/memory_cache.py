"""In-memory cache provider using cachetools.TLRUCache.

Each entry carries its own time-to-live, so callers can memoize results
with different lifetimes in one cache.  Suitable for single-process use;
can be swapped for another backend via the ICacheProvider interface.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable
from typing import Any, NamedTuple, TypeVar

from cachetools import TLRUCache

from standprompt.interfaces.cache_provider import ICacheProvider
from standprompt.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_MISSING = object()


class _Entry(NamedTuple):
    value: Any
    ttl: float


class MemoryCacheProvider(ICacheProvider):
    """In-memory per-item TTL cache backed by ``cachetools.TLRUCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    ttl:
        Default time-to-live in seconds for entries stored without one.
    timer:
        Clock used for expiry.  Defaults to :func:`time.monotonic`; tests
        inject a fake clock.
    """

    def __init__(
        self,
        max_size: int = 256,
        ttl: float = 300,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = ttl
        self._cache: TLRUCache[str, _Entry] = TLRUCache(
            maxsize=max_size, ttu=self._time_to_use, timer=timer
        )
        # Per-key locks for single-flight computation, with a count of
        # callers holding or waiting on each so idle locks can be dropped.
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @staticmethod
    def _time_to_use(_key: str, entry: _Entry, now: float) -> float:
        return now + entry.ttl

    def _lookup(self, key: str) -> Any:
        entry = self._cache.get(key)
        if entry is None:
            return _MISSING
        return entry.value

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Retrieve the cached value for *key*, or ``None`` if missing/expired."""
        value = self._lookup(key)
        if value is _MISSING:
            logger.debug("cache_miss", key=key)
            return None
        logger.debug("cache_hit", key=key)
        return value

    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store *value* under *key* for *ttl* seconds (default TTL if None)."""
        self._cache[key] = _Entry(value, self._default_ttl if ttl is None else ttl)
        logger.debug("cache_set", key=key)

    async def delete(self, key: str) -> None:
        """Remove *key* from the cache (no-op if absent)."""
        self._cache.pop(key, None)
        logger.debug("cache_delete", key=key)

    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""
        return key in self._cache

    async def get_or_compute(
        self,
        key: str,
        producer: Callable[[], T | Awaitable[T]],
        ttl: float | None = None,
    ) -> T:
        """Return the cached value or compute it once across concurrent callers."""
        cached = self._lookup(key)
        if cached is not _MISSING:
            logger.debug("cache_hit", key=key)
            return cached

        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                # Another caller may have filled the key while we waited.
                cached = self._lookup(key)
                if cached is not _MISSING:
                    logger.debug("cache_hit", key=key, waited=True)
                    return cached

                logger.debug("cache_compute", key=key)
                value = producer()
                if inspect.isawaitable(value):
                    value = await value
                await self.set(key, value, ttl)
                return value
        finally:
            self._lock_users[key] -= 1
            if self._lock_users[key] == 0:
                del self._lock_users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._cache)

"""Abstract base class for cache service providers.

Defines the contract for the memoization cache injected into the
orchestrator.  The cache is always an explicit instance handed to its
callers, never a module-level global, so tests and concurrent pipelines
each get their own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")


class ICacheProvider(ABC):
    """Contract for key-value cache services.

    All operations are async so that network-backed stores can implement
    the interface without blocking the event loop.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retrieve the value stored under *key*.

        Returns
        -------
        Any or None
            The cached value if present and not expired; ``None`` otherwise.
        """

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store *value* under *key* with an optional time-to-live.

        Parameters
        ----------
        key:
            The cache key.
        value:
            The value to store.
        ttl:
            Time-to-live in seconds.  ``None`` uses the provider default.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the entry stored under *key*; no-op if absent."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present in the cache and not expired."""

    @abstractmethod
    async def get_or_compute(
        self,
        key: str,
        producer: Callable[[], T | Awaitable[T]],
        ttl: float | None = None,
    ) -> T:
        """Return the cached value for *key*, computing it on a miss.

        Concurrent callers for the same key must share one computation:
        the first caller runs *producer* and the others wait for and
        receive its result (single-flight).  Exceptions from *producer*
        propagate to the caller that ran it and nothing is cached.

        Parameters
        ----------
        key:
            The cache key.
        producer:
            Zero-argument callable returning the value or an awaitable.
        ttl:
            Time-to-live in seconds for the computed value.
        """

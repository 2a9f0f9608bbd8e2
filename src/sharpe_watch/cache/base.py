"""Compute-or-fetch cache contract.

Architecture
------------
Every expensive computation (upstream price fetches, Sharpe reports) is
wrapped in ``CacheInterface.get_cached``. The engine depends only on this
protocol; concrete storage is a swappable adapter:

- ``InMemoryCache``: process-local TTL map with single-flight compute.
- ``NullCache``: always computes, stores nothing (caching disabled).

Any adapter must uphold:
1. A hit returns the stored value without calling ``compute``.
2. Concurrent misses for one key share a single ``compute()`` call.
3. A failed ``compute()`` leaves nothing behind; the next call retries.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ConfigDict, field_validator

T = TypeVar("T")


class CacheOptions(BaseModel):
    """Key, invalidation tags and time-to-live for one cached computation.

    ``key`` may be a composite (e.g. ``["stock-data", "AAPL"]``).
    ``revalidate`` is in seconds; ``None`` keeps the entry until invalidated.
    """

    model_config = ConfigDict(frozen=True)

    key: str | tuple[str, ...]
    tags: tuple[str, ...] = ()
    revalidate: int | None = None

    @field_validator("key")
    @classmethod
    def key_not_empty(cls, v: str | tuple[str, ...]) -> str | tuple[str, ...]:
        if not v:
            raise ValueError("cache key must not be empty")
        return v

    @field_validator("revalidate")
    @classmethod
    def revalidate_positive(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError(f"revalidate must be >= 1 second, got {v}")
        return v

    @property
    def cache_key(self) -> str:
        """Flattened string form of ``key``."""
        if isinstance(self.key, str):
            return self.key
        return ":".join(self.key)


@runtime_checkable
class CacheInterface(Protocol):
    """Consumer-facing compute-or-fetch cache."""

    async def get_cached(
        self,
        compute: Callable[[], Awaitable[T]],
        options: CacheOptions,
    ) -> T:
        """Return the cached value for ``options.key`` or compute and store it."""
        ...

    async def invalidate(self, tag: str) -> None:
        """Expire every entry carrying ``tag``."""
        ...


class NullCache:
    """Cache adapter that never stores anything.

    Used when caching is disabled; every call runs ``compute``.
    """

    async def get_cached(
        self,
        compute: Callable[[], Awaitable[T]],
        options: CacheOptions,
    ) -> T:
        return await compute()

    async def invalidate(self, tag: str) -> None:
        return None

"""In-process TTL cache with single-flight computation."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from sharpe_watch.cache.base import CacheOptions
from sharpe_watch.core.exceptions import CacheComputeError, SharpeWatchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry:
    """A stored value. Entries are replaced whole, never updated in place."""

    value: Any
    expires_at: float
    tags: frozenset[str]

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class InMemoryCache:
    """Process-local implementation of CacheInterface.

    Concurrent ``get_cached`` calls for a key with no valid entry collapse
    onto one compute task: the first caller starts it and every caller,
    the first included, awaits it through ``asyncio.shield``. Cancelling a
    caller abandons only that caller's wait; the compute keeps running for
    the others and still stores its result. Misses on different keys
    proceed independently; no lock is held while computing.

    Every tag carries a generation number bumped by ``invalidate``. A
    compute whose tags were invalidated while it ran returns its value to
    the waiting callers but does not store it.

    Parameters
    ----------
    clock : Callable[[], float]
        Monotonic time source in seconds. Injectable for tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._in_flight: dict[str, asyncio.Task[Any]] = {}
        self._generations: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def get_cached(
        self,
        compute: Callable[[], Awaitable[T]],
        options: CacheOptions,
    ) -> T:
        key = options.cache_key

        entry = self._entries.get(key)
        if entry is not None:
            if not entry.is_expired(self._clock()):
                logger.debug("Cache hit for %s", key)
                return entry.value
            del self._entries[key]

        task = self._in_flight.get(key)
        if task is None:
            logger.debug("Cache miss for %s, computing", key)
            task = asyncio.ensure_future(self._compute_and_store(key, compute, options))
            task.add_done_callback(_consume_exception)
            self._in_flight[key] = task
        else:
            logger.debug("Joining in-flight compute for %s", key)

        return await asyncio.shield(task)

    async def invalidate(self, tag: str) -> None:
        """Drop every entry carrying ``tag``.

        Computations already in flight are not interrupted. Their callers
        still receive the value, but it is not stored.
        """
        self._generations[tag] = self._generations.get(tag, 0) + 1
        stale = [key for key, entry in self._entries.items() if tag in entry.tags]
        for key in stale:
            del self._entries[key]
        logger.info("Invalidated %d cache entries for tag %r", len(stale), tag)

    def purge_expired(self) -> int:
        """Remove expired entries. Returns the number removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    async def _compute_and_store(
        self,
        key: str,
        compute: Callable[[], Awaitable[Any]],
        options: CacheOptions,
    ) -> Any:
        started = self._snapshot(options.tags)
        try:
            value = await compute()
        except SharpeWatchError:
            raise
        except Exception as e:
            raise CacheComputeError(
                f"Cached computation failed for {key}: {e}",
                context={"key": key},
            ) from e
        finally:
            self._in_flight.pop(key, None)

        if self._snapshot(options.tags) != started:
            logger.debug("Tags of %s invalidated during compute, not storing", key)
            return value

        self._entries[key] = CacheEntry(
            value=value,
            expires_at=self._expiry(options.revalidate),
            tags=frozenset(options.tags),
        )
        return value

    def _snapshot(self, tags: Iterable[str]) -> tuple[int, ...]:
        return tuple(self._generations.get(tag, 0) for tag in tags)

    def _expiry(self, revalidate: int | None) -> float:
        if revalidate is None:
            return math.inf
        return self._clock() + revalidate


def _consume_exception(task: asyncio.Task[Any]) -> None:
    # A failure nobody is still waiting for must not be reported by asyncio
    if not task.cancelled():
        task.exception()

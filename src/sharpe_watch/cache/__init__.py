"""Compute-or-fetch caching with tag invalidation."""

from sharpe_watch.cache.base import CacheInterface, CacheOptions, NullCache
from sharpe_watch.cache.memory import CacheEntry, InMemoryCache

__all__ = [
    "CacheEntry",
    "CacheInterface",
    "CacheOptions",
    "InMemoryCache",
    "NullCache",
]

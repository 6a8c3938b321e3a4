"""Cache module for platform fetch results."""

from .manager import (
    CacheStats,
    FetchCache,
    get_fetch_cache,
    make_fetch_key,
    reset_fetch_cache,
)

__all__ = [
    "CacheStats",
    "FetchCache",
    "get_fetch_cache",
    "make_fetch_key",
    "reset_fetch_cache",
]

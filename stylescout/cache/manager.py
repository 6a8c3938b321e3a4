"""In-memory TTL cache for platform fetch results."""

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Optional

import structlog
from pydantic import BaseModel

from stylescout.logging import log_cache_operation
from stylescout.state.models import Product

logger = structlog.get_logger()


class CacheStats(BaseModel):
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    items: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate percentage."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0


class CacheEntry(BaseModel):
    """A single cache entry."""

    key: str
    products: list[Product]
    created_at: datetime
    expires_at: datetime


def make_fetch_key(platform: str, query: str) -> str:
    """Build the cache key for a (platform, query) pair."""
    return f"{platform.lower()}_{query.lower()}"


class FetchCache:
    """Time-bounded memo of fetch results keyed by (platform, query).

    Expiry is enforced on read; the periodic sweep only reclaims memory.
    There is no per-key locking, so concurrent misses for the same key may
    each fetch and write. Writes for a key are idempotent.
    """

    def __init__(
        self,
        ttl_seconds: int = 600,
        check_period_seconds: int = 120,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the fetch cache.

        Args:
            ttl_seconds: Lifetime of an entry after insertion
            check_period_seconds: Interval of the background sweep
            clock: Source of the current time
        """
        self._entries: dict[str, CacheEntry] = {}
        self._ttl = timedelta(seconds=ttl_seconds)
        self._check_period = check_period_seconds
        self._clock = clock
        self._stats = CacheStats()
        self._sweeper: Optional[asyncio.Task] = None

    def get(self, platform: str, query: str) -> Optional[list[Product]]:
        """Get cached products.

        Args:
            platform: Platform name (case-insensitive)
            query: Search query (case-insensitive)

        Returns:
            Cached products, or None on miss or expiry
        """
        key = make_fetch_key(platform, query)
        entry = self._entries.get(key)

        if entry is not None:
            if self._clock() < entry.expires_at:
                self._stats.hits += 1
                log_cache_operation("hit", key, hit_rate=self._stats.hit_rate)
                return [p.model_copy() for p in entry.products]
            # Expired, drop it now rather than waiting for the sweep
            del self._entries[key]
            self._stats.evictions += 1

        self._stats.misses += 1
        log_cache_operation("miss", key, hit_rate=self._stats.hit_rate)
        return None

    def set(self, platform: str, query: str, products: list[Product]) -> None:
        """Store products for a (platform, query) pair.

        Args:
            platform: Platform name
            query: Search query
            products: Products to cache
        """
        key = make_fetch_key(platform, query)
        now = self._clock()
        self._entries[key] = CacheEntry(
            key=key,
            products=[p.model_copy() for p in products],
            created_at=now,
            expires_at=now + self._ttl,
        )
        log_cache_operation("set", key, items=len(products))

    def clear(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries cleared
        """
        count = len(self._entries)
        self._entries.clear()
        logger.info("Fetch cache cleared", count=count)
        return count

    def cleanup_expired(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired_keys = [k for k, v in self._entries.items() if v.expires_at <= now]
        for key in expired_keys:
            del self._entries[key]
        self._stats.evictions += len(expired_keys)
        if expired_keys:
            log_cache_operation("sweep", "*", items=len(expired_keys))
        return len(expired_keys)

    def get_stats(self) -> CacheStats:
        """Get cache statistics.

        Returns:
            CacheStats with hit/miss counts and item count
        """
        self._stats.items = len(self._entries)
        return self._stats.model_copy()

    def start_sweeper(self) -> None:
        """Start the periodic expired-entry sweep on the running loop."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.create_task(self._sweep_loop())
        logger.debug("Fetch cache sweeper started", period=self._check_period)

    async def stop_sweeper(self) -> None:
        """Cancel the periodic sweep and wait for it to finish."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
        logger.debug("Fetch cache sweeper stopped")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._check_period)
            self.cleanup_expired()


# Global fetch cache instance
_fetch_cache: Optional[FetchCache] = None


def get_fetch_cache() -> FetchCache:
    """Get the global fetch cache instance.

    Returns:
        FetchCache instance (creates if needed)
    """
    global _fetch_cache
    if _fetch_cache is None:
        from stylescout.config.settings import settings

        _fetch_cache = FetchCache(
            ttl_seconds=settings.fetch_cache_ttl_seconds,
            check_period_seconds=settings.fetch_cache_check_period_seconds,
        )
    return _fetch_cache


def reset_fetch_cache() -> None:
    """Reset the global fetch cache (for testing)."""
    global _fetch_cache
    _fetch_cache = None

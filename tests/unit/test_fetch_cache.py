"""Tests for the fetch cache."""

import asyncio
from datetime import datetime, timedelta

import pytest

from conftest import make_product
from stylescout.cache import FetchCache, get_fetch_cache, make_fetch_key, reset_fetch_cache


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self):
        self.now = datetime(2026, 10, 15, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class TestFetchCache:
    """Tests for FetchCache."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        return FetchCache(ttl_seconds=600, check_period_seconds=120, clock=clock)

    @pytest.fixture
    def products(self):
        return [make_product("1", "Linen Shirt"), make_product("2", "Cotton Tee")]

    def test_key_is_lowercased(self):
        assert make_fetch_key("Myntra", "Linen SHIRT") == "myntra_linen shirt"

    def test_set_and_get(self, cache, products):
        """Stored products come back for the same pair."""
        cache.set("myntra", "shirt", products)

        result = cache.get("myntra", "shirt")
        assert [p.id for p in result] == ["1", "2"]

    def test_get_is_case_insensitive(self, cache, products):
        cache.set("myntra", "Linen Shirt", products)
        assert cache.get("MYNTRA", "linen shirt") is not None

    def test_miss_returns_none(self, cache):
        assert cache.get("zara", "dress") is None

    def test_entry_expires_after_ttl(self, cache, clock, products):
        """Expiry is enforced on read, without waiting for the sweep."""
        cache.set("myntra", "shirt", products)

        clock.advance(seconds=599)
        assert cache.get("myntra", "shirt") is not None

        clock.advance(seconds=1)
        assert cache.get("myntra", "shirt") is None
        assert cache.get_stats().items == 0

    def test_cached_products_are_copies(self, cache, products):
        """Mutating returned products does not change the cache."""
        cache.set("myntra", "shirt", products)
        products[0].title = "Changed"

        first = cache.get("myntra", "shirt")
        first[1].title = "Also changed"

        second = cache.get("myntra", "shirt")
        assert [p.title for p in second] == ["Linen Shirt", "Cotton Tee"]

    def test_stats_track_hits_and_misses(self, cache, products):
        cache.get("myntra", "shirt")
        cache.set("myntra", "shirt", products)
        cache.get("myntra", "shirt")
        cache.get("myntra", "shirt")

        stats = cache.get_stats()
        assert stats.hits == 2
        assert stats.misses == 1
        assert stats.items == 1
        assert stats.hit_rate == pytest.approx(66.67, abs=0.01)

    def test_cleanup_expired(self, cache, clock, products):
        """The sweep removes only expired entries."""
        cache.set("myntra", "shirt", products)
        clock.advance(minutes=5)
        cache.set("zara", "dress", products)
        clock.advance(minutes=6)

        assert cache.cleanup_expired() == 1
        assert cache.get("zara", "dress") is not None
        assert cache.get_stats().evictions == 1

    def test_clear(self, cache, products):
        cache.set("myntra", "shirt", products)
        cache.set("zara", "dress", products)

        assert cache.clear() == 2
        assert cache.get("myntra", "shirt") is None

    def test_set_overwrites(self, cache, products):
        """Writes for a key replace the previous entry."""
        cache.set("myntra", "shirt", products)
        cache.set("myntra", "shirt", products[:1])
        assert len(cache.get("myntra", "shirt")) == 1

    @pytest.mark.asyncio
    async def test_sweeper_start_and_stop(self, clock, products):
        """The background sweep evicts expired entries and stops cleanly."""
        cache = FetchCache(ttl_seconds=1, check_period_seconds=0, clock=clock)
        cache.set("myntra", "shirt", products)
        clock.advance(seconds=2)

        cache.start_sweeper()
        await asyncio.sleep(0.01)
        await cache.stop_sweeper()

        assert cache.get_stats().items == 0


class TestGlobalFetchCache:
    def test_singleton_until_reset(self):
        first = get_fetch_cache()
        assert get_fetch_cache() is first

        reset_fetch_cache()
        assert get_fetch_cache() is not first

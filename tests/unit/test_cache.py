"""
Unit Tests for the Product Cache

Run with:
    pytest tests/unit/test_cache.py -v
"""

import pytest

from storage.cache import ProductCache


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ProductCache(ttl_seconds=120, clock=clock)


@pytest.fixture
def products(make_exchange):
    exchange = make_exchange("okx")
    return [exchange.make_product("USDT", apy=4.0), exchange.make_product("USDT", apy=3.0)]


class TestProductCache:

    def test_round_trip_within_ttl(self, cache, clock, products):
        assert cache.set("USDT", "1d", products) is True

        clock.advance(119)

        assert cache.get("USDT", "1d") == products

    def test_expired_after_ttl(self, cache, clock, products):
        cache.set("USDT", "1d", products)

        clock.advance(120)

        assert cache.get("USDT", "1d") is None

    def test_empty_result_not_stored(self, cache):
        assert cache.set("USDT", "1d", []) is False
        assert cache.get("USDT", "1d") is None
        assert len(cache) == 0

    def test_keys_are_currency_and_period(self, cache, products):
        cache.set("USDT", "1d", products)

        assert cache.get("USDT", "1w") is None
        assert cache.get("USDC", "1d") is None

    def test_overwrite_resets_age(self, cache, clock, products):
        cache.set("USDT", "1d", products)
        clock.advance(100)
        cache.set("USDT", "1d", products[:1])
        clock.advance(100)

        assert cache.get("USDT", "1d") == products[:1]

    def test_returned_list_is_a_copy(self, cache, products):
        cache.set("USDT", "1d", products)

        cache.get("USDT", "1d").clear()

        assert len(cache.get("USDT", "1d")) == 2

    def test_clear(self, cache, products):
        cache.set("USDT", "1d", products)
        cache.clear()
        assert cache.get("USDT", "1d") is None

    def test_stats_count_hits_and_misses(self, cache, products):
        cache.get("USDT", "1d")
        cache.set("USDT", "1d", products)
        cache.get("USDT", "1d")
        cache.get("USDT", "1d")

        stats = cache.stats()
        assert stats["hits"] == 2
        assert stats["misses"] == 1
        assert stats["entries"] == 1

    def test_non_positive_ttl_rejected(self):
        with pytest.raises(ValueError):
            ProductCache(ttl_seconds=0)

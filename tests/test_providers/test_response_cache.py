"""
Tests for the TTL response cache and the caching provider decorator.
"""

from __future__ import annotations

from datetime import datetime

from niftyscope.cache import InMemoryTTLCache, NullCache
from niftyscope.models import Overview, PricePoint, Quote
from niftyscope.providers.base import MarketDataProvider
from niftyscope.providers.cached_provider import CachedMarketDataProvider


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class _CountingProvider(MarketDataProvider):
    def __init__(self, empty: bool = False) -> None:
        self.empty = empty
        self.calls: dict[str, int] = {"quote": 0, "overview": 0, "history": 0}

    def get_quote(self, symbol: str) -> Quote | None:
        self.calls["quote"] += 1
        return None if self.empty else Quote(symbol=symbol, price=10.0)

    def get_overview(self, symbol: str) -> Overview | None:
        self.calls["overview"] += 1
        return None if self.empty else Overview(symbol=symbol, name="Test")

    def get_history(self, symbol: str) -> list[PricePoint]:
        self.calls["history"] += 1
        if self.empty:
            return []
        return [PricePoint(datetime(2025, 1, 1), 1.0, 1.0, 1.0, 1.0, 10)]


# ── InMemoryTTLCache ───────────────────────────────────────────────────────────

def test_value_expires_after_ttl() -> None:
    clock = _Clock()
    cache = InMemoryTTLCache(default_ttl=60, clock=clock)
    cache.set("k", "v")
    clock.now = 59.9
    assert cache.get("k") == "v"
    clock.now = 60.0
    assert cache.get("k") is None


def test_expired_value_still_readable_as_stale() -> None:
    clock = _Clock()
    cache = InMemoryTTLCache(default_ttl=60, clock=clock)
    cache.set("k", "v")
    clock.now = 600
    assert cache.get("k") is None
    assert cache.get_stale("k") == "v"
    cache.set("k", "w")
    assert cache.get("k") == "w"
    cache.clear()
    assert cache.get_stale("k") is None


def test_explicit_ttl_overrides_default() -> None:
    clock = _Clock()
    cache = InMemoryTTLCache(default_ttl=60, clock=clock)
    cache.set("short", 1, ttl=5)
    cache.set("long", 2)
    clock.now = 10
    assert cache.get("short") is None
    assert cache.get("long") == 2


def test_non_positive_ttl_is_not_stored() -> None:
    cache = InMemoryTTLCache(default_ttl=60)
    cache.set("k", "v", ttl=0)
    assert cache.get("k") is None


def test_clear_and_missing_key() -> None:
    cache = InMemoryTTLCache()
    cache.set("a", 1)
    cache.clear()
    assert cache.get("a") is None
    assert cache.get("never") is None


def test_null_cache_never_stores() -> None:
    cache = NullCache()
    cache.set("a", 1)
    assert cache.get("a") is None
    assert cache.get_stale("a") is None


# ── CachedMarketDataProvider ───────────────────────────────────────────────────

def test_second_call_served_from_cache() -> None:
    inner = _CountingProvider()
    provider = CachedMarketDataProvider(inner, InMemoryTTLCache(default_ttl=60))
    for _ in range(3):
        assert provider.get_quote("TCS.NSE").price == 10.0
        assert provider.get_overview("TCS.NSE").name == "Test"
        assert len(provider.get_history("TCS.NSE")) == 1
    assert inner.calls == {"quote": 1, "overview": 1, "history": 1}


def test_cache_keys_are_per_symbol() -> None:
    inner = _CountingProvider()
    cache = InMemoryTTLCache(default_ttl=60)
    provider = CachedMarketDataProvider(inner, cache)
    provider.get_quote("TCS.NSE")
    provider.get_quote("INFY.NSE")
    assert inner.calls["quote"] == 2
    assert cache.get("quote_TCS.NSE").symbol == "TCS.NSE"
    assert cache.get("quote_INFY.NSE").symbol == "INFY.NSE"


def test_empty_results_are_not_cached() -> None:
    inner = _CountingProvider(empty=True)
    provider = CachedMarketDataProvider(inner, InMemoryTTLCache(default_ttl=60))
    for _ in range(2):
        assert provider.get_quote("X.NSE") is None
        assert provider.get_overview("X.NSE") is None
        assert provider.get_history("X.NSE") == []
    assert inner.calls == {"quote": 2, "overview": 2, "history": 2}


def test_expired_entry_refetches() -> None:
    clock = _Clock()
    inner = _CountingProvider()
    provider = CachedMarketDataProvider(inner, InMemoryTTLCache(default_ttl=60, clock=clock), ttl=30)
    provider.get_quote("TCS.NSE")
    clock.now = 31
    provider.get_quote("TCS.NSE")
    assert inner.calls["quote"] == 2


def test_cached_history_is_a_fresh_list() -> None:
    provider = CachedMarketDataProvider(_CountingProvider(), InMemoryTTLCache(default_ttl=60))
    provider.get_history("TCS.NSE")
    first = provider.get_history("TCS.NSE")
    first.clear()
    assert len(provider.get_history("TCS.NSE")) == 1


def test_stale_response_served_when_upstream_goes_empty(caplog) -> None:
    clock = _Clock()
    inner = _CountingProvider()
    provider = CachedMarketDataProvider(inner, InMemoryTTLCache(default_ttl=60, clock=clock))
    provider.get_quote("TCS.NSE")
    provider.get_overview("TCS.NSE")
    provider.get_history("TCS.NSE")

    clock.now = 120
    inner.empty = True
    with caplog.at_level("WARNING", logger="niftyscope.providers.cached_provider"):
        assert provider.get_quote("TCS.NSE").price == 10.0
        assert provider.get_overview("TCS.NSE").name == "Test"
        assert len(provider.get_history("TCS.NSE")) == 1
    assert inner.calls == {"quote": 2, "overview": 2, "history": 2}
    assert "stale" in caplog.text


def test_fresh_response_replaces_stale_one() -> None:
    clock = _Clock()
    inner = _CountingProvider()
    cache = InMemoryTTLCache(default_ttl=60, clock=clock)
    provider = CachedMarketDataProvider(inner, cache)
    provider.get_quote("TCS.NSE")
    clock.now = 120
    provider.get_quote("TCS.NSE")
    assert inner.calls["quote"] == 2
    assert cache.get("quote_TCS.NSE") is not None

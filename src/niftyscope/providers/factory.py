from __future__ import annotations

from niftyscope.cache import InMemoryTTLCache, ResponseCache
from niftyscope.config import AppConfig
from niftyscope.providers.base import MarketDataProvider
from niftyscope.providers.cached_provider import CachedMarketDataProvider
from niftyscope.providers.mock_provider import MockMarketDataProvider
from niftyscope.providers.yfinance_provider import YFinanceMarketDataProvider

PROVIDER_KINDS = ["mock", "yfinance"]


def build_market_provider(
    kind: str,
    config: AppConfig | None = None,
    cache: ResponseCache | None = None,
) -> MarketDataProvider:
    cfg = config or AppConfig()
    mode = kind.strip().lower()
    if mode == "mock":
        provider: MarketDataProvider = MockMarketDataProvider()
    elif mode == "yfinance":
        provider = YFinanceMarketDataProvider(history_days=cfg.fetch.history_days)
    else:
        raise ValueError(f"unsupported market provider: {kind}")

    if cfg.cache.ttl_seconds <= 0:
        return provider
    if cache is None:
        cache = InMemoryTTLCache(default_ttl=cfg.cache.ttl_seconds)
    return CachedMarketDataProvider(provider, cache, ttl=cfg.cache.ttl_seconds)

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from niftyscope.cache import ResponseCache
from niftyscope.models import Overview, PricePoint, Quote
from niftyscope.providers.base import MarketDataProvider

logger = logging.getLogger(__name__)


class CachedMarketDataProvider(MarketDataProvider):
    """Wraps another provider and keeps its non-empty responses for ``ttl`` seconds.

    When the wrapped provider comes back empty (upstream error or rate limit),
    the last good response is served even if it has expired.
    """

    def __init__(self, inner: MarketDataProvider, cache: ResponseCache, ttl: float | None = None) -> None:
        self.inner = inner
        self.cache = cache
        self.ttl = ttl

    def _fetch(self, key: str, fetch: Callable[[], Any]) -> Any:
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("cache hit: %s", key)
            return cached

        value = fetch()
        if value:
            self.cache.set(key, value, self.ttl)
            return value

        stale = self.cache.get_stale(key)
        if stale is not None:
            logger.warning("upstream returned no data for %s; serving stale cached response", key)
            return stale
        return value

    def get_quote(self, symbol: str) -> Quote | None:
        return self._fetch(f"quote_{symbol}", lambda: self.inner.get_quote(symbol))

    def get_overview(self, symbol: str) -> Overview | None:
        return self._fetch(f"overview_{symbol}", lambda: self.inner.get_overview(symbol))

    def get_history(self, symbol: str) -> list[PricePoint]:
        history = self._fetch(f"timeseries_{symbol}", lambda: tuple(self.inner.get_history(symbol)))
        return list(history)

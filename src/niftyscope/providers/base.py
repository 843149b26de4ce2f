from __future__ import annotations

from abc import ABC, abstractmethod

from niftyscope.models import Overview, PricePoint, Quote


class MarketDataProvider(ABC):
    @abstractmethod
    def get_quote(self, symbol: str) -> Quote | None:
        raise NotImplementedError

    @abstractmethod
    def get_overview(self, symbol: str) -> Overview | None:
        raise NotImplementedError

    @abstractmethod
    def get_history(self, symbol: str) -> list[PricePoint]:
        raise NotImplementedError

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from niftyscope.models import Overview, PricePoint, Quote
from niftyscope.providers.base import MarketDataProvider

SECTORS = [
    "Energy",
    "Information Technology",
    "Financial Services",
    "Consumer Goods",
    "Automobile",
    "Healthcare",
    "Metals & Mining",
]


def _seed(symbol: str) -> int:
    return sum((i + 1) * ord(ch) for i, ch in enumerate(symbol.upper()))


class MockMarketDataProvider(MarketDataProvider):
    """Deterministic demo data; the same symbol always yields the same records."""

    def __init__(self, history_days: int = 60, missing: Iterable[str] = ()) -> None:
        self.history_days = history_days
        self.missing = {s.upper() for s in missing}

    def get_history(self, symbol: str) -> list[PricePoint]:
        if symbol.upper() in self.missing:
            return []

        seed = _seed(symbol)
        base = 100.0 + seed % 900
        drift = ((seed % 7) - 3) * 0.15
        day0 = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)

        out: list[PricePoint] = []
        for t in range(self.history_days):
            wiggle = ((t + seed) % 4 - 1.5) * 0.8
            close = round(base + drift * t + wiggle, 2)
            out.append(
                PricePoint(
                    timestamp=day0 - timedelta(days=self.history_days - 1 - t),
                    open=round(close - wiggle / 2, 2),
                    high=round(close + 1.2, 2),
                    low=round(close - 1.2, 2),
                    close=close,
                    volume=1_000_000 + ((t + seed) % 5) * 40_000 + (seed % 11) * 10_000,
                )
            )
        return out

    def get_quote(self, symbol: str) -> Quote | None:
        if symbol.upper() in self.missing:
            return None

        seed = _seed(symbol)
        history = self.get_history(symbol)
        previous_close = history[-1].close if history else 100.0
        change_percent = round(((seed % 17) - 6) * 0.75, 2)
        price = round(previous_close * (1 + change_percent / 100), 2)
        return Quote(
            symbol=symbol,
            price=price,
            change=round(price - previous_close, 2),
            change_percent=change_percent,
            volume=900_000 + (seed % 13) * 60_000,
            high=round(max(price, previous_close) + 1.5, 2),
            low=round(min(price, previous_close) - 1.5, 2),
            open=previous_close,
            previous_close=previous_close,
        )

    def get_overview(self, symbol: str) -> Overview | None:
        if symbol.upper() in self.missing:
            return None

        seed = _seed(symbol)
        code = symbol.rpartition(".")[0] or symbol
        return Overview(
            symbol=symbol,
            name=f"{code} Ltd",
            sector=SECTORS[seed % len(SECTORS)],
            industry=f"{SECTORS[seed % len(SECTORS)]} - Large Cap",
            market_cap=float(1_000_000_000 * (50 + seed % 400)),
            pe_ratio=round(8.0 + seed % 36, 1),
            peg_ratio=round(0.5 + (seed % 20) / 10, 2),
            eps=round(10.0 + seed % 90, 2),
            book_value=round(100.0 + seed % 500, 2),
            dividend_yield=round((seed % 40) / 10, 2),
            roe=round(4.0 + seed % 22, 1),
            roa=round(1.0 + seed % 12, 1),
            profit_margin=round(2.0 + seed % 18, 1),
            revenue_ttm=float(10_000_000 * (100 + seed % 900)),
            gross_profit_ttm=float(4_000_000 * (100 + seed % 900)),
        )

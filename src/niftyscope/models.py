from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

Action = Literal["BUY", "HOLD", "SELL"]


@dataclass(frozen=True, slots=True)
class Quote:
    symbol: str
    price: float | None
    change: float | None = None
    change_percent: float | None = None
    volume: int | None = None
    high: float | None = None
    low: float | None = None
    open: float | None = None
    previous_close: float | None = None
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass(frozen=True, slots=True)
class Overview:
    symbol: str
    name: str | None = None
    description: str | None = None
    sector: str | None = None
    industry: str | None = None
    market_cap: float | None = None
    pe_ratio: float | None = None
    peg_ratio: float | None = None
    eps: float | None = None
    book_value: float | None = None
    # percentages below are on the 0-100 scale
    dividend_yield: float | None = None
    roe: float | None = None
    roa: float | None = None
    profit_margin: float | None = None
    revenue_ttm: float | None = None
    gross_profit_ttm: float | None = None


@dataclass(frozen=True, slots=True)
class PricePoint:
    timestamp: datetime
    open: float | None
    high: float | None
    low: float | None
    close: float | None
    volume: int | None


# Oldest first. Every window computation reads from the tail.
History = Sequence[PricePoint]


@dataclass(frozen=True, slots=True)
class Factor:
    name: str
    score: float
    max: float


@dataclass(frozen=True, slots=True)
class Signal:
    action: Action
    color: str
    description: str


@dataclass(frozen=True, slots=True)
class Recommendation:
    score: float
    action: Action
    description: str
    color: str
    factors: tuple[Factor, ...]


@dataclass(frozen=True, slots=True)
class MACD:
    macd_line: float
    signal_line: float | None = None
    histogram: float | None = None


@dataclass(frozen=True, slots=True)
class BollingerBands:
    upper: float
    middle: float
    lower: float


@dataclass(frozen=True, slots=True)
class IndicatorSet:
    sma20: float | None = None
    sma50: float | None = None
    rsi: float | None = None
    macd: MACD | None = None
    bollinger_bands: BollingerBands | None = None


@dataclass(frozen=True, slots=True)
class StockReport:
    symbol: str
    name: str
    quote: Quote
    overview: Overview | None
    history: tuple[PricePoint, ...]
    recommendation: Recommendation
    indicators: IndicatorSet
    generated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def price(self) -> float | None:
        return self.quote.price

    @property
    def change(self) -> float | None:
        return self.quote.change

    @property
    def change_percent(self) -> float | None:
        return self.quote.change_percent

    @property
    def volume(self) -> int | None:
        return self.quote.volume

    @property
    def sector(self) -> str:
        if self.overview is not None and self.overview.sector:
            return self.overview.sector
        return "Unknown"

    @property
    def score(self) -> float:
        return self.recommendation.score

    @property
    def action(self) -> Action:
        return self.recommendation.action

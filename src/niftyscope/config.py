from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

NIFTY50_SYMBOLS: tuple[str, ...] = (
    "RELIANCE.NSE", "TCS.NSE", "HDFCBANK.NSE", "ICICIBANK.NSE", "INFY.NSE",
    "HINDUNILVR.NSE", "ITC.NSE", "KOTAKBANK.NSE", "LT.NSE", "SBIN.NSE",
    "BHARTIARTL.NSE", "AXISBANK.NSE", "BAJFINANCE.NSE", "ASIANPAINT.NSE", "MARUTI.NSE",
    "HCLTECH.NSE", "ULTRACEMCO.NSE", "TITAN.NSE", "SUNPHARMA.NSE", "NESTLEIND.NSE",
    "POWERGRID.NSE", "ONGC.NSE", "NTPC.NSE", "COALINDIA.NSE", "TATASTEEL.NSE",
    "JSWSTEEL.NSE", "GRASIM.NSE", "M&M.NSE", "WIPRO.NSE", "TECHM.NSE",
    "ADANIENT.NSE", "ADANIPORTS.NSE", "TATAMOTORS.NSE", "TATACONSUM.NSE", "BPCL.NSE",
    "HDFCLIFE.NSE", "SBILIFE.NSE", "BRITANNIA.NSE", "DIVISLAB.NSE", "CIPLA.NSE",
    "DRREDDY.NSE", "EICHERMOT.NSE", "HEROMOTOCO.NSE", "BAJAJ-AUTO.NSE", "HINDALCO.NSE",
    "APOLLOHOSP.NSE", "BAJAJFINSV.NSE", "INDUSINDBK.NSE", "UPL.NSE", "TATAPOWER.NSE",
)


@dataclass(slots=True)
class RecommendationThresholds:
    buy: float = 8.0
    hold: float = 5.0


@dataclass(slots=True)
class FactorMaxima:
    price: float = 2.0
    fundamentals: float = 3.0
    technical: float = 3.0
    volume: float = 2.0

    @property
    def total(self) -> float:
        return self.price + self.fundamentals + self.technical + self.volume


@dataclass(slots=True)
class IndicatorSettings:
    sma_short: int = 20
    sma_long: int = 50
    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    bollinger_period: int = 20
    bollinger_std_dev: float = 2.0
    min_panel_history: int = 20
    volume_window: int = 5
    volume_spike_ratio: float = 1.5


@dataclass(slots=True)
class FetchSettings:
    provider: str = "mock"
    history_days: int = 90
    max_workers: int = 8
    history_tail: int = 100


@dataclass(slots=True)
class CacheSettings:
    ttl_seconds: float = 60.0


@dataclass(slots=True)
class AppConfig:
    thresholds: RecommendationThresholds = field(default_factory=RecommendationThresholds)
    maxima: FactorMaxima = field(default_factory=FactorMaxima)
    indicators: IndicatorSettings = field(default_factory=IndicatorSettings)
    fetch: FetchSettings = field(default_factory=FetchSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    symbols: list[str] = field(default_factory=lambda: list(NIFTY50_SYMBOLS))

    @classmethod
    def from_env(cls, dotenv_path: str | Path | None = None) -> AppConfig:
        # variables already set in the process win over the .env file
        path = dotenv_path or find_dotenv(usecwd=True)
        if path:
            load_dotenv(dotenv_path=path, override=False)

        cfg = cls()
        provider = os.getenv("NIFTYSCOPE_PROVIDER")
        if provider:
            cfg.fetch.provider = provider.strip().lower()
        ttl = os.getenv("NIFTYSCOPE_CACHE_TTL")
        if ttl:
            cfg.cache.ttl_seconds = float(ttl)
        workers = os.getenv("NIFTYSCOPE_MAX_WORKERS")
        if workers:
            cfg.fetch.max_workers = max(1, int(workers))
        history_days = os.getenv("NIFTYSCOPE_HISTORY_DAYS")
        if history_days:
            cfg.fetch.history_days = int(history_days)
        symbols = os.getenv("NIFTYSCOPE_SYMBOLS")
        if symbols:
            cfg.symbols = [s.strip().upper() for s in symbols.split(",") if s.strip()]
        return cfg

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from niftyscope.models import Overview, PricePoint, Quote
from niftyscope.providers.base import MarketDataProvider

logger = logging.getLogger(__name__)


def _to_yf_symbol(symbol: str) -> str:
    code, _, suffix = symbol.rpartition(".")
    if not code:
        return symbol
    suffix = suffix.upper()
    if suffix == "NSE":
        return f"{code}.NS"
    if suffix == "BSE":
        return f"{code}.BO"
    return symbol


def _to_number(v: object) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        f = float(v)
        return None if math.isnan(f) or math.isinf(f) else f
    if isinstance(v, dict):
        return _to_number(v.get("raw"))
    if isinstance(v, str):
        cleaned = v.replace(",", "").strip()
        if cleaned in {"", "-", "--", "N/A", "None", "nan"}:
            return None
        try:
            return _to_number(float(cleaned))
        except ValueError:
            return None
    return None


def _to_int(v: object) -> int | None:
    f = _to_number(v)
    return None if f is None else int(f)


def _first(source: Any, *keys: str) -> float | None:
    for key in keys:
        try:
            value = _to_number(source[key])
        except (KeyError, TypeError):
            continue
        if value is not None:
            return value
    return None


def _pct(v: float | None) -> float | None:
    # upstream reports these ratios as fractions; the engine wants 0-100
    return None if v is None else v * 100


def _dividend_yield(info: dict) -> float | None:
    # trailingAnnualDividendYield is a fraction; dividendYield is already a percent
    trailing = _first(info, "trailingAnnualDividendYield")
    if trailing is not None:
        return _pct(trailing)
    return _first(info, "dividendYield")


def _default_ticker_factory(yf_symbol: str) -> Any:
    try:
        import yfinance as yf
    except Exception as e:
        raise RuntimeError("yfinance is not installed; install the package dependencies.") from e
    return yf.Ticker(yf_symbol)


class YFinanceMarketDataProvider(MarketDataProvider):
    def __init__(
        self,
        history_days: int = 90,
        ticker_factory: Callable[[str], Any] | None = None,
    ) -> None:
        self.history_days = history_days
        self._ticker_factory = ticker_factory or _default_ticker_factory

    def _ticker(self, symbol: str) -> Any:
        return self._ticker_factory(_to_yf_symbol(symbol))

    def get_quote(self, symbol: str) -> Quote | None:
        try:
            info = self._ticker(symbol).fast_info
            price = _first(info, "last_price", "lastPrice")
            previous_close = _first(info, "previous_close", "previousClose", "regular_market_previous_close")
            volume = _to_int(_first(info, "last_volume", "lastVolume"))
            high = _first(info, "day_high", "dayHigh")
            low = _first(info, "day_low", "dayLow")
            open_ = _first(info, "open")
        except Exception as e:
            logger.warning("quote fetch failed for %s: %s: %s", symbol, type(e).__name__, e)
            return None

        if price is None:
            logger.info("no quote data for %s", symbol)
            return None

        change = None
        change_percent = None
        if previous_close:
            change = price - previous_close
            change_percent = change / previous_close * 100

        return Quote(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            volume=volume,
            high=high,
            low=low,
            open=open_,
            previous_close=previous_close,
        )

    def get_overview(self, symbol: str) -> Overview | None:
        try:
            info = self._ticker(symbol).info or {}
        except Exception as e:
            logger.warning("overview fetch failed for %s: %s: %s", symbol, type(e).__name__, e)
            return None

        if not info:
            return None

        return Overview(
            symbol=symbol,
            name=info.get("shortName") or info.get("longName"),
            description=info.get("longBusinessSummary"),
            sector=info.get("sector"),
            industry=info.get("industry"),
            market_cap=_first(info, "marketCap"),
            pe_ratio=_first(info, "trailingPE"),
            peg_ratio=_first(info, "pegRatio", "trailingPegRatio"),
            eps=_first(info, "trailingEps", "epsTrailingTwelveMonths"),
            book_value=_first(info, "bookValue"),
            dividend_yield=_dividend_yield(info),
            roe=_pct(_first(info, "returnOnEquity")),
            roa=_pct(_first(info, "returnOnAssets")),
            profit_margin=_pct(_first(info, "profitMargins")),
            revenue_ttm=_first(info, "totalRevenue"),
            gross_profit_ttm=_first(info, "grossProfits"),
        )

    def get_history(self, symbol: str) -> list[PricePoint]:
        end = datetime.utcnow()
        start = end - timedelta(days=self.history_days)
        try:
            hist = self._ticker(symbol).history(start=start, end=end, interval="1d", auto_adjust=True)
        except Exception as e:
            logger.warning("history fetch failed for %s: %s: %s", symbol, type(e).__name__, e)
            return []

        if hist is None or hist.empty:
            return []

        out: list[PricePoint] = []
        for ts, row in hist.iterrows():
            close = _to_number(row.get("Close"))
            if close is None:
                continue
            out.append(
                PricePoint(
                    timestamp=ts.to_pydatetime() if hasattr(ts, "to_pydatetime") else ts,
                    open=_to_number(row.get("Open")),
                    high=_to_number(row.get("High")),
                    low=_to_number(row.get("Low")),
                    close=close,
                    volume=_to_int(row.get("Volume")),
                )
            )
        return out

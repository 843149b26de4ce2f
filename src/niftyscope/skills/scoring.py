from __future__ import annotations

from niftyscope.config import FactorMaxima, IndicatorSettings
from niftyscope.models import History, Overview, Quote
from niftyscope.skills.indicators import (
    is_increasing_trend,
    relative_strength_index,
    simple_moving_average,
)


def _clamp(v: float, low: float = 0.0, high: float = 10.0) -> float:
    return max(low, min(high, v))


def price_performance_score(quote: Quote | None, cap: float = 2.0) -> float:
    if quote is None or quote.change_percent is None:
        return 0.0

    chg = quote.change_percent
    if chg > 5:
        score = 2.0
    elif chg > 2:
        score = 1.5
    elif chg > 0:
        score = 1.0
    elif chg > -2:
        score = 0.5
    else:
        score = 0.0
    return _clamp(score, high=cap)


def _pe_part(pe: float | None) -> float:
    if pe is None:
        return 0.0
    if 0 < pe < 25:
        return 1.0
    if 25 <= pe < 35:
        return 0.5
    return 0.0


def _tiered(value: float | None, strong: float, decent: float) -> float:
    if value is None:
        return 0.0
    if value > strong:
        return 1.0
    if value > decent:
        return 0.5
    return 0.0


def fundamentals_score(overview: Overview | None, cap: float = 3.0) -> float:
    if overview is None:
        return 0.0

    score = (
        _pe_part(overview.pe_ratio)
        + _tiered(overview.roe, strong=15, decent=10)
        + _tiered(overview.profit_margin, strong=10, decent=5)
    )
    return _clamp(score, high=cap)


def technical_score(
    quote: Quote | None,
    history: History,
    settings: IndicatorSettings | None = None,
    cap: float = 3.0,
) -> float:
    s = settings or IndicatorSettings()
    if quote is None or len(history) < s.min_panel_history:
        return 0.0

    score = 0.0
    price = quote.price
    sma_short = simple_moving_average(history, s.sma_short)
    sma_long = simple_moving_average(history, min(s.sma_long, len(history)))

    if price is not None and sma_short is not None and price > sma_short:
        score += 1
    if price is not None and sma_long is not None and price > sma_long:
        score += 1

    rsi = relative_strength_index(history, s.rsi_period)
    if rsi is not None:
        if 30 < rsi < 70:
            score += 1
        elif 20 < rsi < 80:
            score += 0.5

    return _clamp(score, high=cap)


def volume_score(
    quote: Quote | None,
    history: History,
    settings: IndicatorSettings | None = None,
    cap: float = 2.0,
) -> float:
    s = settings or IndicatorSettings()
    window = s.volume_window
    if quote is None or len(history) < window:
        return 0.0

    score = 0.0
    recent = [p.volume for p in history[-window:]]

    current = quote.volume
    if current is not None and all(v is not None for v in recent):
        avg_volume = sum(recent) / window
        if current > avg_volume * s.volume_spike_ratio:
            score += 1
        elif current > avg_volume:
            score += 0.5

    if is_increasing_trend(recent):
        score += 1

    return _clamp(score, high=cap)


def factor_scores(
    quote: Quote | None,
    overview: Overview | None,
    history: History,
    settings: IndicatorSettings | None = None,
    maxima: FactorMaxima | None = None,
) -> list[tuple[str, float, float]]:
    m = maxima or FactorMaxima()
    return [
        ("Price Performance", price_performance_score(quote, m.price), m.price),
        ("Fundamentals", fundamentals_score(overview, m.fundamentals), m.fundamentals),
        ("Technical Analysis", technical_score(quote, history, settings, m.technical), m.technical),
        ("Volume Analysis", volume_score(quote, history, settings, m.volume), m.volume),
    ]

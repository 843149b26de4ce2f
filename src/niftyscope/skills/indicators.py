"""Technical indicators over an oldest-first price history.

Every function is pure and returns ``None`` when the history is too short
(or a close inside the required window is missing). ``None`` means
"not enough history" and must never be read as zero.
"""

from __future__ import annotations

from collections.abc import Sequence
from math import sqrt

from niftyscope.config import IndicatorSettings
from niftyscope.models import MACD, BollingerBands, History, IndicatorSet


def _closes(history: History, count: int | None = None) -> list[float] | None:
    window = history[-count:] if count else history
    closes = [p.close for p in window]
    if any(c is None for c in closes):
        return None
    return closes


def simple_moving_average(history: History, period: int) -> float | None:
    if period <= 0 or len(history) < period:
        return None
    closes = _closes(history, period)
    if closes is None:
        return None
    return sum(closes) / period


def relative_strength_index(history: History, period: int = 14) -> float | None:
    if period <= 0 or len(history) < period + 1:
        return None
    closes = _closes(history, period + 1)
    if closes is None:
        return None

    gains = 0.0
    losses = 0.0
    for prev, cur in zip(closes, closes[1:]):
        delta = cur - prev
        if delta > 0:
            gains += delta
        elif delta < 0:
            losses += -delta

    avg_gain = gains / period
    avg_loss = losses / period
    if avg_loss == 0:
        return 100.0
    return 100 - 100 / (1 + avg_gain / avg_loss)


def exponential_moving_average(history: History, period: int) -> float | None:
    """EMA seeded with the first close and run across the whole history.

    This is a full-history EMA, not a trailing-window one: the result depends
    on every point, so longer histories move the MACD line.
    """
    if period <= 0 or len(history) < period:
        return None
    closes = _closes(history)
    if closes is None:
        return None

    k = 2 / (period + 1)
    ema = closes[0]
    for close in closes[1:]:
        ema = close * k + ema * (1 - k)
    return ema


def macd(history: History, fast: int = 12, slow: int = 26, signal: int = 9) -> MACD | None:
    # signal line and histogram are not computed; ``signal`` is accepted for
    # call-site symmetry only
    if len(history) < slow:
        return None
    fast_ema = exponential_moving_average(history, fast)
    slow_ema = exponential_moving_average(history, slow)
    if fast_ema is None or slow_ema is None:
        return None
    return MACD(macd_line=fast_ema - slow_ema, signal_line=None, histogram=None)


def bollinger_bands(
    history: History,
    period: int = 20,
    std_dev_multiplier: float = 2.0,
) -> BollingerBands | None:
    if len(history) < period:
        return None
    sma = simple_moving_average(history, period)
    if sma is None:
        return None

    closes = _closes(history, period)
    variance = sum((c - sma) ** 2 for c in closes) / period
    width = std_dev_multiplier * sqrt(variance)
    return BollingerBands(upper=sma + width, middle=sma, lower=sma - width)


def is_increasing_trend(values: Sequence[float | None]) -> bool:
    if len(values) < 3:
        return False
    rising = sum(
        1
        for prev, cur in zip(values, values[1:])
        if prev is not None and cur is not None and cur > prev
    )
    return rising >= len(values) / 2


def calculate_indicator_set(
    history: History,
    settings: IndicatorSettings | None = None,
) -> IndicatorSet:
    s = settings or IndicatorSettings()
    if len(history) < s.min_panel_history:
        return IndicatorSet()

    return IndicatorSet(
        sma20=simple_moving_average(history, s.sma_short),
        sma50=simple_moving_average(history, min(s.sma_long, len(history))),
        rsi=relative_strength_index(history, s.rsi_period),
        macd=macd(history, s.macd_fast, s.macd_slow, s.macd_signal),
        bollinger_bands=bollinger_bands(history, s.bollinger_period, s.bollinger_std_dev),
    )

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from niftyscope.config import AppConfig, RecommendationThresholds
from niftyscope.models import Factor, History, Overview, Quote, Recommendation, Signal
from niftyscope.skills.scoring import factor_scores

BUY_SIGNAL = Signal(
    action="BUY",
    color="green",
    description="Strong fundamentals and technical indicators suggest a buy opportunity.",
)
HOLD_SIGNAL = Signal(
    action="HOLD",
    color="yellow",
    description="Mixed signals suggest holding current position or waiting for better entry.",
)
SELL_SIGNAL = Signal(
    action="SELL",
    color="red",
    description="Weak fundamentals or technical indicators suggest considering a sell.",
)


def _round_half_up(score: float) -> float:
    return float(Decimal(str(score)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def get_recommendation(
    score: float,
    thresholds: RecommendationThresholds | None = None,
) -> Signal:
    t = thresholds or RecommendationThresholds()
    if score >= t.buy:
        return BUY_SIGNAL
    if score >= t.hold:
        return HOLD_SIGNAL
    return SELL_SIGNAL


def calculate_score(
    quote: Quote | None,
    overview: Overview | None,
    history: History | None,
    config: AppConfig | None = None,
) -> Recommendation:
    """Score one symbol on a 0-10 scale and map it to BUY/HOLD/SELL.

    Four capped factors are summed: price performance (2), fundamentals (3),
    technical analysis (3) and volume analysis (2). Missing inputs only zero
    out the factors that need them; this function does not raise.
    """
    cfg = config or AppConfig()
    history = history or ()

    factors = tuple(
        Factor(name=name, score=score, max=cap)
        for name, score, cap in factor_scores(
            quote, overview, history, cfg.indicators, cfg.maxima
        )
    )
    total = max(0.0, min(10.0, sum(f.score for f in factors)))
    signal = get_recommendation(total, cfg.thresholds)

    return Recommendation(
        score=_round_half_up(total),
        action=signal.action,
        description=signal.description,
        color=signal.color,
        factors=factors,
    )

"""JSON payloads in the field layout the dashboard's HTTP clients expect."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from niftyscope.models import (
    IndicatorSet,
    Overview,
    PricePoint,
    Quote,
    Recommendation,
    StockReport,
)


def _iso(ts: datetime | None) -> str | None:
    return ts.isoformat() if ts is not None else None


def quote_payload(q: Quote) -> dict[str, Any]:
    return {
        "symbol": q.symbol,
        "price": q.price,
        "change": q.change,
        "changePercent": q.change_percent,
        "volume": q.volume,
        "high": q.high,
        "low": q.low,
        "open": q.open,
        "previousClose": q.previous_close,
        "timestamp": _iso(q.timestamp),
    }


def overview_payload(o: Overview | None) -> dict[str, Any] | None:
    if o is None:
        return None
    return {
        "symbol": o.symbol,
        "name": o.name,
        "description": o.description,
        "sector": o.sector,
        "industry": o.industry,
        "marketCap": o.market_cap,
        "peRatio": o.pe_ratio,
        "pegRatio": o.peg_ratio,
        "eps": o.eps,
        "bookValue": o.book_value,
        "dividendYield": o.dividend_yield,
        "roe": o.roe,
        "roa": o.roa,
        "profitMargin": o.profit_margin,
        "revenueTTM": o.revenue_ttm,
        "grossProfitTTM": o.gross_profit_ttm,
    }


def price_point_payload(p: PricePoint) -> dict[str, Any]:
    return {
        "timestamp": _iso(p.timestamp),
        "open": p.open,
        "high": p.high,
        "low": p.low,
        "close": p.close,
        "volume": p.volume,
    }


def recommendation_payload(r: Recommendation) -> dict[str, Any]:
    return {
        "score": r.score,
        "recommendation": {
            "action": r.action,
            "color": r.color,
            "description": r.description,
        },
        "factors": [{"name": f.name, "score": f.score, "max": f.max} for f in r.factors],
    }


def indicator_payload(ind: IndicatorSet) -> dict[str, Any]:
    macd = None
    if ind.macd is not None:
        macd = {
            "macd": ind.macd.macd_line,
            "signal": ind.macd.signal_line,
            "histogram": ind.macd.histogram,
        }
    bands = None
    if ind.bollinger_bands is not None:
        bands = {
            "upper": ind.bollinger_bands.upper,
            "middle": ind.bollinger_bands.middle,
            "lower": ind.bollinger_bands.lower,
        }
    return {
        "sma20": ind.sma20,
        "sma50": ind.sma50,
        "rsi": ind.rsi,
        "macd": macd,
        "bollingerBands": bands,
    }


def report_summary_payload(report: StockReport) -> dict[str, Any]:
    overview = report.overview
    rec = recommendation_payload(report.recommendation)
    return {
        "symbol": report.symbol,
        "name": report.name,
        "price": report.price,
        "change": report.change,
        "changePercent": report.change_percent,
        "volume": report.volume,
        "recommendation": rec["recommendation"],
        "score": rec["score"],
        "factors": rec["factors"],
        "sector": report.sector,
        "marketCap": overview.market_cap if overview is not None else None,
        "peRatio": overview.pe_ratio if overview is not None else None,
        "timestamp": _iso(report.generated_at),
    }


def report_detail_payload(report: StockReport) -> dict[str, Any]:
    return {
        "quote": quote_payload(report.quote),
        "overview": overview_payload(report.overview),
        "timeSeries": [price_point_payload(p) for p in report.history],
        "recommendation": recommendation_payload(report.recommendation),
        "technicalIndicators": indicator_payload(report.indicators),
    }


def scan_payload(scan: dict) -> dict[str, Any]:
    return {
        "status": scan["status"],
        "recommendations": [report_summary_payload(r) for r in scan["reports"]],
        "grouped": {
            action: [report_summary_payload(r) for r in reports]
            for action, reports in scan["grouped"].items()
        },
        "summary": scan["summary"],
        "diagnostics": scan["diagnostics"],
    }


def envelope(data: Any, **extra: Any) -> dict[str, Any]:
    return {
        "success": True,
        "data": data,
        **extra,
        "timestamp": datetime.utcnow().isoformat(),
    }


def error_envelope(error: str, message: str) -> dict[str, Any]:
    return {"success": False, "error": error, "message": message}

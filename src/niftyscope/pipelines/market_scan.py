from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime

from niftyscope.config import AppConfig
from niftyscope.models import StockReport
from niftyscope.providers.base import MarketDataProvider
from niftyscope.skills.indicators import calculate_indicator_set
from niftyscope.skills.ranker import group_by_action, sort_reports, summarize
from niftyscope.skills.recommendation import calculate_score

logger = logging.getLogger(__name__)


def _diag_ok(stage: str, started_at: float, detail: str, **meta: object) -> dict:
    return {
        "stage": stage,
        "status": "ok",
        "duration_ms": round((time.perf_counter() - started_at) * 1000, 2),
        "detail": detail,
        "meta": meta,
    }


def _diag_warn(stage: str, started_at: float, detail: str, **meta: object) -> dict:
    return {
        "stage": stage,
        "status": "warning",
        "duration_ms": round((time.perf_counter() - started_at) * 1000, 2),
        "detail": detail,
        "meta": meta,
    }


def _diag_error(stage: str, started_at: float, exc: Exception, **meta: object) -> dict:
    return {
        "stage": stage,
        "status": "error",
        "duration_ms": round((time.perf_counter() - started_at) * 1000, 2),
        "error_type": type(exc).__name__,
        "error": str(exc),
        "meta": meta,
    }


def build_stock_report(
    symbol: str,
    provider: MarketDataProvider,
    config: AppConfig | None = None,
) -> StockReport | None:
    """Fetch one symbol and merge its recommendation with its indicator panel.

    Returns ``None`` when the provider has no quote for the symbol.
    """
    cfg = config or AppConfig()
    quote = provider.get_quote(symbol)
    if quote is None:
        return None

    overview = provider.get_overview(symbol)
    history = provider.get_history(symbol)

    recommendation = calculate_score(quote, overview, history, cfg)
    indicators = calculate_indicator_set(history, cfg.indicators)
    tail = cfg.fetch.history_tail

    return StockReport(
        symbol=symbol,
        name=(overview.name if overview is not None else None) or symbol,
        quote=quote,
        overview=overview,
        history=tuple(history[-tail:]) if tail > 0 else (),
        recommendation=recommendation,
        indicators=indicators,
    )


def run_market_scan(
    provider: MarketDataProvider,
    symbols: list[str] | None = None,
    config: AppConfig | None = None,
    sort_by: str = "score",
    order: str = "desc",
) -> dict:
    cfg = config or AppConfig()
    watchlist = list(cfg.symbols if symbols is None else symbols)
    diagnostics: list[dict] = []
    reports: list[StockReport] = []
    missing: list[str] = []
    failures: dict[str, str] = {}

    t = time.perf_counter()
    workers = max(1, min(cfg.fetch.max_workers, len(watchlist) or 1))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(build_stock_report, symbol, provider, cfg): symbol
            for symbol in watchlist
        }
        for fut in as_completed(futures):
            symbol = futures[fut]
            try:
                report = fut.result()
            except Exception as e:
                logger.warning("scan failed for %s: %s: %s", symbol, type(e).__name__, e)
                failures[symbol] = f"{type(e).__name__}: {e}"
                continue
            if report is None:
                missing.append(symbol)
            else:
                reports.append(report)

    provider_name = type(provider).__name__
    if watchlist and not reports:
        status = "failed"
        diagnostics.append(
            _diag_error(
                "market_data",
                t,
                RuntimeError(f"no quotes returned (0/{len(watchlist)})"),
                provider=provider_name,
                missing=sorted(missing),
                failures=failures,
            )
        )
    elif missing or failures:
        status = "degraded"
        diagnostics.append(
            _diag_warn(
                "market_data",
                t,
                f"fetched {len(reports)}/{len(watchlist)} symbols",
                provider=provider_name,
                missing=sorted(missing),
                failures=failures,
            )
        )
    else:
        status = "ok"
        diagnostics.append(
            _diag_ok(
                "market_data",
                t,
                f"fetched {len(reports)}/{len(watchlist)} symbols",
                provider=provider_name,
            )
        )
    logger.info("market scan %s: %d/%d symbols scored", status, len(reports), len(watchlist))

    t = time.perf_counter()
    ranked = sort_reports(reports, sort_by=sort_by, order=order)
    summary = summarize(ranked)
    diagnostics.append(_diag_ok("ranking", t, "reports ranked", sort_by=sort_by, order=order, **summary))

    return {
        "generated_at": datetime.utcnow().isoformat(),
        "status": status,
        "provider": provider_name,
        "watchlist_size": len(watchlist),
        "diagnostics": diagnostics,
        "reports": ranked,
        "grouped": group_by_action(ranked),
        "summary": summary,
    }

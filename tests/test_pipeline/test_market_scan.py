"""
Tests for the market scan pipeline.

What we test
------------
1. build_stock_report merges recommendation and indicator panel.
2. Missing quote -> None; name falls back to the symbol.
3. run_market_scan status: ok / degraded / failed, with diagnostics.
4. Reports sorted, grouped and summarised consistently.
5. A provider that raises for one symbol does not abort the scan.
"""

from __future__ import annotations

from niftyscope.config import AppConfig
from niftyscope.models import Overview, PricePoint, Quote
from niftyscope.pipelines.market_scan import build_stock_report, run_market_scan
from niftyscope.providers.mock_provider import MockMarketDataProvider
from niftyscope.skills.indicators import calculate_indicator_set
from niftyscope.skills.recommendation import calculate_score


class _FlakyProvider(MockMarketDataProvider):
    def get_overview(self, symbol: str) -> Overview | None:
        if symbol == "TCS.NSE":
            raise RuntimeError("rate limited")
        return super().get_overview(symbol)


class _QuoteOnlyProvider(MockMarketDataProvider):
    def get_overview(self, symbol: str) -> Overview | None:
        return None

    def get_history(self, symbol: str) -> list[PricePoint]:
        return []


def test_report_matches_engine_and_calculator(mock_provider: MockMarketDataProvider, app_config: AppConfig) -> None:
    report = build_stock_report("RELIANCE.NSE", mock_provider, app_config)
    quote = mock_provider.get_quote("RELIANCE.NSE")
    overview = mock_provider.get_overview("RELIANCE.NSE")
    history = mock_provider.get_history("RELIANCE.NSE")

    assert report.symbol == "RELIANCE.NSE"
    assert report.name == "RELIANCE Ltd"
    assert report.recommendation == calculate_score(quote, overview, history, app_config)
    assert report.indicators == calculate_indicator_set(history, app_config.indicators)
    assert len(report.history) == 60


def test_report_history_tail_is_capped(mock_provider: MockMarketDataProvider, app_config: AppConfig) -> None:
    app_config.fetch.history_tail = 10
    report = build_stock_report("TCS.NSE", mock_provider, app_config)
    assert len(report.history) == 10
    assert report.history[-1].close == mock_provider.get_history("TCS.NSE")[-1].close


def test_report_none_without_quote(app_config: AppConfig) -> None:
    provider = MockMarketDataProvider(missing=["NOPE.NSE"])
    assert build_stock_report("NOPE.NSE", provider, app_config) is None


def test_report_with_quote_only(app_config: AppConfig) -> None:
    report = build_stock_report("ITC.NSE", _QuoteOnlyProvider(), app_config)
    assert report.name == "ITC.NSE"
    assert report.sector == "Unknown"
    assert report.history == ()
    assert report.indicators.sma20 is None
    assert [f.score for f in report.recommendation.factors][1:] == [0.0, 0.0, 0.0]


def test_scan_ok(mock_provider: MockMarketDataProvider, app_config: AppConfig) -> None:
    scan = run_market_scan(mock_provider, config=app_config)
    assert scan["status"] == "ok"
    assert scan["watchlist_size"] == 5
    assert scan["summary"]["total"] == 5
    scores = [r.score for r in scan["reports"]]
    assert scores == sorted(scores, reverse=True)
    assert sum(len(v) for v in scan["grouped"].values()) == 5
    assert [d["stage"] for d in scan["diagnostics"]] == ["market_data", "ranking"]


def test_scan_explicit_symbols_and_order(mock_provider: MockMarketDataProvider, app_config: AppConfig) -> None:
    scan = run_market_scan(
        mock_provider,
        symbols=["TCS.NSE", "INFY.NSE", "ITC.NSE"],
        config=app_config,
        sort_by="symbol",
        order="asc",
    )
    assert [r.symbol for r in scan["reports"]] == ["INFY.NSE", "ITC.NSE", "TCS.NSE"]


def test_scan_degraded_when_some_symbols_missing(app_config: AppConfig) -> None:
    provider = MockMarketDataProvider(missing=["TCS.NSE"])
    scan = run_market_scan(provider, config=app_config)
    assert scan["status"] == "degraded"
    assert scan["summary"]["total"] == 4
    market = scan["diagnostics"][0]
    assert market["status"] == "warning"
    assert market["meta"]["missing"] == ["TCS.NSE"]


def test_scan_degraded_when_provider_raises(app_config: AppConfig) -> None:
    scan = run_market_scan(_FlakyProvider(), config=app_config)
    assert scan["status"] == "degraded"
    assert "TCS.NSE" in scan["diagnostics"][0]["meta"]["failures"]
    assert "TCS.NSE" not in [r.symbol for r in scan["reports"]]


def test_scan_failed_when_nothing_returned(app_config: AppConfig) -> None:
    provider = MockMarketDataProvider(missing=app_config.symbols)
    scan = run_market_scan(provider, config=app_config)
    assert scan["status"] == "failed"
    assert scan["reports"] == []
    assert scan["diagnostics"][0]["status"] == "error"


def test_scan_empty_watchlist(mock_provider: MockMarketDataProvider, app_config: AppConfig) -> None:
    scan = run_market_scan(mock_provider, symbols=[], config=app_config)
    assert scan["status"] == "ok"
    assert scan["summary"] == {"total": 0, "buy": 0, "hold": 0, "sell": 0}


def test_scan_is_repeatable(mock_provider: MockMarketDataProvider, app_config: AppConfig) -> None:
    first = run_market_scan(mock_provider, config=app_config)
    second = run_market_scan(mock_provider, config=app_config)

    def by_symbol(scan: dict) -> list:
        return sorted((r.symbol, r.recommendation.score, r.action) for r in scan["reports"])

    assert by_symbol(first) == by_symbol(second)


def test_quote_only_is_accepted_by_engine() -> None:
    quote = Quote(symbol="X.NSE", price=None, change_percent=None, volume=None)
    assert calculate_score(quote, None, []).score == 0.0

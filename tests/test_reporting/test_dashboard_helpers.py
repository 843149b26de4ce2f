"""
Tests for the dashboard's pure helpers (no Streamlit session needed).
"""

from __future__ import annotations

from niftyscope.config import AppConfig
from niftyscope.dashboard import _format_report_rows, _refresh_interval
from niftyscope.pipelines.market_scan import build_stock_report
from niftyscope.providers.mock_provider import MockMarketDataProvider


def test_overview_refreshes_on_cache_ttl() -> None:
    cfg = AppConfig()
    assert _refresh_interval(cfg) == 60.0
    cfg.cache.ttl_seconds = 15
    assert _refresh_interval(cfg) == 15


def test_no_auto_refresh_without_cache() -> None:
    cfg = AppConfig()
    cfg.cache.ttl_seconds = 0
    assert _refresh_interval(cfg) is None


def test_report_rows(mock_provider: MockMarketDataProvider, app_config: AppConfig) -> None:
    report = build_stock_report("SBIN.NSE", mock_provider, app_config)
    (row,) = _format_report_rows([report])
    assert row["Symbol"] == "SBIN.NSE"
    assert row["Score"] == report.score
    assert row["Action"].endswith(report.action)

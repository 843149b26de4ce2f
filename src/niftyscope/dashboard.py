from __future__ import annotations

import streamlit as st

from niftyscope.config import AppConfig
from niftyscope.logging_utils import setup_logging
from niftyscope.models import IndicatorSet, StockReport
from niftyscope.pipelines.market_scan import build_stock_report, run_market_scan
from niftyscope.providers.base import MarketDataProvider
from niftyscope.providers.factory import PROVIDER_KINDS, build_market_provider

ACTION_ICONS = {"BUY": "🟢", "HOLD": "🟡", "SELL": "🔴"}
SORT_OPTIONS = {
    "Score": "score",
    "Price": "price",
    "Change": "change",
    "Change %": "changePercent",
    "Volume": "volume",
    "Symbol": "symbol",
}


def _fmt(v: float | None, digits: int = 2) -> str:
    return "n/a" if v is None else f"{v:,.{digits}f}"


def _provider_label(kind: str) -> str:
    labels = {
        "mock": "mock (demo data)",
        "yfinance": "yfinance (Yahoo Finance, NSE/BSE)",
    }
    return labels.get(kind, kind)


@st.cache_resource
def _provider(kind: str, ttl_seconds: float) -> MarketDataProvider:
    # one provider per (kind, ttl); its response cache lives as long as the process
    cfg = AppConfig.from_env()
    cfg.cache.ttl_seconds = ttl_seconds
    return build_market_provider(kind, cfg)


def _refresh_interval(cfg: AppConfig) -> float | None:
    ttl = cfg.cache.ttl_seconds
    return ttl if ttl > 0 else None


def _status_text(status: str) -> str:
    return {
        "ok": "OK",
        "warning": "Warning",
        "error": "Error",
        "failed": "Failed",
        "degraded": "Degraded",
    }.get(status.strip().lower(), status)


def _format_diagnostics_rows(diagnostics: list[dict]) -> list[dict]:
    return [
        {
            "Stage": str(item.get("stage", "-")),
            "Status": _status_text(str(item.get("status", "unknown"))),
            "Duration (ms)": item.get("duration_ms", "-"),
            "Detail": item.get("detail") or item.get("error") or "",
        }
        for item in diagnostics
    ]


def _format_report_rows(reports: list[StockReport]) -> list[dict]:
    return [
        {
            "Symbol": r.symbol,
            "Name": r.name,
            "Price": r.price,
            "Change": r.change,
            "Change %": None if r.change_percent is None else round(r.change_percent, 2),
            "Volume": r.volume,
            "Score": r.score,
            "Action": f"{ACTION_ICONS.get(r.action, '')} {r.action}",
            "Sector": r.sector,
        }
        for r in reports
    ]


def _overview_page(provider: MarketDataProvider, cfg: AppConfig) -> None:
    st.title("Nifty 50 recommendations")
    st.caption("Composite 0-10 score from price, fundamentals, technicals and volume.")

    col1, col2, col3 = st.columns(3)
    with col1:
        sort_label = st.selectbox("Sort by", options=list(SORT_OPTIONS), index=0)
    with col2:
        order = st.radio("Order", options=["desc", "asc"], horizontal=True)
    with col3:
        action_filter = st.selectbox("Show", options=["ALL", "BUY", "HOLD", "SELL"], index=0)

    with st.spinner("Scoring basket..."):
        report = run_market_scan(provider, config=cfg, sort_by=SORT_OPTIONS[sort_label], order=order)

    status = report["status"]
    if status == "failed":
        st.error("No symbol returned a quote. Check the data source or try again later.")
    elif status == "degraded":
        st.warning("Some symbols could not be fetched; showing the rest.")

    summary = report["summary"]
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Symbols", summary["total"])
    m2.metric("BUY", summary["buy"])
    m3.metric("HOLD", summary["hold"])
    m4.metric("SELL", summary["sell"])

    reports = report["reports"]
    if action_filter != "ALL":
        reports = [r for r in reports if r.action == action_filter]

    if reports:
        st.dataframe(_format_report_rows(reports), width="stretch", hide_index=True)
        st.bar_chart({r.symbol: r.score for r in reports})
    else:
        st.info("No symbols match the current filter.")

    with st.expander("Diagnostics", expanded=False):
        st.dataframe(_format_diagnostics_rows(report["diagnostics"]), width="stretch")


def _indicator_panel(ind: IndicatorSet) -> None:
    st.subheader("Technical indicators")
    if ind == IndicatorSet():
        st.info("Not enough price history for the indicator panel.")
    c1, c2, c3 = st.columns(3)
    c1.metric("SMA 20", _fmt(ind.sma20))
    c2.metric("SMA 50", _fmt(ind.sma50))
    c3.metric("RSI 14", _fmt(ind.rsi))

    macd_line = ind.macd.macd_line if ind.macd is not None else None
    bands = ind.bollinger_bands
    c4, c5, c6, c7 = st.columns(4)
    c4.metric("MACD line", _fmt(macd_line, 4))
    c5.metric("Bollinger upper", _fmt(bands.upper if bands else None))
    c6.metric("Bollinger middle", _fmt(bands.middle if bands else None))
    c7.metric("Bollinger lower", _fmt(bands.lower if bands else None))
    st.caption("MACD signal line and histogram are not computed.")


def _detail_page(provider: MarketDataProvider, cfg: AppConfig) -> None:
    st.title("Stock detail")
    symbol = st.selectbox("Symbol", options=cfg.symbols, index=0)

    with st.spinner(f"Loading {symbol}..."):
        report = build_stock_report(symbol, provider, cfg)

    if report is None:
        st.error(f"No data found for symbol: {symbol}")
        return

    rec = report.recommendation
    st.subheader(f"{report.name} ({report.symbol})")
    st.caption(report.sector)

    c1, c2, c3 = st.columns(3)
    c1.metric(
        "Price",
        _fmt(report.price),
        delta=None if report.change_percent is None else f"{report.change_percent:.2f}%",
    )
    c2.metric("Score", f"{rec.score:.1f} / 10")
    c3.metric("Recommendation", f"{ACTION_ICONS.get(rec.action, '')} {rec.action}")
    st.write(rec.description)

    st.dataframe(
        [{"Factor": f.name, "Score": f.score, "Max": f.max} for f in rec.factors],
        width="stretch",
        hide_index=True,
    )

    closes = [p.close for p in report.history]
    if closes:
        st.line_chart({"Close": closes})
    else:
        st.info("No price history available.")

    _indicator_panel(report.indicators)

    if report.overview is not None:
        o = report.overview
        with st.expander("Fundamentals", expanded=False):
            st.dataframe(
                [
                    {"Metric": "Market cap", "Value": _fmt(o.market_cap, 0)},
                    {"Metric": "P/E", "Value": _fmt(o.pe_ratio)},
                    {"Metric": "PEG", "Value": _fmt(o.peg_ratio)},
                    {"Metric": "EPS", "Value": _fmt(o.eps)},
                    {"Metric": "ROE %", "Value": _fmt(o.roe)},
                    {"Metric": "ROA %", "Value": _fmt(o.roa)},
                    {"Metric": "Profit margin %", "Value": _fmt(o.profit_margin)},
                    {"Metric": "Dividend yield %", "Value": _fmt(o.dividend_yield)},
                ],
                width="stretch",
                hide_index=True,
            )
            if o.description:
                st.write(o.description)


def main() -> None:
    st.set_page_config(page_title="niftyscope", layout="wide")
    setup_logging("INFO")
    cfg = AppConfig.from_env()

    with st.sidebar:
        st.header("Navigation")
        page = st.radio("Page", ["Overview", "Stock detail"], index=0)
        kind = st.selectbox(
            "Data source",
            options=PROVIDER_KINDS,
            index=PROVIDER_KINDS.index(cfg.fetch.provider) if cfg.fetch.provider in PROVIDER_KINDS else 0,
            format_func=_provider_label,
        )
        if st.button("Refresh data"):
            _provider.clear()

    provider = _provider(kind, cfg.cache.ttl_seconds)
    if page == "Overview":
        # reruns only the overview on the cache cadence so the basket stays fresh
        st.fragment(_overview_page, run_every=_refresh_interval(cfg))(provider, cfg)
    else:
        _detail_page(provider, cfg)


if __name__ == "__main__":
    main()

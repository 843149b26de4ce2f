from __future__ import annotations

import argparse
import json

from rich.console import Console
from rich.table import Table

from niftyscope.config import AppConfig
from niftyscope.logging_utils import setup_logging
from niftyscope.models import StockReport
from niftyscope.pipelines.market_scan import build_stock_report, run_market_scan
from niftyscope.providers.factory import PROVIDER_KINDS, build_market_provider
from niftyscope.serializers import (
    envelope,
    error_envelope,
    report_detail_payload,
    report_summary_payload,
    scan_payload,
)
from niftyscope.skills.ranker import top_reports

ACTION_STYLES = {"BUY": "green", "HOLD": "yellow", "SELL": "red"}


def _fmt(v: float | None, digits: int = 2) -> str:
    return "n/a" if v is None else f"{v:,.{digits}f}"


def _load_config(args: argparse.Namespace) -> AppConfig:
    cfg = AppConfig.from_env()
    if args.provider:
        cfg.fetch.provider = args.provider
    if args.cache_ttl is not None:
        cfg.cache.ttl_seconds = args.cache_ttl
    return cfg


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


def _print_diagnostics(report: dict) -> None:
    diagnostics = report.get("diagnostics", [])
    if not diagnostics:
        return

    table = Table(title="Diagnostics")
    table.add_column("Stage")
    table.add_column("Status")
    table.add_column("Duration (ms)")
    table.add_column("Detail")

    for item in diagnostics:
        detail = item.get("detail") or item.get("error") or ""
        table.add_row(
            str(item.get("stage", "-")),
            str(item.get("status", "unknown")),
            str(item.get("duration_ms", "-")),
            str(detail),
        )

    Console().print(table)


def _reports_table(title: str, reports: list[StockReport]) -> Table:
    table = Table(title=title)
    table.add_column("Symbol")
    table.add_column("Name")
    table.add_column("Price", justify="right")
    table.add_column("Change %", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Action")
    table.add_column("Sector")

    for r in reports:
        style = ACTION_STYLES.get(r.action, "white")
        table.add_row(
            r.symbol,
            r.name,
            _fmt(r.price),
            _fmt(r.change_percent),
            f"{r.score:.1f}",
            f"[{style}]{r.action}[/{style}]",
            r.sector,
        )
    return table


def _scan_or_exit(args: argparse.Namespace, cfg: AppConfig, sort_by: str, order: str) -> dict:
    provider = build_market_provider(cfg.fetch.provider, cfg)
    report = run_market_scan(provider, config=cfg, sort_by=sort_by, order=order)
    if report["status"] == "failed":
        if args.json:
            _print_json(error_envelope("Failed to fetch recommendations", "no symbol returned a quote"))
        else:
            _print_diagnostics(report)
            Console().print("[red]Scan failed: no symbol returned a quote.[/red]")
        raise SystemExit(1)
    return report


def cmd_scan(args: argparse.Namespace) -> None:
    cfg = _load_config(args)
    report = _scan_or_exit(args, cfg, args.sort_by, args.order)

    if args.json:
        _print_json(envelope(scan_payload(report)))
        return

    _print_diagnostics(report)
    if report["status"] == "degraded":
        Console().print("[yellow]Scan degraded: some symbols could not be fetched.[/yellow]")

    console = Console()
    console.print(_reports_table("Recommendations", report["reports"]))
    summary = report["summary"]
    console.print(
        f"\nTotal {summary['total']}: "
        f"[green]BUY {summary['buy']}[/green] / "
        f"[yellow]HOLD {summary['hold']}[/yellow] / "
        f"[red]SELL {summary['sell']}[/red]"
    )


def cmd_top(args: argparse.Namespace) -> None:
    cfg = _load_config(args)
    report = _scan_or_exit(args, cfg, "score", "desc")
    selected = top_reports(report["reports"], limit=args.limit, action=args.type)

    if args.json:
        _print_json(envelope([report_summary_payload(r) for r in selected], count=len(selected)))
        return

    Console().print(_reports_table(f"Top {args.limit} ({args.type})", selected))


def cmd_stock(args: argparse.Namespace) -> None:
    cfg = _load_config(args)
    provider = build_market_provider(cfg.fetch.provider, cfg)
    symbol = args.symbol.strip().upper()
    report = build_stock_report(symbol, provider, cfg)

    if report is None:
        if args.json:
            _print_json(error_envelope("Stock not found", f"No data found for symbol: {symbol}"))
        else:
            Console().print(f"[red]No data found for symbol: {symbol}[/red]")
        raise SystemExit(1)

    if args.json:
        _print_json(envelope(report_detail_payload(report)))
        return

    console = Console()
    rec = report.recommendation
    style = ACTION_STYLES.get(rec.action, "white")
    console.print(f"[bold]{report.name}[/bold] ({report.symbol}) - {report.sector}")
    console.print(
        f"Price {_fmt(report.price)}  Change {_fmt(report.change)} ({_fmt(report.change_percent)}%)"
    )
    console.print(f"Score {rec.score:.1f}/10  [{style}]{rec.action}[/{style}]  {rec.description}")

    factors = Table(title="Factors")
    factors.add_column("Factor")
    factors.add_column("Score", justify="right")
    factors.add_column("Max", justify="right")
    for f in rec.factors:
        factors.add_row(f.name, f"{f.score:.1f}", f"{f.max:.0f}")
    console.print(factors)

    ind = report.indicators
    panel = Table(title="Technical indicators")
    panel.add_column("Indicator")
    panel.add_column("Value", justify="right")
    panel.add_row("SMA 20", _fmt(ind.sma20))
    panel.add_row("SMA 50", _fmt(ind.sma50))
    panel.add_row("RSI 14", _fmt(ind.rsi))
    panel.add_row("MACD", _fmt(ind.macd.macd_line if ind.macd else None, 4))
    bands = ind.bollinger_bands
    panel.add_row("Bollinger upper", _fmt(bands.upper if bands else None))
    panel.add_row("Bollinger middle", _fmt(bands.middle if bands else None))
    panel.add_row("Bollinger lower", _fmt(bands.lower if bands else None))
    console.print(panel)


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--provider",
        type=str,
        default=None,
        choices=PROVIDER_KINDS,
        help="market data source (default: NIFTYSCOPE_PROVIDER or mock)",
    )
    common.add_argument("--cache-ttl", type=float, default=None, help="response cache TTL in seconds")
    common.add_argument("--json", action="store_true", help="print the JSON payload instead of tables")

    parser = argparse.ArgumentParser(prog="niftyscope")
    parser.add_argument("--log-level", type=str, default="WARNING", help="DEBUG/INFO/WARNING/ERROR")
    sub = parser.add_subparsers(required=True)

    scan = sub.add_parser("scan", parents=[common], help="score every symbol in the basket")
    scan.add_argument(
        "--sort-by",
        type=str,
        default="score",
        choices=["score", "price", "change", "changePercent", "volume", "symbol"],
    )
    scan.add_argument("--order", type=str, default="desc", choices=["asc", "desc"])
    scan.set_defaults(func=cmd_scan)

    top = sub.add_parser("top", parents=[common], help="highest scoring symbols")
    top.add_argument("--limit", type=int, default=10)
    top.add_argument("--type", type=str, default="all", choices=["all", "buy", "hold", "sell"])
    top.set_defaults(func=cmd_top)

    stock = sub.add_parser("stock", parents=[common], help="full report for one symbol")
    stock.add_argument("symbol", type=str, help="e.g. RELIANCE.NSE")
    stock.set_defaults(func=cmd_stock)
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    args.func(args)


if __name__ == "__main__":
    main()

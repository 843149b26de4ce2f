from __future__ import annotations

from collections.abc import Iterable

from niftyscope.models import StockReport

_SORT_KEYS = {
    "score": lambda r: r.score,
    "price": lambda r: r.price,
    "change": lambda r: r.change,
    "changePercent": lambda r: r.change_percent,
    "volume": lambda r: r.volume,
    "symbol": lambda r: r.symbol.lower(),
}


def sort_reports(
    reports: Iterable[StockReport],
    sort_by: str = "score",
    order: str = "desc",
) -> list[StockReport]:
    key = _SORT_KEYS.get(sort_by, _SORT_KEYS["score"])
    items = list(reports)
    present = [r for r in items if key(r) is not None]
    missing = [r for r in items if key(r) is None]
    present.sort(key=key, reverse=order.lower() != "asc")
    # reports without a value for the key always go last
    return present + missing


def group_by_action(reports: Iterable[StockReport]) -> dict[str, list[StockReport]]:
    grouped: dict[str, list[StockReport]] = {"buy": [], "hold": [], "sell": []}
    for r in reports:
        grouped[r.action.lower()].append(r)
    return grouped


def summarize(reports: Iterable[StockReport]) -> dict[str, int]:
    grouped = group_by_action(reports)
    return {
        "total": sum(len(v) for v in grouped.values()),
        "buy": len(grouped["buy"]),
        "hold": len(grouped["hold"]),
        "sell": len(grouped["sell"]),
    }


def top_reports(
    reports: Iterable[StockReport],
    limit: int = 10,
    action: str = "all",
) -> list[StockReport]:
    wanted = action.strip().lower()
    selected = [r for r in reports if wanted == "all" or r.action.lower() == wanted]
    selected.sort(key=lambda r: r.score, reverse=True)
    return selected[: max(0, limit)]

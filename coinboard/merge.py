from datetime import datetime, timezone
from typing import Literal, Mapping, Sequence

from .schemas import MergedRow, PricePoint

Align = Literal["index", "timestamp"]

def format_date(ts_ms: int) -> str:
    return datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d")

def merge_series(
    series: Mapping[str, Sequence[PricePoint]],
    coins: Sequence[str],
    align: Align = "index",
) -> list[MergedRow]:
    """
    Build chart rows from per-coin series. The first coin is the reference:
    it fixes the row count and the date labels.

    align="index" pairs prices by position and assumes the series line up.
    align="timestamp" pairs them by exact timestamp instead.
    Either way a coin with no value for a row is left out of that row.
    """
    if not coins:
        return []
    reference = series.get(coins[0]) or []

    if align == "timestamp":
        by_ts = {c: {p.timestamp: p.price for p in series.get(c) or []} for c in coins}
        rows = []
        for point in reference:
            row: MergedRow = {"date": format_date(point.timestamp)}
            for c in coins:
                if point.timestamp in by_ts[c]:
                    row[c] = by_ts[c][point.timestamp]
            rows.append(row)
        return rows

    rows = []
    for i, point in enumerate(reference):
        row = {"date": format_date(point.timestamp)}
        for c in coins:
            s = series.get(c) or []
            if i < len(s):
                row[c] = s[i].price
        rows.append(row)
    return rows

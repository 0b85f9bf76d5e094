"""X-axis ordering for chart kinds that plot a left-to-right domain."""

from datetime import datetime
from functools import cmp_to_key
from typing import Any, List, Optional, Tuple

from vizcore.viz.classify import Row
from vizcore.viz.values import parse_date


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _sign(delta: float) -> int:
    return (delta > 0) - (delta < 0)


def _compare_parsed(
    a: Any, a_date: Optional[datetime], b: Any, b_date: Optional[datetime]
) -> int:
    if a_date is not None and b_date is not None:
        return _sign((a_date - b_date).total_seconds())
    if isinstance(a, str) and isinstance(b, str):
        return (a > b) - (a < b)
    if _is_number(a) and _is_number(b):
        return _sign(a - b)
    a_text, b_text = str(a), str(b)
    return (a_text > b_text) - (a_text < b_text)


def compare_x_values(a: Any, b: Any) -> int:
    """Compare two x-axis values: dates, then strings, then numbers, then text."""
    return _compare_parsed(a, parse_date(a), b, parse_date(b))


def sort_by_x(rows: List[Row], x_axis_key: str) -> List[Row]:
    """Return rows stably sorted by their x-axis value."""
    decorated: List[Tuple[Any, Optional[datetime], Row]] = [
        (row.get(x_axis_key), parse_date(row.get(x_axis_key)), row) for row in rows
    ]
    decorated.sort(key=cmp_to_key(lambda a, b: _compare_parsed(a[0], a[1], b[0], b[1])))
    return [row for _, _, row in decorated]

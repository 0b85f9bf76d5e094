"""Scalar inspection helpers: numeric parsing, date parsing and coercion."""

import math
import re
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional, Union

from dateutil import parser as date_parser

Number = Union[int, float]

# Missing date parts resolve against a fixed anchor so parsing is deterministic.
_DEFAULT_DATE = datetime(1970, 1, 1)

_MONTH_OR_DAY_NAME = re.compile(
    r"\b(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec|mon|tue|wed|thu|fri|sat|sun)[a-z]*\.?\b",
    re.IGNORECASE,
)


def parse_number(value: Any) -> Optional[Number]:
    """Return the finite number a value represents, or None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text or "_" in text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def is_numeric_like(value: Any) -> bool:
    """Return True when the value is, or losslessly parses to, a finite number."""
    return parse_number(value) is not None


def coerce_number(value: Any) -> Number:
    """Coerce a value to a number for plotting; unparsable values become 0."""
    if isinstance(value, bool):
        return int(value)
    number = parse_number(value)
    return 0 if number is None else number


def _naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def parse_date(value: Any) -> Optional[datetime]:
    """Parse a date-like value into a naive UTC datetime, or return None.

    Numeric strings are not treated as dates; free text must carry a digit or
    a month/day name before the permissive parser is consulted.
    """
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text or is_numeric_like(text):
        return None
    if not any(ch.isdigit() for ch in text) and not _MONTH_OR_DAY_NAME.search(text):
        return None
    try:
        return _naive_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass
    try:
        return _naive_utc(date_parser.parse(text, default=_DEFAULT_DATE))
    except (ValueError, OverflowError, TypeError):
        return None


def is_date_like(value: Any) -> bool:
    """Return True when the value parses as a date."""
    return parse_date(value) is not None


def name_has_token(name: str, tokens: Iterable[str]) -> bool:
    """Return True when a field name contains any of the tokens (case-insensitive)."""
    lowered = name.lower()
    return any(token in lowered for token in tokens)


def category_label(value: Any) -> str:
    """Render a grouping value as a series/category label."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return "Unknown"
    return str(value)

"""Long/grouped format detection and pivoting to wide rows."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from vizcore.viz.classify import FieldClassification, Row
from vizcore.viz.select import first_match
from vizcore.viz.values import category_label, coerce_number, is_date_like, name_has_token

TEMPORAL_TOKENS = ("month", "date", "time", "year", "day", "week")
GROUPING_TOKENS = ("type", "category", "status", "group", "name")


@dataclass(frozen=True)
class PivotPlan:
    """Columns driving a long-to-wide pivot."""

    x_axis: str
    group: str
    value: str


@dataclass
class PivotResult:
    """Wide rows plus the distinct categories in first-seen order."""

    rows: List[Row]
    categories: List[str] = field(default_factory=list)


def detect_long_format(fields: FieldClassification) -> Optional[PivotPlan]:
    """Return a pivot plan when the sample looks long/grouped, else None.

    Long/grouped means at least two categorical fields and one numeric field.
    """
    if len(fields.categorical) < 2 or not fields.numeric:
        return None

    sample = fields.sample
    x_axis = first_match(
        fields.categorical,
        [
            lambda name: is_date_like(sample.get(name))
            or name_has_token(name, TEMPORAL_TOKENS),
            lambda name: True,
        ],
    )
    remaining = [name for name in fields.categorical if name != x_axis]
    group = first_match(
        remaining,
        [lambda name: name_has_token(name, GROUPING_TOKENS), lambda name: True],
    )
    return PivotPlan(x_axis=x_axis, group=group, value=fields.numeric[0])


def pivot_rows(rows: List[Row], plan: PivotPlan) -> PivotResult:
    """Group rows by x value and spread each category into its own column.

    Repeated (x, category) pairs keep the last value seen. Categories missing
    from a group are left out; callers fill them.
    """
    grouped: Dict[str, Row] = {}
    categories: Dict[str, None] = {}

    for row in rows:
        x_value: Any = row.get(plan.x_axis)
        category = category_label(row.get(plan.group))
        categories.setdefault(category, None)

        bucket = grouped.setdefault(str(x_value), {plan.x_axis: x_value})
        bucket[category] = coerce_number(row.get(plan.value))

    return PivotResult(rows=list(grouped.values()), categories=list(categories))

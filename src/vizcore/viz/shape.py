"""Row-set to chart-series shaping pipeline.

classify -> detect/pivot -> select -> repair -> adapt -> order. The pipeline is
pure and never raises; anything it cannot make sense of becomes the default
empty config.
"""

import logging
from typing import Any, Iterable, List, Optional, Union

from vizcore.viz.adapters import adapt
from vizcore.viz.classify import FieldClassification, Row, classify_fields, normalize_rows
from vizcore.viz.fallback import frequency_histogram, repair_missing_keys
from vizcore.viz.models import (
    ChartDataConfig,
    ChartKind,
    DataKeys,
    coerce_chart_kind,
    default_chart_config,
)
from vizcore.viz.ordering import sort_by_x
from vizcore.viz.pivot import PivotPlan, detect_long_format, pivot_rows
from vizcore.viz.select import SeriesSelection, select_series
from vizcore.viz.values import coerce_number

logger = logging.getLogger(__name__)


def _fill_series(rows: List[Row], series: List[str]) -> List[Row]:
    filled = []
    for row in rows:
        coerced = dict(row)
        for key in series:
            coerced[key] = coerce_number(row.get(key))
        filled.append(coerced)
    return filled


def _shape_pivoted(rows: List[Row], plan: PivotPlan) -> ChartDataConfig:
    result = pivot_rows(rows, plan)
    categories = result.categories
    keys = DataKeys(
        primary=categories[0],
        secondary=categories[1] if len(categories) > 1 else None,
        additional=categories[2:],
    )
    logger.debug(
        "viz_shape_pivot x=%s group=%s value=%s categories=%d",
        plan.x_axis,
        plan.group,
        plan.value,
        len(categories),
    )
    data = sort_by_x(_fill_series(result.rows, keys.series()), plan.x_axis)
    return ChartDataConfig(data=data, data_keys=keys, x_axis_key=plan.x_axis)


def _shape_wide(rows: List[Row], selection: SeriesSelection) -> ChartDataConfig:
    keys = DataKeys(
        primary=selection.primary,
        secondary=selection.secondary,
        additional=list(selection.additional),
    )
    data = []
    for index, row in enumerate(_fill_series(rows, keys.series())):
        if selection.x_axis_key not in row:
            row[selection.x_axis_key] = index + 1
        data.append(row)
    return ChartDataConfig(data=data, data_keys=keys, x_axis_key=selection.x_axis_key)


def _shape_rows(rows: List[Row], kind: ChartKind) -> ChartDataConfig:
    fields: FieldClassification = classify_fields(rows)
    if fields.is_empty:
        return default_chart_config()

    if kind.plots_series:
        plan = detect_long_format(fields)
        if plan is not None:
            return _shape_pivoted(rows, plan)

    if not fields.numeric and kind is ChartKind.BAR:
        histogram = frequency_histogram(rows, fields)
        if histogram is not None:
            return histogram

    selection: Optional[SeriesSelection] = select_series(fields)
    if selection is None:
        return default_chart_config()

    config = repair_missing_keys(_shape_wide(rows, selection))
    if not config.data:
        return config
    config = adapt(kind, fields, config)
    if kind.requires_ordering:
        config.data = sort_by_x(config.data, config.x_axis_key)
    return config


def shape(rows: Optional[Iterable[Any]], chart_kind: Union[ChartKind, str]) -> ChartDataConfig:
    """Infer axes and series from arbitrary rows for the given chart kind.

    Args:
        rows: Query result rows; records or bare scalars.
        chart_kind: One of line, bar, pie, area. Unknown kinds shape as bar.

    Returns:
        A structurally valid ChartDataConfig. Empty or unusable input yields
        the default config (no rows, primary ``value``, x axis ``label``).
    """
    kind = coerce_chart_kind(chart_kind)
    try:
        return _shape_rows(normalize_rows(rows), kind)
    except Exception:
        logger.exception("viz_shape_failed kind=%s", kind.value)
        return default_chart_config()

"""Fallbacks for row sets that do not fit a chartable shape.

`repair_missing_keys` guards configs that were not built from the rows at hand,
such as charts rebuilt from the result cache.

Nothing in here raises: every function returns a structurally valid config
or None so the caller can move on to the next fallback.
"""

import logging
from typing import Dict, List, Optional

from vizcore.observability import viz_metrics
from vizcore.viz.classify import FieldClassification, Row
from vizcore.viz.models import ChartDataConfig, DataKeys, default_chart_config
from vizcore.viz.select import first_match
from vizcore.viz.values import category_label, is_numeric_like, name_has_token

logger = logging.getLogger(__name__)

HISTOGRAM_TOKENS = ("value", "name", "category")


def _record_fallback(kind: str) -> None:
    viz_metrics.add_counter(
        "viz.shape.fallback",
        description="Shaping fallbacks by kind",
        attributes={"fallback": kind},
    )


def frequency_histogram(rows: List[Row], fields: FieldClassification) -> Optional[ChartDataConfig]:
    """Count occurrences of each value of the best categorical field.

    The field is the first whose name mentions value/name/category, else the
    last categorical field.
    """
    if not fields.categorical:
        return None
    key = first_match(fields.categorical, [lambda name: name_has_token(name, HISTOGRAM_TOKENS)])
    if key is None:
        key = fields.categorical[-1]

    counts: Dict[str, int] = {}
    for row in rows:
        label = category_label(row.get(key))
        counts[label] = counts.get(label, 0) + 1

    logger.info("viz_shape_fallback kind=histogram field=%s categories=%d", key, len(counts))
    _record_fallback("histogram")
    return ChartDataConfig(
        data=[{"name": name, "value": count} for name, count in counts.items()],
        data_keys=DataKeys(primary="value"),
        x_axis_key="name",
    )


def _fallback_primary(sample: Row, config: ChartDataConfig) -> Optional[str]:
    return first_match(
        list(sample.keys()),
        [lambda name: name != config.x_axis_key and is_numeric_like(sample[name])],
    )


def _fallback_x_axis(sample: Row, primary: str) -> Optional[str]:
    return first_match(
        list(sample.keys()),
        [lambda name: name != primary and not is_numeric_like(sample[name])],
    )


def repair_missing_keys(config: ChartDataConfig) -> ChartDataConfig:
    """Swap in same-shape keys when the primary or x axis is absent from the sample.

    Returns the default config when no usable substitute exists.
    """
    if not config.data:
        return config
    sample = config.data[0]
    keys = config.data_keys

    if keys.primary not in sample:
        substitute = _fallback_primary(sample, config)
        if substitute is None:
            logger.info("viz_shape_fallback kind=empty reason=primary_missing")
            _record_fallback("empty")
            return default_chart_config()
        logger.info("viz_shape_fallback kind=primary from=%s to=%s", keys.primary, substitute)
        _record_fallback("primary")
        series = [name for name in keys.series()[1:] if name != substitute]
        keys = DataKeys(
            primary=substitute,
            secondary=series[0] if series else None,
            additional=series[1:],
        )

    x_axis_key = config.x_axis_key
    if x_axis_key not in sample:
        substitute = _fallback_x_axis(sample, keys.primary)
        if substitute is None:
            logger.info("viz_shape_fallback kind=empty reason=x_axis_missing")
            _record_fallback("empty")
            return default_chart_config()
        logger.info("viz_shape_fallback kind=x_axis from=%s to=%s", x_axis_key, substitute)
        _record_fallback("x_axis")
        x_axis_key = substitute

    return ChartDataConfig(data=config.data, data_keys=keys, x_axis_key=x_axis_key)

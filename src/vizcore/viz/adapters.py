"""Per-chart-kind reshaping of the generic chart config."""

from typing import List, Optional

from vizcore.viz.classify import FieldClassification
from vizcore.viz.models import INDEX_KEY, ChartDataConfig, ChartKind, DataKeys
from vizcore.viz.select import first_match
from vizcore.viz.values import coerce_number

PIE_LABEL_NAMES = ("name", "category", "status", "type")


def pie_label_key(fields: FieldClassification, config: ChartDataConfig) -> Optional[str]:
    """Pick the field used for slice names."""
    value_key = config.data_keys.primary
    names: List[str] = [name for name in fields.fields if name != value_key]
    x_axis = config.x_axis_key
    return first_match(
        names,
        [
            lambda name: name == "label",
            *[lambda name, wanted=wanted: name == wanted for wanted in PIE_LABEL_NAMES],
            lambda name: name == x_axis and x_axis != INDEX_KEY,
            lambda name: not fields.is_numeric(name),
        ],
    )


def to_pie(fields: FieldClassification, config: ChartDataConfig) -> ChartDataConfig:
    """Reshape rows into ``{name, value}`` slices."""
    label_key = pie_label_key(fields, config)
    value_key = config.data_keys.primary
    slices = []
    for index, row in enumerate(config.data):
        label = row.get(label_key) if label_key is not None else None
        slices.append(
            {
                "name": label if label is not None else f"Slice {index + 1}",
                "value": coerce_number(row.get(value_key)),
            }
        )
    return ChartDataConfig(data=slices, data_keys=DataKeys(primary="value"), x_axis_key="name")


def adapt(kind: ChartKind, fields: FieldClassification, config: ChartDataConfig) -> ChartDataConfig:
    """Apply the chart-kind data contract; series kinds pass through unchanged."""
    if kind is ChartKind.PIE:
        return to_pie(fields, config)
    return config

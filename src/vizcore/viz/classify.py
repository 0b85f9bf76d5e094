"""Row normalization and sample-based field classification."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from vizcore.viz.values import coerce_number, is_numeric_like

Row = Dict[str, Any]


@dataclass
class FieldClassification:
    """Fields of the sample row split into numeric-like and categorical-like."""

    fields: List[str] = field(default_factory=list)
    numeric: List[str] = field(default_factory=list)
    categorical: List[str] = field(default_factory=list)
    sample: Row = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """Return True when the sample row has no fields."""
        return not self.fields

    def is_numeric(self, name: str) -> bool:
        """Return True if the field was classified numeric-like."""
        return name in self.numeric


def normalize_rows(raw_rows: Optional[Iterable[Any]]) -> List[Row]:
    """Copy record rows and wrap bare scalars as ``{value, label}`` rows."""
    if raw_rows is None or isinstance(raw_rows, (str, bytes, Mapping)):
        return []
    rows: List[Row] = []
    for index, raw in enumerate(raw_rows):
        if isinstance(raw, Mapping):
            rows.append({str(key): value for key, value in raw.items()})
        else:
            rows.append({"value": coerce_number(raw), "label": f"Row {index + 1}"})
    return rows


def classify_fields(rows: List[Row]) -> FieldClassification:
    """Classify each field of the first row as numeric-like or categorical-like."""
    if not rows:
        return FieldClassification()

    sample = rows[0]
    fields = list(sample.keys())
    numeric = [name for name in fields if is_numeric_like(sample[name])]
    categorical = [name for name in fields if name not in numeric]
    return FieldClassification(
        fields=fields, numeric=numeric, categorical=categorical, sample=sample
    )

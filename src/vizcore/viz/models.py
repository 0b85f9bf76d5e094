"""Chart data models shared by the shaping pipeline and the cache."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

DEFAULT_PRIMARY_KEY = "value"
DEFAULT_X_AXIS_KEY = "label"
INDEX_KEY = "index"


class ChartKind(str, Enum):
    """Supported chart kinds."""

    LINE = "line"
    BAR = "bar"
    PIE = "pie"
    AREA = "area"

    @property
    def plots_series(self) -> bool:
        """Return True for kinds that plot series over a domain."""
        return self is not ChartKind.PIE

    @property
    def requires_ordering(self) -> bool:
        """Return True for kinds that need a monotonic x axis."""
        return self in (ChartKind.LINE, ChartKind.AREA)


@dataclass
class DataKeys:
    """Fields of each row plotted as value series."""

    primary: str
    secondary: Optional[str] = None
    additional: List[str] = field(default_factory=list)

    def series(self) -> List[str]:
        """Return all series keys in plotting order."""
        keys = [self.primary]
        if self.secondary:
            keys.append(self.secondary)
        keys.extend(self.additional)
        return keys

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"primary": self.primary}
        if self.secondary:
            payload["secondary"] = self.secondary
        if self.additional:
            payload["additional"] = list(self.additional)
        return payload


@dataclass
class ChartDataConfig:
    """Canonical shaped output consumed by the chart renderer."""

    data: List[Dict[str, Any]]
    data_keys: DataKeys
    x_axis_key: str

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the renderer's camelCase contract."""
        return {
            "data": [dict(row) for row in self.data],
            "dataKeys": self.data_keys.to_dict(),
            "xAxisKey": self.x_axis_key,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ChartDataConfig":
        """Rebuild a config from its serialized form."""
        keys = payload.get("dataKeys") or {}
        return cls(
            data=[dict(row) for row in payload.get("data") or []],
            data_keys=DataKeys(
                primary=keys.get("primary", DEFAULT_PRIMARY_KEY),
                secondary=keys.get("secondary"),
                additional=list(keys.get("additional") or []),
            ),
            x_axis_key=payload.get("xAxisKey", DEFAULT_X_AXIS_KEY),
        )


def default_chart_config() -> ChartDataConfig:
    """Return the empty config used when there is nothing to plot."""
    return ChartDataConfig(
        data=[], data_keys=DataKeys(primary=DEFAULT_PRIMARY_KEY), x_axis_key=DEFAULT_X_AXIS_KEY
    )


def coerce_chart_kind(value: Any) -> ChartKind:
    """Resolve a chart kind, falling back to bar for unknown values."""
    if isinstance(value, ChartKind):
        return value
    try:
        return ChartKind(str(value).strip().lower())
    except ValueError:
        return ChartKind.BAR

"""Optional low-cardinality metrics for shaping and caching."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from opentelemetry import metrics

logger = logging.getLogger(__name__)

_TRUTHY = {"true", "1", "yes", "on"}


def is_metrics_enabled(enabled_env_var: str) -> bool:
    """Resolve metric enablement from an explicit flag or OTEL exporter config."""
    raw = os.getenv(enabled_env_var)
    if raw is not None:
        return raw.strip().lower() in _TRUTHY
    if (os.getenv("OTEL_METRICS_EXPORTER") or "").strip().lower() == "none":
        return False
    endpoint = (os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or "").strip()
    metrics_endpoint = (os.getenv("OTEL_EXPORTER_OTLP_METRICS_ENDPOINT") or "").strip()
    return bool(endpoint or metrics_endpoint)


def _normalize_attributes(attributes: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    normalized: Dict[str, Any] = {}
    for key, value in (attributes or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            normalized[key] = "true" if value else "false"
        elif isinstance(value, (str, int, float)):
            normalized[key] = value
        else:
            normalized[key] = str(value)
    return normalized


@dataclass
class OptionalMetrics:
    """Thin wrapper around OTEL counters with env-based enablement."""

    meter_name: str
    enabled_env_var: str
    _meter: Any = None
    _counters: dict[str, Any] = field(default_factory=dict)

    def add_counter(
        self,
        name: str,
        value: int = 1,
        *,
        description: str = "",
        attributes: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Add to a monotonic counter when metrics are enabled."""
        if not is_metrics_enabled(self.enabled_env_var):
            return
        try:
            counter = self._counters.get(name)
            if counter is None:
                if self._meter is None:
                    self._meter = metrics.get_meter(self.meter_name)
                counter = self._meter.create_counter(name=name, description=description)
                self._counters[name] = counter
            counter.add(int(value), _normalize_attributes(attributes))
        except Exception as exc:
            logger.debug("Counter metric emission failed for %s: %s", name, exc)


viz_metrics = OptionalMetrics(
    meter_name="vizcore",
    enabled_env_var="VIZ_OBSERVABILITY_METRICS_ENABLED",
)

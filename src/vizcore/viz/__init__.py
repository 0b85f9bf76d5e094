"""Chart series shaping.

Turns schema-less query result rows into chart-ready series for line, bar,
pie and area charts.

Design Notes:
-------------
Shapes handled:
  - Wide: one row per x value, one numeric column per series.
  - Long/grouped: one row per (x value, category); pivoted to wide.
  - Pure categorical (bar): counted into a frequency histogram.
  - Scalars: wrapped as ``{value, label}`` rows.

Limitations:
  - Types are inferred from the first row only.
  - Pivoting keeps a single value column; repeated (x, category) pairs are
    not aggregated.
"""

from vizcore.viz.models import ChartDataConfig, ChartKind, DataKeys, default_chart_config
from vizcore.viz.shape import shape

__all__ = ["ChartDataConfig", "ChartKind", "DataKeys", "default_chart_config", "shape"]

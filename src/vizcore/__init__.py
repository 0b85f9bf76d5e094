"""Chart series shaping and query result caching for dashboard charts."""

from vizcore.cache import NullResultCache, ResultCache, build_result_cache
from vizcore.service import ChartDataService, ChartResult
from vizcore.viz import ChartDataConfig, ChartKind, DataKeys, default_chart_config, shape

__all__ = [
    "ChartDataConfig",
    "ChartDataService",
    "ChartKind",
    "ChartResult",
    "DataKeys",
    "NullResultCache",
    "ResultCache",
    "build_result_cache",
    "default_chart_config",
    "shape",
]

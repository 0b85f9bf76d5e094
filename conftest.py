import sys
from pathlib import Path

import pytest

# Puts 'src' on sys.path before collection so 'vizcore' imports without an
# editable install.

if sys.version_info < (3, 10):
    print(
        f"ERROR: This project requires Python 3.10+ (found {sys.version.split()[0]}).",
        file=sys.stderr,
    )
    sys.exit(1)


ROOT_DIR = Path(__file__).parent.absolute()
src_dir = ROOT_DIR / "src"

if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))


@pytest.fixture(autouse=True)
def _isolate_viz_env(monkeypatch):
    """Keep tests independent of VIZ_* and OTEL settings on the host."""
    for name in (
        "VIZ_CACHE_TTL_SECONDS",
        "VIZ_CACHE_MAX_ENTRIES",
        "VIZ_CACHE_PREFIX",
        "VIZ_CACHE_ORIGIN",
        "VIZ_CACHE_DB_PATH",
        "VIZ_CACHE_MAX_PAGES",
        "VIZ_QUERY_API_URL",
        "VIZ_QUERY_TIMEOUT_SECONDS",
        "VIZ_OBSERVABILITY_METRICS_ENABLED",
        "OTEL_METRICS_EXPORTER",
        "OTEL_EXPORTER_OTLP_ENDPOINT",
        "OTEL_EXPORTER_OTLP_METRICS_ENDPOINT",
    ):
        monkeypatch.delenv(name, raising=False)

from vizcore.observability import OptionalMetrics, _normalize_attributes, is_metrics_enabled


def test_metrics_disabled_by_default():
    """Without a flag or exporter endpoint, metrics are off."""
    assert is_metrics_enabled("VIZ_OBSERVABILITY_METRICS_ENABLED") is False


def test_explicit_flag_wins(monkeypatch):
    """The explicit flag overrides OTEL endpoint configuration."""
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4317")
    assert is_metrics_enabled("VIZ_OBSERVABILITY_METRICS_ENABLED") is True
    monkeypatch.setenv("VIZ_OBSERVABILITY_METRICS_ENABLED", "false")
    assert is_metrics_enabled("VIZ_OBSERVABILITY_METRICS_ENABLED") is False


def test_exporter_none_disables(monkeypatch):
    """OTEL_METRICS_EXPORTER=none turns endpoint-driven metrics off."""
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4317")
    monkeypatch.setenv("OTEL_METRICS_EXPORTER", "none")
    assert is_metrics_enabled("VIZ_OBSERVABILITY_METRICS_ENABLED") is False


def test_attribute_normalization():
    """Attributes are reduced to OTEL-safe scalar values."""
    assert _normalize_attributes({"a": True, "b": None, "c": 1, "d": ["x"]}) == {
        "a": "true",
        "c": 1,
        "d": "['x']",
    }


def test_counter_emission_when_enabled(monkeypatch):
    """Enabled counters are created once and reused."""
    monkeypatch.setenv("VIZ_TEST_METRICS", "1")
    calls = []

    class FakeCounter:
        def add(self, value, attributes):
            calls.append((value, attributes))

    class FakeMeter:
        created = 0

        def create_counter(self, name, description=""):
            FakeMeter.created += 1
            return FakeCounter()

    recorder = OptionalMetrics(meter_name="test", enabled_env_var="VIZ_TEST_METRICS")
    recorder._meter = FakeMeter()
    recorder.add_counter("viz.cache.hit", attributes={"tier": "memory"})
    recorder.add_counter("viz.cache.hit", 2)

    assert FakeMeter.created == 1
    assert calls == [(1, {"tier": "memory"}), (2, {})]


def test_counter_failures_are_swallowed(monkeypatch):
    """Metric backends that fail never break the caller."""
    monkeypatch.setenv("VIZ_TEST_METRICS", "true")

    class BrokenMeter:
        def create_counter(self, name, description=""):
            raise RuntimeError("no backend")

    recorder = OptionalMetrics(meter_name="test", enabled_env_var="VIZ_TEST_METRICS")
    recorder._meter = BrokenMeter()
    recorder.add_counter("viz.cache.miss")

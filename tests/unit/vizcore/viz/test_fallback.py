from vizcore.viz.classify import classify_fields
from vizcore.viz.fallback import frequency_histogram, repair_missing_keys
from vizcore.viz.models import ChartDataConfig, DataKeys, default_chart_config


def test_histogram_counts_categories_in_first_seen_order():
    """Pure categorical rows are counted per distinct value."""
    rows = [{"institute": "X"}, {"institute": "X"}, {"institute": "Y"}]
    config = frequency_histogram(rows, classify_fields(rows))
    assert config.to_dict() == {
        "data": [{"name": "X", "value": 2}, {"name": "Y", "value": 1}],
        "dataKeys": {"primary": "value"},
        "xAxisKey": "name",
    }


def test_histogram_prefers_token_named_field():
    """A category/name/value-like field is counted before the last field."""
    rows = [{"city": "A", "category": "c1", "state": "NY"}, {"city": "B", "category": "c1"}]
    config = frequency_histogram(rows, classify_fields(rows))
    assert config.data == [{"name": "c1", "value": 2}]


def test_histogram_falls_back_to_last_categorical_and_unknown():
    """Without a token match the last field is counted; blanks are Unknown."""
    rows = [{"city": "A", "state": "NY"}, {"city": "B", "state": None}]
    config = frequency_histogram(rows, classify_fields(rows))
    assert config.data == [{"name": "NY", "value": 1}, {"name": "Unknown", "value": 1}]


def test_histogram_needs_a_categorical_field():
    """Numeric-only rows cannot be counted."""
    rows = [{"n": 1}]
    assert frequency_histogram(rows, classify_fields(rows)) is None


def test_repair_substitutes_primary():
    """A missing primary is replaced by another numeric field."""
    config = ChartDataConfig(
        data=[{"label": "a", "v": 1, "w": 2}],
        data_keys=DataKeys(primary="missing", secondary="w"),
        x_axis_key="label",
    )
    repaired = repair_missing_keys(config)
    assert repaired.data_keys.primary == "v"
    assert repaired.data_keys.secondary == "w"
    assert repaired.x_axis_key == "label"


def test_repair_substitutes_x_axis():
    """A missing x axis is replaced by a non-numeric field."""
    config = ChartDataConfig(
        data=[{"region": "East", "v": 1}], data_keys=DataKeys(primary="v"), x_axis_key="gone"
    )
    assert repair_missing_keys(config).x_axis_key == "region"


def test_repair_without_substitute_returns_default():
    """Nothing usable yields the default empty config."""
    config = ChartDataConfig(
        data=[{"v": 1}], data_keys=DataKeys(primary="v"), x_axis_key="gone"
    )
    assert repair_missing_keys(config) == default_chart_config()


def test_repair_leaves_valid_config_alone():
    """Valid configs pass through unchanged."""
    config = ChartDataConfig(
        data=[{"region": "East", "v": 1}], data_keys=DataKeys(primary="v"), x_axis_key="region"
    )
    assert repair_missing_keys(config) == config

from vizcore.viz.classify import FieldClassification, classify_fields
from vizcore.viz.select import (
    PRIMARY_CHAIN,
    first_field,
    first_match,
    first_numeric,
    resolve,
    second_field,
    select_series,
)


def _fields(names, numeric=()):
    numeric = list(numeric)
    return FieldClassification(
        fields=list(names),
        numeric=numeric,
        categorical=[n for n in names if n not in numeric],
    )


def test_first_match_respects_predicate_order():
    """An earlier predicate wins even when a later name matches it."""
    assert first_match(["a", "b"], [lambda n: n == "b", lambda n: True]) == "b"
    assert first_match(["a", "b"], [lambda n: n == "z"]) is None


def test_primary_chain_candidates_individually():
    """Each primary fallback can be exercised on its own."""
    fields = _fields(["name", "city"])
    assert first_numeric(fields) is None
    assert second_field(fields) == "city"
    assert first_field(fields) == "name"
    assert resolve(PRIMARY_CHAIN, fields) == "city"
    assert resolve(PRIMARY_CHAIN, _fields(["name"])) == "name"
    assert resolve(PRIMARY_CHAIN, _fields([])) is None


def test_select_series_wide():
    """Primary, secondary and additional series follow numeric field order."""
    fields = classify_fields([{"region": "East", "sales": 10, "profit": 3, "units": 7}])
    selection = select_series(fields)
    assert selection.x_axis_key == "region"
    assert selection.primary == "sales"
    assert selection.secondary == "profit"
    assert selection.additional == ["units"]


def test_select_series_synthesizes_index():
    """All-numeric rows get a synthesized index axis."""
    selection = select_series(classify_fields([{"a": 1, "b": 2}]))
    assert selection.x_axis_key == "index"
    assert selection.primary == "a"
    assert selection.secondary == "b"


def test_select_series_empty():
    """No fields, no selection."""
    assert select_series(FieldClassification()) is None

"""Axis and series selection for already-wide row sets.

Each decision is an ordered chain of candidate functions; the first one that
yields a field wins. Chains are plain lists so every fallback can be tested
on its own.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from vizcore.viz.classify import FieldClassification
from vizcore.viz.models import INDEX_KEY

Candidate = Callable[[FieldClassification], Optional[str]]
Predicate = Callable[[str], bool]


def first_match(names: Sequence[str], predicates: Sequence[Predicate]) -> Optional[str]:
    """Return the first name satisfying the earliest predicate that matches any name."""
    for predicate in predicates:
        for name in names:
            if predicate(name):
                return name
    return None


def resolve(chain: Sequence[Candidate], fields: FieldClassification) -> Optional[str]:
    """Evaluate a candidate chain and return the first non-empty result."""
    for candidate in chain:
        choice = candidate(fields)
        if choice is not None:
            return choice
    return None


def first_numeric(fields: FieldClassification) -> Optional[str]:
    return fields.numeric[0] if fields.numeric else None


def second_field(fields: FieldClassification) -> Optional[str]:
    return fields.fields[1] if len(fields.fields) > 1 else None


def first_field(fields: FieldClassification) -> Optional[str]:
    return fields.fields[0] if fields.fields else None


PRIMARY_CHAIN: List[Candidate] = [first_numeric, second_field, first_field]


def select_primary(fields: FieldClassification) -> Optional[str]:
    """Pick the primary series field."""
    return resolve(PRIMARY_CHAIN, fields)


def select_secondary(fields: FieldClassification, primary: str) -> Optional[str]:
    """Pick the next numeric field distinct from the primary."""
    return next((name for name in fields.numeric if name != primary), None)


def select_additional(
    fields: FieldClassification, primary: str, secondary: Optional[str]
) -> List[str]:
    """Return numeric fields beyond the primary and secondary series."""
    return [name for name in fields.numeric if name not in (primary, secondary)]


def select_x_axis(fields: FieldClassification, primary: str) -> str:
    """Pick the x-axis field, or the synthesized index key when none qualifies."""
    choice = first_match(
        fields.fields, [lambda name: name != primary and not fields.is_numeric(name)]
    )
    return choice if choice is not None else INDEX_KEY


@dataclass
class SeriesSelection:
    """Resolved axis and series fields for wide data."""

    x_axis_key: str
    primary: str
    secondary: Optional[str] = None
    additional: List[str] = field(default_factory=list)


def select_series(fields: FieldClassification) -> Optional[SeriesSelection]:
    """Resolve x axis and series for wide data; None when the row has no fields."""
    primary = select_primary(fields)
    if primary is None:
        return None
    secondary = select_secondary(fields, primary)
    return SeriesSelection(
        x_axis_key=select_x_axis(fields, primary),
        primary=primary,
        secondary=secondary,
        additional=select_additional(fields, primary, secondary),
    )

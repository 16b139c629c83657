"""Tests for the dial value aggregation rule."""

import pytest

from wtf_dial.services.aggregator import Recomputation, aggregate


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        ([10, 20, 30], 20),
        ([], 0),
        ([42], 42),
        ([1, 2, 2], 2),
        ([0, 100], 50),
    ],
)
def test_aggregate_is_rounded_mean(values, expected) -> None:
    assert aggregate(values) == expected


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        ([1, 2], 2),
        ([2, 3], 3),
        ([0, 1], 1),
        ([-1, -2], -2),
    ],
)
def test_aggregate_rounds_ties_away_from_zero(values, expected) -> None:
    """2.5 becomes 3 here, unlike Python's round()."""
    assert aggregate(values) == expected


def test_aggregate_accepts_generators() -> None:
    assert aggregate(v for v in (4, 5)) == 5


def test_recomputation_changed_flag() -> None:
    assert Recomputation(dial_id=1, old_value=3, new_value=4).changed is True
    assert Recomputation(dial_id=1, old_value=4, new_value=4).changed is False

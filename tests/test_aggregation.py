"""Tests for rating aggregates (pure functions, no database)."""

import pytest

from storerating.services.aggregation import (RatingAggregate, aggregate,
                                              aggregate_by_store,
                                              round_half_up)


def test_aggregate_empty():
    """No ratings: zero count, zero average, every value present with 0."""
    result = aggregate([])
    assert result == RatingAggregate(count=0, average=0.0, distribution={1: 0, 2: 0, 3: 0, 4: 0, 5: 0})


def test_aggregate_rounds_half_up():
    """(3+3+4+5)/4 = 3.75 rounds to 3.8."""
    result = aggregate([3, 3, 4, 5])
    assert result.count == 4
    assert result.average == 3.8
    assert result.distribution == {1: 0, 2: 0, 3: 2, 4: 1, 5: 1}


def test_aggregate_single_value():
    result = aggregate([5])
    assert result.count == 1
    assert result.average == 5.0
    assert result.distribution[5] == 1


def test_aggregate_repeating_fraction():
    """(1+2+2)/3 = 1.666... -> 1.7."""
    assert aggregate([1, 2, 2]).average == 1.7


def test_aggregate_accepts_generators():
    result = aggregate(v for v in (2, 4))
    assert result.count == 2
    assert result.average == 3.0


def test_aggregate_rejects_out_of_range():
    with pytest.raises(ValueError):
        aggregate([0, 3])
    with pytest.raises(ValueError):
        aggregate([6])


@pytest.mark.parametrize(
    "raw, expected",
    [(2.25, 2.3), (2.35, 2.4), (4.05, 4.1), (1.04, 1.0), (0, 0.0)],
)
def test_round_half_up(raw, expected):
    """Halves always go up, unlike Python's round()."""
    assert round_half_up(raw) == expected


def test_aggregate_by_store_groups_rows():
    rows = [(1, 5), (1, 4), (2, 1)]
    result = aggregate_by_store(rows)
    assert result[1].count == 2
    assert result[1].average == 4.5
    assert result[2].distribution == {1: 1, 2: 0, 3: 0, 4: 0, 5: 0}


def test_aggregate_by_store_fills_unrated_stores():
    """Stores listed by id but without rows get the empty aggregate."""
    result = aggregate_by_store([(1, 3)], store_ids=[1, 7])
    assert result[7] == RatingAggregate()
    assert result[1].average == 3.0

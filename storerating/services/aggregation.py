"""
Rating aggregates — count, average and per-value distribution.

Everything here is a pure function of the rating values handed in. Callers
fetch the raw rows (one query per view) and aggregate in Python; nothing is
cached or stored, so the numbers always match the current rating set.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from storerating.models.rating import MAX_RATING, MIN_RATING

RATING_VALUES = tuple(range(MIN_RATING, MAX_RATING + 1))


def _empty_distribution() -> dict[int, int]:
    return {value: 0 for value in RATING_VALUES}


@dataclass(frozen=True)
class RatingAggregate:
    count: int = 0
    average: float = 0.0
    distribution: dict[int, int] = field(default_factory=_empty_distribution)


def round_half_up(value: Decimal | float, places: int = 1) -> float:
    """Round like a person would (3.75 -> 3.8), not banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def aggregate(values: Iterable[int]) -> RatingAggregate:
    distribution = _empty_distribution()
    total = 0
    count = 0
    for value in values:
        if value not in distribution:
            raise ValueError(f"Rating value out of range: {value!r}")
        distribution[value] += 1
        total += value
        count += 1

    if count == 0:
        return RatingAggregate(distribution=distribution)

    average = round_half_up(Decimal(total) / Decimal(count))
    return RatingAggregate(count=count, average=average, distribution=distribution)


def aggregate_by_store(
    rows: Iterable[tuple[int, int]],
    store_ids: Iterable[int] = (),
) -> dict[int, RatingAggregate]:
    """Group ``(store_id, value)`` rows and aggregate each group.

    Every id in *store_ids* gets an entry, even when it has no rows.
    """
    grouped: dict[int, list[int]] = defaultdict(list)
    for store_id in store_ids:
        grouped.setdefault(store_id, [])
    for store_id, value in rows:
        grouped[store_id].append(value)
    return {store_id: aggregate(values) for store_id, values in grouped.items()}

"""Pure filtering and ordering helpers for price series.

Every function returns a new list; inputs are never mutated.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from sharpe_watch.core.models import PricePoint, SortOrder


def is_valid_price(point: PricePoint) -> bool:
    """A bar is usable when open and close are positive numbers and volume >= 0."""
    if any(math.isnan(v) for v in (point.open, point.close, point.volume)):
        return False
    return point.close > 0 and point.open > 0 and point.volume >= 0


def filter_valid_prices(series: Sequence[PricePoint]) -> list[PricePoint]:
    """Drop bars with zero, negative or NaN prices and negative volume."""
    return [p for p in series if is_valid_price(p)]


def sort_chronological(series: Sequence[PricePoint]) -> list[PricePoint]:
    """Oldest first."""
    return sorted(series, key=lambda p: p.date)


def sort_reverse_chronological(series: Sequence[PricePoint]) -> list[PricePoint]:
    """Newest first."""
    return sorted(series, key=lambda p: p.date, reverse=True)


def sort_series(series: Sequence[PricePoint], order: SortOrder) -> list[PricePoint]:
    if order == SortOrder.REVERSE_CHRONOLOGICAL:
        return sort_reverse_chronological(series)
    return sort_chronological(series)


def is_chronological(series: Sequence[PricePoint]) -> bool:
    """True when dates never decrease."""
    return all(series[i - 1].date <= series[i].date for i in range(1, len(series)))


def ensure_chronological(series: Sequence[PricePoint]) -> list[PricePoint]:
    """Chronological copy of ``series``, sorting only when needed."""
    if is_chronological(series):
        return list(series)
    return sort_chronological(series)


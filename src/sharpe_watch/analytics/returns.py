"""Period-over-period percentage returns from close-price sequences.

All functions are pure: inputs are never mutated and insufficient data is
a soft failure (0.0 or an empty list), never an exception.
"""

from __future__ import annotations

from collections.abc import Sequence


def trailing_return(current: float, past: float) -> float:
    """Percentage change from ``past`` to ``current``.

    Returns 0.0 when ``past`` is zero or negative, which only happens with
    corrupt upstream data.
    """
    if past <= 0:
        return 0.0
    return ((current - past) / past) * 100


def returns_series(prices: Sequence[float]) -> list[float]:
    """One-step returns, ``prices[i]`` vs ``prices[i - 1]``.

    A series of N prices yields N - 1 returns; fewer than two prices yield
    an empty list.
    """
    if len(prices) < 2:
        return []
    return [trailing_return(prices[i], prices[i - 1]) for i in range(1, len(prices))]


def lookback_return(prices: Sequence[float], lookback_days: int) -> float:
    """Trailing return of the latest price against ``lookback_days`` back.

    Returns 0.0 unless the series has at least ``lookback_days + 1`` prices.
    """
    if len(prices) < lookback_days + 1:
        return 0.0
    return trailing_return(prices[-1], prices[-1 - lookback_days])

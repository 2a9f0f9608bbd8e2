"""Simplified Sharpe ratio over trailing windows of daily closes.

Sharpe = (trailing_return - risk_free_rate) / std_dev

where ``trailing_return`` is the percentage change over the lookback and
``std_dev`` is the population standard deviation of the one-step returns
inside that lookback. No annualization is applied.

A lookback of L trading days needs at least 2 * L prices: one window to
establish the trailing return plus one more so the volatility comes from a
sample of returns rather than a single value. Shorter series produce
``None``, never a partial metric.
"""

from __future__ import annotations

from collections.abc import Sequence

from sharpe_watch.analytics.returns import returns_series, trailing_return
from sharpe_watch.analytics.statistics import standard_deviation
from sharpe_watch.core.constants import (
    TRADING_DAYS_MONTH,
    TRADING_DAYS_QUARTER,
    TRADING_DAYS_SEMESTER,
    TRADING_DAYS_WEEK,
    TRADING_DAYS_YEAR,
)
from sharpe_watch.core.exceptions import InvalidInputError
from sharpe_watch.core.models import (
    AnnotatedPricePoint,
    MultiPeriodReport,
    PricePoint,
    SharpeMetrics,
)

# Report slot -> lookback in trading days ("yesterday" is handled separately)
PERIOD_LOOKBACKS: dict[str, int] = {
    "last_week": TRADING_DAYS_WEEK,
    "last_month": TRADING_DAYS_MONTH,
    "last_quarter": TRADING_DAYS_QUARTER,
    "last_semester": TRADING_DAYS_SEMESTER,
    "last_year": TRADING_DAYS_YEAR,
}

_PRICE_FIELDS = tuple(PricePoint.model_fields)


def _check_lookback(lookback_days: object) -> int:
    if isinstance(lookback_days, bool) or not isinstance(lookback_days, int):
        raise InvalidInputError(
            f"lookback_days must be an integer, got {type(lookback_days).__name__}",
            context={"field": "lookback", "value": lookback_days},
        )
    if lookback_days < 1:
        raise InvalidInputError(
            f"lookback_days must be >= 1, got {lookback_days}",
            context={"field": "lookback", "value": lookback_days},
        )
    return lookback_days


def required_length(lookback_days: int) -> int:
    """Minimum number of prices needed for a metric at ``lookback_days``."""
    return 2 * _check_lookback(lookback_days)


def sharpe_ratio(
    trailing_return_pct: float,
    std_dev: float,
    risk_free_rate: float = 0.0,
) -> float:
    """Excess return per unit of volatility; 0.0 when volatility is zero."""
    if std_dev == 0:
        return 0.0
    return (trailing_return_pct - risk_free_rate) / std_dev


def sharpe_for_period(
    prices: Sequence[float],
    lookback_days: int,
    risk_free_rate: float = 0.0,
) -> SharpeMetrics | None:
    """Sharpe metrics for the most recent ``lookback_days`` window.

    Parameters
    ----------
    prices : Sequence[float]
        Closing prices, oldest first.
    lookback_days : int
        Window length in trading days.
    risk_free_rate : float
        Subtracted from the trailing return (percentage points).

    Returns
    -------
    SharpeMetrics | None
        ``None`` when ``len(prices) < 2 * lookback_days``.

    Raises
    ------
    InvalidInputError
        If ``lookback_days`` is not a positive integer.
    """
    if len(prices) < required_length(lookback_days):
        return None

    period_return = trailing_return(prices[-1], prices[-1 - lookback_days])
    # Daily volatility proxy: one-step returns over the last lookback_days + 1 prices
    std_dev = standard_deviation(returns_series(prices[-(lookback_days + 1) :]))

    return SharpeMetrics(
        sharpe_ratio=sharpe_ratio(period_return, std_dev, risk_free_rate),
        trailing_return=period_return,
        std_dev=std_dev,
        period_days=lookback_days,
    )


def multi_period_sharpe(
    prices: Sequence[float],
    ticker: str,
    risk_free_rate: float = 0.0,
) -> MultiPeriodReport:
    """Evaluate the six standard lookbacks independently.

    "yesterday" is gated on two prices rather than the 2x rule; every other
    slot is ``None`` exactly when its own lookback lacks data.
    """
    slots = {
        name: sharpe_for_period(prices, days, risk_free_rate)
        for name, days in PERIOD_LOOKBACKS.items()
    }
    yesterday = (
        sharpe_for_period(prices, 1, risk_free_rate) if len(prices) >= 2 else None
    )
    return MultiPeriodReport(ticker=ticker, yesterday=yesterday, **slots)


def extract_prices(series: Sequence[PricePoint]) -> list[float]:
    """Closing prices of ``series`` in the same order."""
    return [point.close for point in series]


def enhance_with_metrics(
    series: Sequence[PricePoint],
    lookback_days: int,
    risk_free_rate: float = 0.0,
) -> list[AnnotatedPricePoint]:
    """Attach a point-in-time Sharpe signal to every point of ``series``.

    The metrics on point ``i`` equal ``sharpe_for_period`` over the closes
    up to and including ``i``, so no point sees future prices. Points with
    fewer than ``2 * lookback_days`` closes of history are copied through
    without metrics. The input is not modified.
    """
    required = required_length(lookback_days)
    prices = extract_prices(series)

    annotated: list[AnnotatedPricePoint] = []
    for i, point in enumerate(series):
        base = {name: getattr(point, name) for name in _PRICE_FIELDS}
        if i < required - 1:
            annotated.append(AnnotatedPricePoint(**base))
            continue

        # The trailing 2L closes give the same result as the full prefix
        metrics = sharpe_for_period(
            prices[i + 1 - required : i + 1], lookback_days, risk_free_rate
        )
        if metrics is None:
            annotated.append(AnnotatedPricePoint(**base))
            continue

        annotated.append(
            AnnotatedPricePoint(
                **base,
                trailing_return=metrics.trailing_return,
                std_dev=metrics.std_dev,
                sharpe_ratio=metrics.sharpe_ratio,
            )
        )

    return annotated

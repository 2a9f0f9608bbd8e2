"""Analytics engine: returns, statistics, and rolling Sharpe metrics."""

from sharpe_watch.analytics.returns import (
    lookback_return,
    returns_series,
    trailing_return,
)
from sharpe_watch.analytics.sharpe import (
    PERIOD_LOOKBACKS,
    enhance_with_metrics,
    extract_prices,
    multi_period_sharpe,
    required_length,
    sharpe_for_period,
    sharpe_ratio,
)
from sharpe_watch.analytics.statistics import mean, standard_deviation, variance

__all__ = [
    "PERIOD_LOOKBACKS",
    "enhance_with_metrics",
    "extract_prices",
    "lookback_return",
    "mean",
    "multi_period_sharpe",
    "required_length",
    "returns_series",
    "sharpe_for_period",
    "sharpe_ratio",
    "standard_deviation",
    "trailing_return",
    "variance",
]

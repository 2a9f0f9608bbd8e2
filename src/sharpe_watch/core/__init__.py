"""sharpe_watch.core: Foundation types, config, validation, and exceptions."""

from sharpe_watch.core.config import (
    AnalyticsConfig,
    APIConfig,
    CacheConfig,
    SharpeWatchConfig,
    SourceConfig,
    WatchlistConfig,
    load_config,
)
from sharpe_watch.core.exceptions import (
    CacheComputeError,
    ConfigError,
    InvalidInputError,
    SharpeWatchError,
    UpstreamUnavailableError,
)
from sharpe_watch.core.models import (
    AnnotatedPricePoint,
    AnnotatedSeriesResult,
    MultiPeriodReport,
    PricePoint,
    SharpeMetrics,
    SharpeReportResult,
    SortOrder,
    SourceProvider,
    StockDataResult,
    Ticker,
)
from sharpe_watch.core.validators import (
    is_valid_ticker,
    parse_ticker_input,
    validate_lookback,
    validate_ticker_input,
    validate_tickers,
)

__all__ = [
    # Type aliases
    "Ticker",
    # Enums
    "SortOrder",
    "SourceProvider",
    # Price models
    "PricePoint",
    "AnnotatedPricePoint",
    # Analytics models
    "SharpeMetrics",
    "MultiPeriodReport",
    # Service results
    "StockDataResult",
    "SharpeReportResult",
    "AnnotatedSeriesResult",
    # Validation
    "is_valid_ticker",
    "parse_ticker_input",
    "validate_tickers",
    "validate_ticker_input",
    "validate_lookback",
    # Config
    "SharpeWatchConfig",
    "SourceConfig",
    "CacheConfig",
    "AnalyticsConfig",
    "WatchlistConfig",
    "APIConfig",
    "load_config",
    # Exceptions
    "SharpeWatchError",
    "ConfigError",
    "InvalidInputError",
    "UpstreamUnavailableError",
    "CacheComputeError",
]

"""Trading-day conventions and boundary limits."""

import re

# Trading days per period
TRADING_DAYS_WEEK = 5
TRADING_DAYS_MONTH = 21
TRADING_DAYS_QUARTER = 63
TRADING_DAYS_SEMESTER = 125
TRADING_DAYS_YEAR = 250

# Lookback bounds (trading days)
LOOKBACK_MIN = 1
LOOKBACK_MAX = 1000
DEFAULT_LOOKBACK = 250

# Ticker validation
MAX_TICKERS_PER_REQUEST = 10
TICKER_PATTERN = re.compile(r"^[A-Z]{1,5}$")

# Default history window fetched from the price source
HISTORICAL_DATA_YEARS = 3

# Cache revalidation (seconds)
DEFAULT_REVALIDATE_SECONDS = 3600

# Tickers warmed by the scheduled precompute job
POPULAR_TICKERS = (
    "AAPL",
    "GOOGL",
    "MSFT",
    "AMZN",
    "TSLA",
    "NVDA",
    "META",
    "SPY",
    "QQQ",
    "VOO",
)

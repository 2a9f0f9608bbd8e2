"""Source-agnostic daily price ingestion.

Architecture
------------
    DataSource → PriceAdapter → list[PricePoint] → PriceSource → StockDataService

Key abstractions:

- ``PricePoint``: Canonical OHLCV bar (defined in ``sharpe_watch.core``).
- ``PriceAdapter``: Turns a raw payload into ``PricePoint`` records.
- ``PriceSource``: Async per-ticker history; empty list on failure.

Built-in implementations:

- ``YahooFinancePriceSource`` / ``YahooFinanceAdapter``: chart API over httpx.
- ``CSVPriceSource`` / ``CSVPriceAdapter``: ``<TICKER>.csv`` files on disk.
"""

from sharpe_watch.core.config import SourceConfig
from sharpe_watch.core.models import PricePoint, SourceProvider
from sharpe_watch.prices.csv_adapter import CSVPriceAdapter, CSVPriceSource, load_csv_prices
from sharpe_watch.prices.provider import PriceAdapter, PriceSource, history_window
from sharpe_watch.prices.transform import (
    ensure_chronological,
    filter_valid_prices,
    is_chronological,
    is_valid_price,
    sort_chronological,
    sort_reverse_chronological,
    sort_series,
)
from sharpe_watch.prices.yahoo import YahooFinanceAdapter, YahooFinancePriceSource


def create_source(config: SourceConfig) -> PriceSource:
    """Instantiate the configured price source."""
    if config.provider == SourceProvider.CSV:
        return CSVPriceSource(config.csv_dir)
    return YahooFinancePriceSource.from_config(config)


__all__ = [
    "PricePoint",
    # Protocols
    "PriceAdapter",
    "PriceSource",
    "create_source",
    "history_window",
    # Yahoo Finance
    "YahooFinanceAdapter",
    "YahooFinancePriceSource",
    # CSV
    "CSVPriceAdapter",
    "CSVPriceSource",
    "load_csv_prices",
    # Transforms
    "ensure_chronological",
    "filter_valid_prices",
    "is_chronological",
    "is_valid_price",
    "sort_chronological",
    "sort_reverse_chronological",
    "sort_series",
]

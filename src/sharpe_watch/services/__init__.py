"""Service layer: cached price fan-out and Sharpe reporting."""

from sharpe_watch.services.stock_data import (
    DEFAULT_REFRESH_TAGS,
    SHARPE_TAG,
    STOCK_DATA_TAG,
    StockDataService,
    create_service,
    ticker_tag,
)

__all__ = [
    "DEFAULT_REFRESH_TAGS",
    "SHARPE_TAG",
    "STOCK_DATA_TAG",
    "StockDataService",
    "create_service",
    "ticker_tag",
]

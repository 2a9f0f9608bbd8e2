"""API-specific request/response schemas (Pydantic v2).

Payloads use camelCase on the wire; fields are populated by their Python
names internally.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every wire schema."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# -- Requests --


class TickersRequest(CamelModel):
    """Request body for POST /api/stock and /api/sharpe."""

    tickers: list[str] = Field(description="1-10 symbols matching ^[A-Z]{1,5}$")


class HistoryRequest(TickersRequest):
    """Request body for POST /api/history."""

    lookback: StrictInt | None = Field(
        default=None, description="Trading days, 1-1000. Config default if omitted."
    )


# -- Prices --


class PricePointResponse(CamelModel):
    date: date
    open: float
    high: float
    low: float
    close: float
    volume: float


class StockDataResponse(CamelModel):
    """Price history for one ticker, newest first."""

    ticker: str
    historical_data: list[PricePointResponse] = []
    days_count: int = 0
    error: str | None = None


class StockListResponse(CamelModel):
    results: list[StockDataResponse]


# -- Sharpe --


class MetricsResponse(CamelModel):
    sharpe_ratio: float
    trailing_return: float
    std_dev: float


class SharpeReportResponse(CamelModel):
    """Six-period Sharpe report. A null slot means too little history."""

    ticker: str
    yesterday: MetricsResponse | None = None
    last_week: MetricsResponse | None = None
    last_month: MetricsResponse | None = None
    last_quarter: MetricsResponse | None = None
    last_semester: MetricsResponse | None = None
    last_year: MetricsResponse | None = None
    error: str | None = None


class SharpeListResponse(CamelModel):
    results: list[SharpeReportResponse]


# -- History --


class AnnotatedPointResponse(PricePointResponse):
    trailing_return: float | None = None
    std_dev: float | None = None
    sharpe_ratio: float | None = None


class AnnotatedSeriesResponse(CamelModel):
    """Chronological history with a rolling Sharpe signal per point."""

    ticker: str
    lookback: int
    historical_data: list[AnnotatedPointResponse] = []
    days_count: int = 0
    error: str | None = None


class HistoryListResponse(CamelModel):
    results: list[AnnotatedSeriesResponse]


# -- Cron --


class CalculateSharpeResponse(CamelModel):
    """Response for POST /api/cron/calculate-sharpe."""

    success: bool = True
    calculated: list[str]
    errors: dict[str, str] = {}
    timestamp: datetime


class RefreshCacheResponse(CamelModel):
    """Response for POST /api/cron/refresh-cache."""

    success: bool = True
    revalidated: list[str]
    timestamp: datetime


# -- Health --


class HealthResponse(CamelModel):
    """Response for GET /api/health."""

    status: str = "ok"
    version: str
    cache_entries: int
    source: str

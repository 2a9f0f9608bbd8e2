"""Pydantic data models: the system's type contracts."""

from __future__ import annotations

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

# --- Type Aliases ---

Ticker = str

# --- Enumerations ---


class SortOrder(StrEnum):
    """Ordering of a price series by date."""

    CHRONOLOGICAL = "chronological"
    REVERSE_CHRONOLOGICAL = "reverse_chronological"


class SourceProvider(StrEnum):
    """Supported upstream price sources."""

    YAHOO = "yahoo"
    CSV = "csv"


# --- Price Models ---


class PricePoint(BaseModel):
    """One trading session of OHLCV data.

    No validation happens at construction: upstream sources occasionally
    deliver zero or NaN prices, and those bars are filtered out by
    ``filter_valid_prices`` rather than rejected here.
    """

    model_config = ConfigDict(frozen=True)

    date: date
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


class AnnotatedPricePoint(PricePoint):
    """A PricePoint carrying the point-in-time Sharpe metrics.

    The metric fields stay ``None`` until the series has enough trailing
    history at this point for the requested lookback.
    """

    trailing_return: float | None = None
    std_dev: float | None = None
    sharpe_ratio: float | None = None

    @property
    def is_annotated(self) -> bool:
        return self.sharpe_ratio is not None


# --- Analytics Models ---


class SharpeMetrics(BaseModel):
    """Return, volatility and simplified Sharpe ratio for one lookback."""

    model_config = ConfigDict(frozen=True)

    sharpe_ratio: float
    trailing_return: float
    std_dev: float
    period_days: int

    @field_validator("period_days")
    @classmethod
    def period_days_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"period_days must be >= 1, got {v}")
        return v


class MultiPeriodReport(BaseModel):
    """Sharpe metrics for the six standard lookbacks of one ticker.

    A slot is ``None`` when the series is too short for that lookback.
    """

    model_config = ConfigDict(frozen=True)

    ticker: Ticker
    yesterday: SharpeMetrics | None = None
    last_week: SharpeMetrics | None = None
    last_month: SharpeMetrics | None = None
    last_quarter: SharpeMetrics | None = None
    last_semester: SharpeMetrics | None = None
    last_year: SharpeMetrics | None = None

    def periods(self) -> dict[str, SharpeMetrics | None]:
        """Slot name -> metrics, in ascending lookback order."""
        return {
            "yesterday": self.yesterday,
            "last_week": self.last_week,
            "last_month": self.last_month,
            "last_quarter": self.last_quarter,
            "last_semester": self.last_semester,
            "last_year": self.last_year,
        }


# --- Service Results ---


class StockDataResult(BaseModel):
    """Validated price history for one ticker, or the reason it is missing."""

    model_config = ConfigDict(frozen=True)

    ticker: Ticker
    historical_data: list[PricePoint] = []
    days_count: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.historical_data)


class SharpeReportResult(MultiPeriodReport):
    """A MultiPeriodReport with a per-ticker error field."""

    error: str | None = None

    @classmethod
    def from_error(cls, ticker: Ticker, error: str) -> SharpeReportResult:
        return cls(ticker=ticker, error=error)


class AnnotatedSeriesResult(BaseModel):
    """Full price history annotated with a rolling Sharpe signal."""

    model_config = ConfigDict(frozen=True)

    ticker: Ticker
    lookback: int
    historical_data: list[AnnotatedPricePoint] = []
    days_count: int = 0
    error: str | None = None

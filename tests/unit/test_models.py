"""Tests for sharpe_watch.core.models."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from sharpe_watch.core.models import (
    AnnotatedPricePoint,
    MultiPeriodReport,
    PricePoint,
    SharpeMetrics,
    SharpeReportResult,
    SortOrder,
    StockDataResult,
)


def _metrics(days: int = 5) -> SharpeMetrics:
    return SharpeMetrics(sharpe_ratio=1.2, trailing_return=3.0, std_dev=2.5, period_days=days)


class TestPricePoint:
    def test_construction_does_not_validate_prices(self):
        point = PricePoint(date=date(2024, 1, 2), open=0.0, high=0.0, low=0.0, close=-1.0)
        assert point.close == -1.0
        assert point.volume == 0.0

    def test_frozen(self):
        point = PricePoint(date=date(2024, 1, 2), open=1, high=1, low=1, close=1)
        with pytest.raises(ValidationError):
            point.close = 2.0


class TestAnnotatedPricePoint:
    def test_unannotated_by_default(self):
        point = AnnotatedPricePoint(date=date(2024, 1, 2), open=1, high=1, low=1, close=1)
        assert not point.is_annotated

    def test_is_a_price_point(self):
        point = AnnotatedPricePoint(
            date=date(2024, 1, 2), open=1, high=1, low=1, close=1, sharpe_ratio=0.0
        )
        assert isinstance(point, PricePoint)
        assert point.is_annotated


class TestSharpeMetrics:
    def test_period_days_positive(self):
        with pytest.raises(ValidationError, match="period_days"):
            _metrics(days=0)


class TestMultiPeriodReport:
    def test_periods_order(self):
        report = MultiPeriodReport(ticker="AAPL", last_week=_metrics())
        assert list(report.periods()) == [
            "yesterday",
            "last_week",
            "last_month",
            "last_quarter",
            "last_semester",
            "last_year",
        ]
        assert report.periods()["last_week"] == _metrics()
        assert report.periods()["last_year"] is None


class TestResults:
    def test_stock_result_ok(self):
        point = PricePoint(date=date(2024, 1, 2), open=1, high=1, low=1, close=1)
        assert StockDataResult(ticker="AAPL", historical_data=[point], days_count=1).ok
        assert not StockDataResult(ticker="AAPL", error="No data available for AAPL").ok

    def test_sharpe_report_from_error(self):
        result = SharpeReportResult.from_error("BAD", "No data available for BAD")
        assert result.error == "No data available for BAD"
        assert all(m is None for m in result.periods().values())

    def test_sort_order_values(self):
        assert SortOrder("chronological") is SortOrder.CHRONOLOGICAL
        assert SortOrder.REVERSE_CHRONOLOGICAL == "reverse_chronological"

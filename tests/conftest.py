"""Shared pytest fixtures for sharpe-watch."""

from __future__ import annotations

import asyncio
from datetime import date, timedelta

import pytest

from sharpe_watch.core.models import PricePoint


def build_series(closes, start: date = date(2024, 1, 2), volume: float = 1_000_000.0):
    """PricePoints on consecutive weekdays, oldest first."""
    points = []
    day = start
    for close in closes:
        while day.weekday() >= 5:
            day += timedelta(days=1)
        points.append(
            PricePoint(
                date=day,
                open=close,
                high=close * 1.01,
                low=close * 0.99,
                close=close,
                volume=volume,
            )
        )
        day += timedelta(days=1)
    return points


class FakePriceSource:
    """In-memory PriceSource that records every call."""

    name = "fake"

    def __init__(self, histories=None, delay: float = 0.0, failures=None):
        self.histories = histories or {}
        self.delay = delay
        self.failures = failures or {}
        self.calls: list[str] = []

    async def get_history(self, ticker, start=None, end=None):
        self.calls.append(ticker)
        if self.delay:
            await asyncio.sleep(self.delay)
        if ticker in self.failures:
            raise self.failures[ticker]
        return list(self.histories.get(ticker, []))


@pytest.fixture
def make_series():
    return build_series


@pytest.fixture
def growth_closes() -> list[float]:
    """500 closes growing 1% per trading day from 100."""
    return [100.0 * 1.01**i for i in range(500)]


@pytest.fixture
def aapl_series(make_series):
    closes = [150.0 + 0.5 * i + (3.0 if i % 3 == 0 else -1.0) for i in range(300)]
    return make_series(closes)


@pytest.fixture
def fake_source(aapl_series) -> FakePriceSource:
    return FakePriceSource(histories={"AAPL": aapl_series})


@pytest.fixture
def fake_source_cls():
    return FakePriceSource

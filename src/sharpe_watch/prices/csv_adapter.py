"""CSV price adapter and directory-backed price source.

``CSVPriceSource`` serves ``<TICKER>.csv`` files from a directory, which
makes the whole pipeline usable offline and in tests.
"""

from __future__ import annotations

import asyncio
import csv
import logging
import math
from datetime import date, datetime
from pathlib import Path
from typing import Any

from sharpe_watch.core.models import PricePoint

logger = logging.getLogger(__name__)

# Common column name mappings for auto-detection
_DATE_ALIASES = {"date", "Date", "DATE", "timestamp", "Timestamp"}
_OPEN_ALIASES = {"open", "Open", "OPEN"}
_HIGH_ALIASES = {"high", "High", "HIGH"}
_LOW_ALIASES = {"low", "Low", "LOW"}
_CLOSE_ALIASES = {"close", "Close", "CLOSE"}
_VOLUME_ALIASES = {"volume", "Volume", "VOLUME", "vol", "Vol"}


def _find_column(headers: list[str], aliases: set[str]) -> str | None:
    """Find the first header that matches any alias."""
    for h in headers:
        if h in aliases:
            return h
    return None


def _to_float(raw: str | None) -> float:
    """Parse a numeric cell; unparseable cells become NaN and are filtered later."""
    if raw is None or raw == "":
        return math.nan
    try:
        return float(raw)
    except ValueError:
        return math.nan


class CSVPriceAdapter:
    """Transforms CSV rows into PricePoint records.

    Column names are auto-detected from common conventions unless given.
    Missing open/high/low default to close; a missing volume defaults to 0.

    Parameters
    ----------
    date_col, open_col, high_col, low_col, close_col, volume_col : str | None
        Explicit column names. Auto-detected if None.
    date_format : str
        strptime format used when a date is not ISO-8601.
    """

    def __init__(
        self,
        date_col: str | None = None,
        open_col: str | None = None,
        high_col: str | None = None,
        low_col: str | None = None,
        close_col: str | None = None,
        volume_col: str | None = None,
        date_format: str = "%Y-%m-%d",
    ) -> None:
        self._date_col = date_col
        self._open_col = open_col
        self._high_col = high_col
        self._low_col = low_col
        self._close_col = close_col
        self._volume_col = volume_col
        self._date_format = date_format

    def _resolve_columns(self, headers: list[str]) -> dict[str, str | None]:
        return {
            "date": self._date_col or _find_column(headers, _DATE_ALIASES),
            "open": self._open_col or _find_column(headers, _OPEN_ALIASES),
            "high": self._high_col or _find_column(headers, _HIGH_ALIASES),
            "low": self._low_col or _find_column(headers, _LOW_ALIASES),
            "close": self._close_col or _find_column(headers, _CLOSE_ALIASES),
            "volume": self._volume_col or _find_column(headers, _VOLUME_ALIASES),
        }

    def _parse_date(self, raw: str) -> date | None:
        try:
            return date.fromisoformat(raw)
        except ValueError:
            pass
        try:
            return datetime.strptime(raw, self._date_format).date()
        except ValueError:
            return None

    def adapt(self, raw_data: Any) -> list[PricePoint]:
        """Parse rows from csv.DictReader into PricePoints sorted by date.

        Raises
        ------
        ValueError
            If no date or close column can be found.
        """
        if not raw_data:
            return []

        headers = list(raw_data[0].keys())
        cols = self._resolve_columns(headers)

        if cols["date"] is None:
            raise ValueError(f"Cannot find date column in headers: {headers}")
        if cols["close"] is None:
            raise ValueError(f"Cannot find close column in headers: {headers}")

        points: list[PricePoint] = []
        for row in raw_data:
            session = self._parse_date(row.get(cols["date"]) or "")
            if session is None:
                logger.warning("Skipping row with unparseable date: %s", row.get(cols["date"]))
                continue

            close_val = _to_float(row.get(cols["close"]))

            def value(col: str | None, default: float) -> float:
                if col is None or not row.get(col):
                    return default
                return _to_float(row[col])

            points.append(
                PricePoint(
                    date=session,
                    open=value(cols["open"], close_val),
                    high=value(cols["high"], close_val),
                    low=value(cols["low"], close_val),
                    close=close_val,
                    volume=value(cols["volume"], 0.0),
                )
            )

        return sorted(points, key=lambda p: p.date)


def load_csv_prices(filepath: str | Path, **adapter_kwargs: Any) -> list[PricePoint]:
    """Load price points from a CSV file.

    Raises
    ------
    FileNotFoundError
        If ``filepath`` does not exist.
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {filepath}")

    with open(path, newline="") as f:
        rows = list(csv.DictReader(f))

    return CSVPriceAdapter(**adapter_kwargs).adapt(rows)


class CSVPriceSource:
    """PriceSource reading ``<TICKER>.csv`` files from a directory.

    Missing or malformed files yield an empty history, matching the
    failure contract of network sources.
    """

    name = "csv"

    def __init__(self, directory: str | Path, **adapter_kwargs: Any) -> None:
        self._directory = Path(directory)
        self._adapter_kwargs = adapter_kwargs

    async def get_history(
        self,
        ticker: str,
        start: date | None = None,
        end: date | None = None,
    ) -> list[PricePoint]:
        path = self._directory / f"{ticker}.csv"
        try:
            points = await asyncio.to_thread(load_csv_prices, path, **self._adapter_kwargs)
        except (FileNotFoundError, ValueError) as e:
            logger.warning("No CSV prices for %s: %s", ticker, e)
            return []

        if start is not None:
            points = [p for p in points if p.date >= start]
        if end is not None:
            points = [p for p in points if p.date <= end]
        return points

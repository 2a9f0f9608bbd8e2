"""Price source and adapter protocols: the upstream interface layer.

Architecture
------------
    RawSource → PriceAdapter → list[PricePoint] → PriceSource → StockDataService

- **PriceSource** is what the service depends on. It returns daily bars for
  one ticker and reports failure as an empty list, never an exception.
- **PriceAdapter** turns a raw payload (chart JSON, CSV rows) into
  ``PricePoint`` records. Adding a source means writing one adapter.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Protocol, runtime_checkable

from sharpe_watch.core.models import PricePoint


@runtime_checkable
class PriceAdapter(Protocol):
    """Transforms raw data from any source into PricePoint records.

    Returns
    -------
    list[PricePoint]
        Sorted by date ascending.
    """

    def adapt(self, raw_data: Any) -> list[PricePoint]: ...


@runtime_checkable
class PriceSource(Protocol):
    """Consumer-facing interface for fetching daily price history."""

    name: str

    async def get_history(
        self,
        ticker: str,
        start: date | None = None,
        end: date | None = None,
    ) -> list[PricePoint]:
        """Fetch daily bars for ``ticker`` between ``start`` and ``end``.

        Defaults to the source's configured history window ending today.

        Returns
        -------
        list[PricePoint]
            Bars sorted by date ascending, or an empty list if the upstream
            call failed or had no data.
        """
        ...


def history_window(
    years: int,
    start: date | None = None,
    end: date | None = None,
) -> tuple[date, date]:
    """Resolve an optional date range to ``years`` ending at ``end`` (default today)."""
    end = end or date.today()
    if start is None:
        try:
            start = end.replace(year=end.year - years)
        except ValueError:
            # Feb 29 in a non-leap target year
            start = end.replace(year=end.year - years, day=28)
    return start, end

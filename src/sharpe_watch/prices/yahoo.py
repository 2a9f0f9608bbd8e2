"""Yahoo Finance price source: direct HTTP implementation.

Uses the unauthenticated ``/v8/finance/chart/`` endpoint via httpx. Requests
are throttled with an aiolimiter token bucket so a wide ``fetch_many``
fan-out does not trip Yahoo's rate limiting.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any

import httpx
from aiolimiter import AsyncLimiter

from sharpe_watch.core.config import SourceConfig
from sharpe_watch.core.constants import HISTORICAL_DATA_YEARS
from sharpe_watch.core.models import PricePoint
from sharpe_watch.prices.provider import history_window

logger = logging.getLogger(__name__)

_BASE_URL = "https://query2.finance.yahoo.com"
_CHART_PATH = "/v8/finance/chart"
_USER_AGENT = "Mozilla/5.0 (compatible; sharpe-watch/0.1)"

_RETRY_STATUSES = {429, 500, 502, 503}


class YahooFinanceAdapter:
    """Transforms raw Yahoo Finance chart JSON into PricePoint records.

    Understands the ``chart.result[0]`` object of a ``/v8/finance/chart/``
    response. Bars with a null open/high/low/close (holidays, halted
    sessions) are skipped; a null volume becomes 0.
    """

    def adapt(self, raw_data: Any) -> list[PricePoint]:
        timestamps: list[int] = raw_data.get("timestamp") or []
        if not timestamps:
            return []

        quotes = (raw_data.get("indicators", {}).get("quote") or [{}])[0]
        offset = int(raw_data.get("meta", {}).get("gmtoffset") or 0)

        opens: list[float | None] = quotes.get("open") or []
        highs: list[float | None] = quotes.get("high") or []
        lows: list[float | None] = quotes.get("low") or []
        closes: list[float | None] = quotes.get("close") or []
        volumes: list[int | None] = quotes.get("volume") or []

        points: list[PricePoint] = []
        for i, ts in enumerate(timestamps):
            o = opens[i] if i < len(opens) else None
            h = highs[i] if i < len(highs) else None
            lo = lows[i] if i < len(lows) else None
            c = closes[i] if i < len(closes) else None
            v = volumes[i] if i < len(volumes) else None

            if any(x is None for x in (o, h, lo, c)):
                continue

            # Exchange-local session date
            session = datetime.fromtimestamp(ts, tz=timezone.utc) + timedelta(seconds=offset)
            points.append(
                PricePoint(
                    date=session.date(),
                    open=float(o),
                    high=float(h),
                    low=float(lo),
                    close=float(c),
                    volume=float(v) if v is not None else 0.0,
                )
            )

        return sorted(points, key=lambda p: p.date)


class YahooFinancePriceSource:
    """Fetches daily history from Yahoo Finance's chart API.

    Parameters
    ----------
    rate_limit : int
        Maximum requests per second across all tickers.
    timeout : float
        HTTP request timeout in seconds.
    history_years : int
        Default history window when no start date is given.
    max_retries : int
        Retries for 429/5xx responses and connection errors.
    retry_delay : float
        Base delay for exponential backoff between retries.
    base_url : str
        Override base URL (useful for testing).
    adapter : YahooFinanceAdapter | None
        Custom adapter instance. Uses default if None.
    """

    name = "yahoo_finance"

    def __init__(
        self,
        rate_limit: int = 5,
        timeout: float = 15.0,
        history_years: int = HISTORICAL_DATA_YEARS,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        base_url: str = _BASE_URL,
        adapter: YahooFinanceAdapter | None = None,
    ) -> None:
        self._limiter = AsyncLimiter(max_rate=rate_limit, time_period=1.0)
        self._timeout = timeout
        self._history_years = history_years
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._base_url = base_url
        self._adapter = adapter or YahooFinanceAdapter()

    @classmethod
    def from_config(cls, config: SourceConfig) -> YahooFinancePriceSource:
        return cls(
            rate_limit=config.rate_limit,
            timeout=config.request_timeout,
            history_years=config.history_years,
            max_retries=config.max_retries,
        )

    async def get_history(
        self,
        ticker: str,
        start: date | None = None,
        end: date | None = None,
    ) -> list[PricePoint]:
        start, end = history_window(self._history_years, start, end)
        raw = await self._fetch_chart(ticker, start, end)
        if raw is None:
            return []

        points = self._adapter.adapt(raw)
        # The API may pad the range; keep the requested window only
        return [p for p in points if start <= p.date <= end]

    async def _fetch_chart(self, ticker: str, start: date, end: date) -> dict | None:
        """Fetch the ``chart.result[0]`` object for one ticker, or None on error."""
        period1 = int(datetime.combine(start, datetime.min.time(), timezone.utc).timestamp())
        period2 = int(
            datetime.combine(end + timedelta(days=1), datetime.min.time(), timezone.utc).timestamp()
        )

        url = f"{self._base_url}{_CHART_PATH}/{ticker}"
        params = {
            "interval": "1d",
            "period1": str(period1),
            "period2": str(period2),
            "events": "div,split",
        }

        data = await self._request_with_retry(ticker, url, params)
        if data is None:
            return None

        chart = data.get("chart", {})
        if chart.get("error"):
            err = chart["error"]
            logger.error(
                "Yahoo Finance API error for %s: %s: %s",
                ticker,
                err.get("code"),
                err.get("description"),
            )
            return None

        results = chart.get("result")
        if not results:
            logger.warning("Yahoo Finance returned no results for %s", ticker)
            return None

        return results[0]

    async def _request_with_retry(
        self,
        ticker: str,
        url: str,
        params: dict[str, str],
    ) -> dict | None:
        """GET ``url`` with rate limiting; retries 429/5xx and connection errors.

        Returns the decoded JSON body, or None once retries are exhausted or
        a non-retryable error occurs.
        """
        async with httpx.AsyncClient(
            timeout=self._timeout,
            headers={"User-Agent": _USER_AGENT},
        ) as client:
            for attempt in range(self._max_retries + 1):
                await self._limiter.acquire()
                try:
                    resp = await client.get(url, params=params)
                except httpx.RequestError as e:
                    if attempt < self._max_retries:
                        logger.warning(
                            "Yahoo Finance request error for %s: %s (attempt %d/%d)",
                            ticker, e, attempt + 1, self._max_retries,
                        )
                        await asyncio.sleep(self._retry_delay * 2**attempt)
                        continue
                    logger.error("Yahoo Finance request error for %s: %s", ticker, e)
                    return None

                if resp.status_code in _RETRY_STATUSES and attempt < self._max_retries:
                    logger.warning(
                        "Yahoo Finance HTTP %d for %s, retrying (attempt %d/%d)",
                        resp.status_code, ticker, attempt + 1, self._max_retries,
                    )
                    await asyncio.sleep(self._retry_delay * 2**attempt)
                    continue

                if resp.status_code != 200:
                    logger.error(
                        "Yahoo Finance HTTP error for %s: %s %s",
                        ticker,
                        resp.status_code,
                        resp.text[:200],
                    )
                    return None

                try:
                    return resp.json()
                except ValueError as e:
                    logger.error("Yahoo Finance returned invalid JSON for %s: %s", ticker, e)
                    return None

        return None

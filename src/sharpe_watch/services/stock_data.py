"""Price fan-out, validation and Sharpe reporting over a shared cache.

Every ticker is fetched independently: one failing symbol becomes an
``error`` string on its own result and never affects its neighbours.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence

from sharpe_watch.analytics.sharpe import enhance_with_metrics, extract_prices, multi_period_sharpe
from sharpe_watch.cache.base import CacheInterface, CacheOptions, NullCache
from sharpe_watch.cache.memory import InMemoryCache
from sharpe_watch.core.config import SharpeWatchConfig
from sharpe_watch.core.constants import DEFAULT_REVALIDATE_SECONDS, POPULAR_TICKERS
from sharpe_watch.core.exceptions import SharpeWatchError, UpstreamUnavailableError
from sharpe_watch.core.models import (
    AnnotatedSeriesResult,
    MultiPeriodReport,
    PricePoint,
    SharpeReportResult,
    SortOrder,
    StockDataResult,
    Ticker,
)
from sharpe_watch.core.validators import validate_lookback
from sharpe_watch.prices import PriceSource, create_source
from sharpe_watch.prices.transform import ensure_chronological, filter_valid_prices, sort_series

logger = logging.getLogger(__name__)

STOCK_DATA_TAG = "stock-data"
SHARPE_TAG = "sharpe"
DEFAULT_REFRESH_TAGS = (STOCK_DATA_TAG, SHARPE_TAG)


def ticker_tag(ticker: Ticker) -> str:
    """Tag shared by every cache entry derived from ``ticker``."""
    return f"stock-{ticker}"


def no_data_message(ticker: Ticker) -> str:
    return f"No data available for {ticker}"


class StockDataService:
    """Fetches, validates and analyzes daily price histories.

    Parameters
    ----------
    source : PriceSource
        Upstream daily history provider.
    cache : CacheInterface | None
        Default cache for all operations. ``NullCache`` if None.
    stock_revalidate : int | None
        Seconds a fetched series stays fresh.
    sharpe_revalidate : int | None
        Seconds a Sharpe report stays fresh.
    fetch_timeout : float | None
        Upper bound on one upstream call; None disables the bound.
    risk_free_rate : float
        Passed through to the Sharpe calculation.
    """

    def __init__(
        self,
        source: PriceSource,
        cache: CacheInterface | None = None,
        stock_revalidate: int | None = DEFAULT_REVALIDATE_SECONDS,
        sharpe_revalidate: int | None = DEFAULT_REVALIDATE_SECONDS,
        fetch_timeout: float | None = 30.0,
        risk_free_rate: float = 0.0,
    ) -> None:
        self.source = source
        self.cache: CacheInterface = cache if cache is not None else NullCache()
        self._stock_revalidate = stock_revalidate
        self._sharpe_revalidate = sharpe_revalidate
        self._fetch_timeout = fetch_timeout
        self._risk_free_rate = risk_free_rate

    # --- Raw price data ---

    def _cache_for(self, cache: CacheInterface | None) -> CacheInterface:
        return cache if cache is not None else self.cache

    async def fetch_one(
        self,
        ticker: Ticker,
        cache: CacheInterface | None = None,
        order: SortOrder = SortOrder.CHRONOLOGICAL,
    ) -> StockDataResult:
        """Validated history for one ticker. Never raises."""
        try:
            series = await self._cached_series(ticker, cache)
        except SharpeWatchError as e:
            logger.warning("Price fetch failed for %s: %s", ticker, e)
            return StockDataResult(ticker=ticker, error=no_data_message(ticker))

        return StockDataResult(
            ticker=ticker,
            historical_data=sort_series(series, order),
            days_count=len(series),
        )

    async def fetch_many(
        self,
        tickers: Sequence[Ticker],
        cache: CacheInterface | None = None,
        order: SortOrder = SortOrder.CHRONOLOGICAL,
    ) -> list[StockDataResult]:
        """Concurrent ``fetch_one`` for each ticker, results in input order."""
        outcomes = await asyncio.gather(
            *(self.fetch_one(t, cache=cache, order=order) for t in tickers),
            return_exceptions=True,
        )

        results: list[StockDataResult] = []
        for ticker, outcome in zip(tickers, outcomes):
            if isinstance(outcome, BaseException):
                message = str(outcome) or f"{type(outcome).__name__} while fetching {ticker}"
                logger.error("Unexpected failure fetching %s: %s", ticker, message)
                results.append(StockDataResult(ticker=ticker, error=message))
            else:
                results.append(outcome)
        return results

    async def _cached_series(
        self, ticker: Ticker, cache: CacheInterface | None
    ) -> list[PricePoint]:
        options = CacheOptions(
            key=(STOCK_DATA_TAG, ticker),
            tags=(STOCK_DATA_TAG, ticker_tag(ticker)),
            revalidate=self._stock_revalidate,
        )
        return await self._cache_for(cache).get_cached(
            lambda: self._load_series(ticker), options
        )

    async def _load_series(self, ticker: Ticker) -> list[PricePoint]:
        """Fetch and validate one series; raises so empty results are never cached."""
        try:
            raw = await asyncio.wait_for(self.source.get_history(ticker), self._fetch_timeout)
        except asyncio.TimeoutError as e:
            raise UpstreamUnavailableError(
                f"Timed out fetching {ticker} after {self._fetch_timeout}s",
                context={"ticker": ticker, "source": self.source.name},
            ) from e
        except Exception as e:
            raise UpstreamUnavailableError(
                f"Price source failed for {ticker}: {e}",
                context={"ticker": ticker, "source": self.source.name},
            ) from e

        series = ensure_chronological(filter_valid_prices(raw))
        if not series:
            raise UpstreamUnavailableError(
                no_data_message(ticker),
                context={"ticker": ticker, "source": self.source.name, "raw_count": len(raw)},
            )

        logger.info("Loaded %d valid bars for %s (%d raw)", len(series), ticker, len(raw))
        return series

    # --- Analytics ---

    async def sharpe_reports(
        self,
        tickers: Sequence[Ticker],
        cache: CacheInterface | None = None,
    ) -> list[SharpeReportResult]:
        """Six-period Sharpe report per ticker, results in input order."""
        stock = await self.fetch_many(tickers, cache=cache)
        return list(
            await asyncio.gather(*(self._report_for(result, cache) for result in stock))
        )

    async def _report_for(
        self, result: StockDataResult, cache: CacheInterface | None
    ) -> SharpeReportResult:
        if result.error is not None:
            return SharpeReportResult.from_error(result.ticker, result.error)

        prices = extract_prices(result.historical_data)

        async def compute() -> MultiPeriodReport:
            return multi_period_sharpe(prices, result.ticker, self._risk_free_rate)

        options = CacheOptions(
            key=(SHARPE_TAG, result.ticker),
            tags=(SHARPE_TAG, ticker_tag(result.ticker)),
            revalidate=self._sharpe_revalidate,
        )
        try:
            report = await self._cache_for(cache).get_cached(compute, options)
        except SharpeWatchError as e:
            logger.warning("Sharpe calculation failed for %s: %s", result.ticker, e)
            return SharpeReportResult.from_error(result.ticker, str(e))

        return SharpeReportResult(**report.model_dump())

    async def annotated_history(
        self,
        tickers: Sequence[Ticker],
        lookback: int,
        cache: CacheInterface | None = None,
    ) -> list[AnnotatedSeriesResult]:
        """Chronological history with a rolling ``lookback`` Sharpe signal per point."""
        validate_lookback(lookback)
        stock = await self.fetch_many(tickers, cache=cache)

        results: list[AnnotatedSeriesResult] = []
        for result in stock:
            if result.error is not None:
                results.append(
                    AnnotatedSeriesResult(
                        ticker=result.ticker, lookback=lookback, error=result.error
                    )
                )
                continue

            annotated = enhance_with_metrics(
                result.historical_data, lookback, self._risk_free_rate
            )
            results.append(
                AnnotatedSeriesResult(
                    ticker=result.ticker,
                    lookback=lookback,
                    historical_data=annotated,
                    days_count=len(annotated),
                )
            )
        return results

    # --- Cache maintenance ---

    async def refresh(self, tags: Iterable[str] | None = None) -> list[str]:
        """Invalidate ``tags`` (stock data and Sharpe reports by default)."""
        invalidated = list(tags) if tags is not None else list(DEFAULT_REFRESH_TAGS)
        for tag in invalidated:
            await self.cache.invalidate(tag)
        logger.info("Refreshed cache tags: %s", ", ".join(invalidated))
        return invalidated

    async def precompute(
        self, tickers: Sequence[Ticker] = POPULAR_TICKERS
    ) -> tuple[list[Ticker], dict[Ticker, str]]:
        """Warm the cache with Sharpe reports.

        Returns
        -------
        tuple[list[Ticker], dict[Ticker, str]]
            Tickers that were calculated, and ticker -> error for the rest.
        """
        reports = await self.sharpe_reports(list(tickers))
        calculated = [r.ticker for r in reports if r.error is None]
        errors = {r.ticker: r.error for r in reports if r.error is not None}
        logger.info(
            "Precomputed Sharpe reports: %d calculated, %d failed",
            len(calculated),
            len(errors),
        )
        return calculated, errors


def create_service(config: SharpeWatchConfig, source: PriceSource | None = None) -> StockDataService:
    """Build a StockDataService wired from configuration."""
    cache: CacheInterface = InMemoryCache() if config.cache.enabled else NullCache()
    return StockDataService(
        source=source if source is not None else create_source(config.source),
        cache=cache,
        stock_revalidate=config.cache.stock_revalidate_seconds,
        sharpe_revalidate=config.cache.sharpe_revalidate_seconds,
        fetch_timeout=config.source.fetch_timeout,
        risk_free_rate=config.analytics.risk_free_rate,
    )

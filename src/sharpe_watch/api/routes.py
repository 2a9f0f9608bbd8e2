"""FastAPI route definitions for the sharpe-watch API."""

from __future__ import annotations

from collections.abc import Sized
from datetime import UTC as _UTC, datetime

from fastapi import APIRouter, Depends

import sharpe_watch
from sharpe_watch.api.deps import get_config, get_service, require_cron_secret
from sharpe_watch.api.schemas import (
    AnnotatedSeriesResponse,
    CalculateSharpeResponse,
    HealthResponse,
    HistoryListResponse,
    HistoryRequest,
    RefreshCacheResponse,
    SharpeListResponse,
    SharpeReportResponse,
    StockDataResponse,
    StockListResponse,
    TickersRequest,
)
from sharpe_watch.core.config import SharpeWatchConfig
from sharpe_watch.core.models import SortOrder
from sharpe_watch.core.validators import validate_lookback, validate_tickers
from sharpe_watch.services.stock_data import StockDataService

router = APIRouter()


# -- Health --


@router.get("/health", response_model=HealthResponse)
async def health_check(service: StockDataService = Depends(get_service)):
    """Liveness plus cache and source details."""
    cache = service.cache
    return HealthResponse(
        status="ok",
        version=sharpe_watch.__version__,
        cache_entries=len(cache) if isinstance(cache, Sized) else 0,
        source=service.source.name,
    )


# -- Prices --


@router.post("/stock", response_model=StockListResponse)
async def get_stock_data(
    body: TickersRequest,
    service: StockDataService = Depends(get_service),
):
    """Validated daily history per ticker, newest first."""
    tickers = validate_tickers(body.tickers)
    results = await service.fetch_many(tickers, order=SortOrder.REVERSE_CHRONOLOGICAL)
    return StockListResponse(
        results=[StockDataResponse.model_validate(r) for r in results]
    )


# -- Sharpe --


@router.post("/sharpe", response_model=SharpeListResponse)
async def get_sharpe_reports(
    body: TickersRequest,
    service: StockDataService = Depends(get_service),
):
    """Six-period Sharpe report per ticker."""
    tickers = validate_tickers(body.tickers)
    reports = await service.sharpe_reports(tickers)
    return SharpeListResponse(
        results=[SharpeReportResponse.model_validate(r) for r in reports]
    )


@router.post("/history", response_model=HistoryListResponse)
async def get_history(
    body: HistoryRequest,
    service: StockDataService = Depends(get_service),
    config: SharpeWatchConfig = Depends(get_config),
):
    """Price history annotated with a rolling Sharpe signal."""
    tickers = validate_tickers(body.tickers)
    lookback = validate_lookback(
        body.lookback if body.lookback is not None else config.analytics.default_lookback
    )
    results = await service.annotated_history(tickers, lookback)
    return HistoryListResponse(
        results=[AnnotatedSeriesResponse.model_validate(r) for r in results]
    )


# -- Cron --


@router.post(
    "/cron/calculate-sharpe",
    response_model=CalculateSharpeResponse,
    dependencies=[Depends(require_cron_secret)],
)
async def cron_calculate_sharpe(service: StockDataService = Depends(get_service)):
    """Warm the cache with Sharpe reports for the popular tickers."""
    calculated, errors = await service.precompute()
    return CalculateSharpeResponse(
        calculated=calculated,
        errors=errors,
        timestamp=datetime.now(_UTC),
    )


@router.post(
    "/cron/refresh-cache",
    response_model=RefreshCacheResponse,
    dependencies=[Depends(require_cron_secret)],
)
async def cron_refresh_cache(service: StockDataService = Depends(get_service)):
    """Invalidate cached prices and Sharpe reports."""
    tags = await service.refresh()
    return RefreshCacheResponse(revalidated=tags, timestamp=datetime.now(_UTC))

"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sharpe_watch.api.deps import AppState, api_key_middleware
from sharpe_watch.api.routes import router
from sharpe_watch.core.config import SharpeWatchConfig, load_config
from sharpe_watch.core.exceptions import ConfigError, InvalidInputError, SharpeWatchError
from sharpe_watch.services.stock_data import StockDataService, create_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    config = app.state._pending_config or load_config()
    service = app.state._pending_service or create_service(config)

    app.state.app_state = AppState(config=config, service=service)
    logger.info("sharpe-watch API started with %s source", service.source.name)

    yield


def create_app(
    config: SharpeWatchConfig | None = None,
    service: StockDataService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    import sharpe_watch

    app = FastAPI(
        title="sharpe-watch API",
        description="Rolling return, volatility and Sharpe ratio analytics",
        version=sharpe_watch.__version__,
        lifespan=lifespan,
    )

    # Stash config and service so lifespan can retrieve them
    app.state._pending_config = config
    app.state._pending_service = service

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Optional API key middleware
    if config and config.api.api_key:
        app.middleware("http")(api_key_middleware)

    app.include_router(router, prefix="/api")

    # Exception handlers
    @app.exception_handler(SharpeWatchError)
    async def sharpe_watch_exception_handler(request: Request, exc: SharpeWatchError):
        status_map = {
            InvalidInputError: 400,
            ConfigError: 400,
        }
        status = status_map.get(type(exc), 500)
        return JSONResponse(
            status_code=status,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    return app

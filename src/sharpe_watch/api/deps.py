"""Dependency injection for FastAPI routes."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from sharpe_watch.core.config import SharpeWatchConfig
from sharpe_watch.services.stock_data import StockDataService


@dataclass
class AppState:
    """Shared application state, attached to app.state during lifespan."""

    config: SharpeWatchConfig
    service: StockDataService


def get_app_state(request: Request) -> AppState:
    """Dependency: retrieve AppState from the request."""
    return request.app.state.app_state


def get_config(request: Request) -> SharpeWatchConfig:
    """Dependency: retrieve config."""
    return request.app.state.app_state.config


def get_service(request: Request) -> StockDataService:
    """Dependency: retrieve the stock data service."""
    return request.app.state.app_state.service


def require_cron_secret(request: Request) -> None:
    """Dependency: enforce ``Authorization: Bearer <cron_secret>``.

    Cron endpoints stay closed when no secret is configured.
    """
    secret = request.app.state.app_state.config.api.cron_secret
    if not secret or request.headers.get("Authorization") != f"Bearer {secret}":
        raise HTTPException(status_code=401, detail="Unauthorized")


EXEMPT_PATHS = {"/api/health"}


async def api_key_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Middleware: validate X-API-Key header when authentication is enabled."""
    if request.url.path in EXEMPT_PATHS:
        return await call_next(request)

    config = request.app.state.app_state.config
    if config.api.api_key:
        api_key = request.headers.get("X-API-Key")
        if api_key != config.api.api_key:
            return JSONResponse(
                status_code=401,
                content={"error": "Unauthorized", "detail": "Invalid or missing API key"},
            )
    return await call_next(request)

"""Configuration loading, validation, and access."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from sharpe_watch.core.constants import (
    DEFAULT_LOOKBACK,
    DEFAULT_REVALIDATE_SECONDS,
    HISTORICAL_DATA_YEARS,
    LOOKBACK_MAX,
    LOOKBACK_MIN,
)
from sharpe_watch.core.exceptions import ConfigError
from sharpe_watch.core.models import SourceProvider


class SourceConfig(BaseModel):
    """Upstream price source configuration."""

    model_config = ConfigDict(frozen=True)

    provider: SourceProvider = SourceProvider.YAHOO
    csv_dir: str | None = None
    rate_limit: int = 5
    request_timeout: float = 15.0
    fetch_timeout: float = 30.0
    history_years: int = HISTORICAL_DATA_YEARS
    max_retries: int = 2

    @field_validator("rate_limit")
    @classmethod
    def rate_limit_in_range(cls, v: int) -> int:
        if v < 1 or v > 20:
            raise ValueError("rate_limit must be between 1 and 20 requests/second")
        return v

    @field_validator("history_years")
    @classmethod
    def history_years_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("history_years must be >= 1")
        return v

    @field_validator("max_retries")
    @classmethod
    def max_retries_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("max_retries must be >= 0")
        return v

    @model_validator(mode="after")
    def csv_dir_required_for_csv(self) -> SourceConfig:
        if self.provider == SourceProvider.CSV and not self.csv_dir:
            raise ValueError("csv_dir is required when provider is 'csv'")
        return self


class CacheConfig(BaseModel):
    """Compute-or-fetch cache configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    stock_revalidate_seconds: int = DEFAULT_REVALIDATE_SECONDS
    sharpe_revalidate_seconds: int = DEFAULT_REVALIDATE_SECONDS

    @field_validator("stock_revalidate_seconds", "sharpe_revalidate_seconds")
    @classmethod
    def revalidate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("revalidate seconds must be >= 1")
        return v


class AnalyticsConfig(BaseModel):
    """Sharpe calculation defaults."""

    model_config = ConfigDict(frozen=True)

    risk_free_rate: float = 0.0
    default_lookback: int = DEFAULT_LOOKBACK

    @field_validator("default_lookback")
    @classmethod
    def lookback_in_bounds(cls, v: int) -> int:
        if v < LOOKBACK_MIN or v > LOOKBACK_MAX:
            raise ValueError(
                f"default_lookback must be between {LOOKBACK_MIN} and {LOOKBACK_MAX}"
            )
        return v


class WatchlistConfig(BaseModel):
    """Where the persisted watch-list lives."""

    model_config = ConfigDict(frozen=True)

    path: str = "./data/watchlist.json"


class APIConfig(BaseModel):
    """FastAPI server configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 8000
    api_key: str | None = None
    cron_secret: str | None = None


class SharpeWatchConfig(BaseModel):
    """Root configuration for the entire sharpe-watch system."""

    model_config = ConfigDict(frozen=True)

    source: SourceConfig = SourceConfig()
    cache: CacheConfig = CacheConfig()
    analytics: AnalyticsConfig = AnalyticsConfig()
    watchlist: WatchlistConfig = WatchlistConfig()
    api: APIConfig = APIConfig()


ENV_PREFIX = "SHARPE_WATCH_"
CONFIG_PATH_VAR = f"{ENV_PREFIX}CONFIG"
DEFAULT_CONFIG_FILE = "sharpe-watch.yml"

_SECRET_FIELDS = ("api_key", "cron_secret")


def load_config(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> SharpeWatchConfig:
    """Build the configuration from defaults, a YAML file and the environment.

    Each layer overrides the one before it:

    1. Built-in defaults of the config models
    2. The YAML file (``config_path``, else ``$SHARPE_WATCH_CONFIG``, else
       ``./sharpe-watch.yml`` when present)
    3. ``SHARPE_WATCH_<SECTION>__<FIELD>`` environment variables

    Environment values stay strings; pydantic parses them against the field
    type, so ``SHARPE_WATCH_CACHE__ENABLED=false`` gives ``cache.enabled is
    False`` while a numeric ``SHARPE_WATCH_API__CRON_SECRET`` stays a string.
    """
    environ = os.environ if environ is None else environ

    path = find_config_file(config_path, environ)
    from_file = read_config_file(path) if path is not None else {}
    settings = _deep_merge(from_file, env_overrides(environ))

    try:
        return SharpeWatchConfig.model_validate(settings)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        value = "***" if field.endswith(_SECRET_FIELDS) else first.get("input")
        raise ConfigError(
            f"Invalid configuration: {e}",
            context={"field": field, "value": value, "source": str(path) if path else None},
        ) from e


def find_config_file(
    explicit: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    """Locate the YAML file to read, or ``None`` to run on defaults.

    A path that was asked for explicitly (argument or env var) must exist;
    the conventional ``./sharpe-watch.yml`` is optional.
    """
    environ = os.environ if environ is None else environ

    if explicit is not None:
        return _must_exist(Path(explicit), origin="config_path")
    if environ.get(CONFIG_PATH_VAR):
        return _must_exist(Path(environ[CONFIG_PATH_VAR]), origin=CONFIG_PATH_VAR)

    conventional = Path(DEFAULT_CONFIG_FILE)
    return conventional if conventional.is_file() else None


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse a YAML config file into a plain dict. An empty file is ``{}``."""
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML config {path}: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Cannot read config file {path}: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"YAML config must be a mapping, got {type(data).__name__}",
            context={"field": "config_file", "value": str(path)},
        )
    return data


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Nested settings from ``SHARPE_WATCH_*`` variables.

    ``SHARPE_WATCH_SOURCE__RATE_LIMIT=3`` becomes
    ``{"source": {"rate_limit": "3"}}``. The config-path variable is not a
    setting and is skipped.
    """
    overrides: dict[str, Any] = {}
    for name, raw in environ.items():
        if not name.startswith(ENV_PREFIX) or name == CONFIG_PATH_VAR:
            continue
        path = [part.lower() for part in name[len(ENV_PREFIX) :].split("__")]
        if not all(path):
            continue

        node = overrides
        for part in path[:-1]:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                break
        else:
            node[path[-1]] = raw
    return overrides


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """New dict with ``overrides`` laid over ``base``; neither input changes."""
    merged = dict(base)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _must_exist(path: Path, origin: str) -> Path:
    if not path.is_file():
        raise ConfigError(
            f"Config file not found: {path} (from {origin})",
            context={"field": origin, "value": str(path)},
        )
    return path

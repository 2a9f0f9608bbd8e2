"""Tests for sharpe_watch.core.config."""

import os

import pytest
from pydantic import ValidationError

from sharpe_watch.core.config import (
    AnalyticsConfig,
    CacheConfig,
    SharpeWatchConfig,
    SourceConfig,
    _deep_merge,
    env_overrides,
    find_config_file,
    load_config,
)
from sharpe_watch.core.exceptions import ConfigError
from sharpe_watch.core.models import SourceProvider


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    """Isolate from developer env vars and any sharpe-watch.yml in the cwd."""
    for key in list(os.environ):
        if key.startswith("SHARPE_WATCH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


class TestSourceConfig:
    def test_defaults(self):
        c = SourceConfig()
        assert c.provider == SourceProvider.YAHOO
        assert c.rate_limit == 5
        assert c.history_years == 3

    @pytest.mark.parametrize("rate", [0, 21])
    def test_rate_limit_bounds(self, rate):
        with pytest.raises(ValidationError, match="between 1 and 20"):
            SourceConfig(rate_limit=rate)

    def test_csv_requires_dir(self):
        with pytest.raises(ValidationError, match="csv_dir is required"):
            SourceConfig(provider=SourceProvider.CSV)

    def test_csv_with_dir(self, tmp_path):
        c = SourceConfig(provider="csv", csv_dir=str(tmp_path))
        assert c.provider == SourceProvider.CSV

    def test_negative_retries_rejected(self):
        with pytest.raises(ValidationError):
            SourceConfig(max_retries=-1)


class TestCacheConfig:
    def test_defaults(self):
        c = CacheConfig()
        assert c.enabled is True
        assert c.stock_revalidate_seconds == 3600
        assert c.sharpe_revalidate_seconds == 3600

    def test_zero_revalidate_rejected(self):
        with pytest.raises(ValidationError):
            CacheConfig(stock_revalidate_seconds=0)


class TestAnalyticsConfig:
    def test_defaults(self):
        c = AnalyticsConfig()
        assert c.risk_free_rate == 0.0
        assert c.default_lookback == 250

    @pytest.mark.parametrize("lookback", [0, 1001])
    def test_lookback_bounds(self, lookback):
        with pytest.raises(ValidationError, match="between 1 and 1000"):
            AnalyticsConfig(default_lookback=lookback)


class TestSharpeWatchConfig:
    def test_frozen(self):
        config = SharpeWatchConfig()
        with pytest.raises(ValidationError):
            config.api = None


class TestLoadConfig:
    def test_defaults_without_file(self):
        config = load_config()
        assert config == SharpeWatchConfig()

    def test_yaml_loading(self, tmp_path):
        yaml_file = tmp_path / "config.yml"
        yaml_file.write_text(
            "source:\n  rate_limit: 2\ncache:\n  enabled: false\n"
            "analytics:\n  risk_free_rate: 0.5\n"
        )
        config = load_config(config_path=str(yaml_file))
        assert config.source.rate_limit == 2
        assert config.cache.enabled is False
        assert config.analytics.risk_free_rate == 0.5

    def test_default_file_in_cwd(self, tmp_path):
        (tmp_path / "sharpe-watch.yml").write_text("api:\n  port: 9001\n")
        assert load_config().api.port == 9001

    def test_config_env_var_path(self, tmp_path, monkeypatch):
        path = tmp_path / "elsewhere.yml"
        path.write_text("api:\n  port: 9002\n")
        monkeypatch.setenv("SHARPE_WATCH_CONFIG", str(path))
        assert load_config().api.port == 9002

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        yaml_file = tmp_path / "config.yml"
        yaml_file.write_text("source:\n  rate_limit: 2\n  request_timeout: 5\n")
        monkeypatch.setenv("SHARPE_WATCH_SOURCE__RATE_LIMIT", "7")
        config = load_config(config_path=str(yaml_file))
        assert config.source.rate_limit == 7
        assert config.source.request_timeout == 5

    def test_missing_file_raises(self):
        with pytest.raises(ConfigError, match="not found"):
            load_config(config_path="/nonexistent/sharpe-watch.yml")

    def test_missing_env_file_raises(self, monkeypatch):
        monkeypatch.setenv("SHARPE_WATCH_CONFIG", "/nonexistent.yml")
        with pytest.raises(ConfigError, match="SHARPE_WATCH_CONFIG"):
            load_config()

    def test_invalid_yaml_raises(self, tmp_path):
        bad = tmp_path / "bad.yml"
        bad.write_text("source: [unclosed\n")
        with pytest.raises(ConfigError, match="parse YAML"):
            load_config(config_path=str(bad))

    def test_non_mapping_yaml_raises(self, tmp_path):
        bad = tmp_path / "list.yml"
        bad.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(config_path=str(bad))

    def test_validation_error_wrapped(self, monkeypatch):
        monkeypatch.setenv("SHARPE_WATCH_SOURCE__RATE_LIMIT", "99")
        with pytest.raises(ConfigError, match="between 1 and 20"):
            load_config()

    def test_env_strings_parsed_by_field_type(self):
        config = load_config(
            environ={
                "SHARPE_WATCH_CACHE__ENABLED": "false",
                "SHARPE_WATCH_ANALYTICS__RISK_FREE_RATE": "0.25",
                "SHARPE_WATCH_API__PORT": "9100",
            }
        )
        assert config.cache.enabled is False
        assert config.analytics.risk_free_rate == 0.25
        assert config.api.port == 9100

    def test_numeric_secret_stays_string(self):
        config = load_config(environ={"SHARPE_WATCH_API__CRON_SECRET": "12345"})
        assert config.api.cron_secret == "12345"

    def test_validation_error_context(self):
        with pytest.raises(ConfigError) as exc_info:
            load_config(environ={"SHARPE_WATCH_ANALYTICS__DEFAULT_LOOKBACK": "0"})
        assert exc_info.value.context["field"] == "analytics.default_lookback"

    def test_empty_yaml_is_defaults(self, tmp_path):
        empty = tmp_path / "empty.yml"
        empty.write_text("")
        assert load_config(config_path=str(empty)) == SharpeWatchConfig()


class TestEnvOverrides:
    def test_nested_and_filtered(self):
        environ = {
            "SHARPE_WATCH_API__CRON_SECRET": "s3cret",
            "SHARPE_WATCH_SOURCE__RATE_LIMIT": "3",
            "SHARPE_WATCH_CONFIG": "ignored.yml",
            "HOME": "/root",
        }
        assert env_overrides(environ) == {
            "api": {"cron_secret": "s3cret"},
            "source": {"rate_limit": "3"},
        }

    def test_malformed_names_skipped(self):
        assert env_overrides({"SHARPE_WATCH_API__": "x", "SHARPE_WATCH_": "y"}) == {}

    def test_deep_merge_leaves_inputs(self):
        base = {"api": {"port": 8000}, "cache": {"enabled": True}}
        merged = _deep_merge(base, {"api": {"cron_secret": "s"}})
        assert merged == {"api": {"port": 8000, "cron_secret": "s"}, "cache": {"enabled": True}}
        assert base == {"api": {"port": 8000}, "cache": {"enabled": True}}


class TestFindConfigFile:
    def test_none_without_candidates(self):
        assert find_config_file(environ={}) is None

    def test_explicit_wins_over_env(self, tmp_path):
        explicit = tmp_path / "a.yml"
        other = tmp_path / "b.yml"
        explicit.write_text("")
        other.write_text("")
        found = find_config_file(str(explicit), environ={"SHARPE_WATCH_CONFIG": str(other)})
        assert found == explicit

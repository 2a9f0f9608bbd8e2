"""Tests for the CLI module."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from sharpe_watch.cli import cli


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.startswith("SHARPE_WATCH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_path(tmp_path: Path, aapl_series) -> str:
    """Config pointing at a CSV directory containing AAPL.csv."""
    csv_dir = tmp_path / "prices"
    csv_dir.mkdir()
    lines = ["date,open,high,low,close,volume"]
    lines += [
        f"{p.date},{p.open},{p.high},{p.low},{p.close},{p.volume}" for p in aapl_series
    ]
    (csv_dir / "AAPL.csv").write_text("\n".join(lines) + "\n")

    path = tmp_path / "sharpe-watch.yml"
    path.write_text(
        f"source:\n  provider: csv\n  csv_dir: {csv_dir}\n"
        f"watchlist:\n  path: {tmp_path / 'watchlist.json'}\n"
    )
    return str(path)


def _invoke(runner, config_path, *args):
    return runner.invoke(cli, ["--config", config_path, *args])


# ---------------------------------------------------------------------------
# prices
# ---------------------------------------------------------------------------


class TestPricesCommand:
    def test_json(self, runner, config_path, aapl_series):
        result = _invoke(runner, config_path, "prices", "-t", "aapl", "--format", "json")
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload[0]["ticker"] == "AAPL"
        assert payload[0]["days_count"] == len(aapl_series)
        assert payload[0]["historical_data"][0]["date"] == str(aapl_series[0].date)

    def test_csv(self, runner, config_path, aapl_series):
        result = _invoke(runner, config_path, "prices", "-t", "AAPL", "--format", "csv")
        assert result.exit_code == 0, result.output
        lines = result.stdout.strip().splitlines()
        assert lines[0] == "ticker,date,open,high,low,close,volume"
        assert len(lines) == len(aapl_series) + 1

    def test_table_reports_missing_ticker(self, runner, config_path):
        result = _invoke(runner, config_path, "prices", "-t", "AAPL,MSFT")
        assert result.exit_code == 0, result.output
        assert "No data available for MSFT" in result.output

    def test_invalid_ticker_is_usage_error(self, runner, config_path):
        result = _invoke(runner, config_path, "prices", "-t", "TOOLONG")
        assert result.exit_code == 2
        assert "Invalid ticker symbols" in result.output


# ---------------------------------------------------------------------------
# sharpe
# ---------------------------------------------------------------------------


class TestSharpeCommand:
    def test_json(self, runner, config_path):
        result = _invoke(runner, config_path, "sharpe", "-t", "AAPL", "--format", "json")
        assert result.exit_code == 0, result.output
        report = json.loads(result.stdout)[0]
        assert report["ticker"] == "AAPL"
        assert report["last_week"]["period_days"] == 5
        assert report["last_year"] is None

    def test_table(self, runner, config_path):
        result = _invoke(runner, config_path, "sharpe", "-t", "AAPL")
        assert result.exit_code == 0, result.output
        assert "Sharpe Ratios" in result.output
        assert "AAPL" in result.output

    def test_falls_back_to_watchlist(self, runner, config_path):
        _invoke(runner, config_path, "watch", "add", "AAPL")
        result = _invoke(runner, config_path, "sharpe", "--format", "json")
        assert result.exit_code == 0, result.output
        assert [r["ticker"] for r in json.loads(result.stdout)] == ["AAPL"]

    def test_empty_watchlist_is_usage_error(self, runner, config_path):
        result = _invoke(runner, config_path, "sharpe")
        assert result.exit_code == 2
        assert "watch-list is empty" in result.output


# ---------------------------------------------------------------------------
# history
# ---------------------------------------------------------------------------


class TestHistoryCommand:
    def test_json(self, runner, config_path):
        result = _invoke(
            runner, config_path, "history", "-t", "AAPL", "--lookback", "21", "--format", "json"
        )
        assert result.exit_code == 0, result.output
        series = json.loads(result.stdout)[0]
        assert series["lookback"] == 21
        assert series["historical_data"][40]["sharpe_ratio"] is None
        assert series["historical_data"][41]["sharpe_ratio"] is not None

    def test_csv(self, runner, config_path):
        result = _invoke(
            runner, config_path, "history", "-t", "AAPL", "-l", "5", "--format", "csv"
        )
        assert result.exit_code == 0, result.output
        lines = result.stdout.strip().splitlines()
        assert lines[0] == "ticker,date,close,trailing_return,std_dev,sharpe_ratio"
        assert lines[1].endswith(",,,")

    def test_table(self, runner, config_path):
        result = _invoke(runner, config_path, "history", "-t", "AAPL", "-l", "5", "--tail", "3")
        assert result.exit_code == 0, result.output
        assert "lookback 5" in result.output

    def test_defaults_to_watchlist_tickers_and_lookback(self, runner, config_path):
        _invoke(runner, config_path, "watch", "add", "AAPL")
        _invoke(runner, config_path, "watch", "lookback", "21")
        result = _invoke(runner, config_path, "history", "--format", "json")
        assert result.exit_code == 0, result.output
        (series,) = json.loads(result.stdout)
        assert series["ticker"] == "AAPL"
        assert series["lookback"] == 21

    def test_explicit_lookback_overrides_watchlist(self, runner, config_path):
        _invoke(runner, config_path, "watch", "lookback", "21")
        result = _invoke(
            runner, config_path, "history", "-t", "AAPL", "-l", "5", "--format", "json"
        )
        assert json.loads(result.stdout)[0]["lookback"] == 5

    def test_unsaved_watchlist_uses_configured_lookback(self, runner, config_path, monkeypatch):
        monkeypatch.setenv("SHARPE_WATCH_ANALYTICS__DEFAULT_LOOKBACK", "63")
        result = _invoke(runner, config_path, "history", "-t", "AAPL", "--format", "json")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)[0]["lookback"] == 63

    def test_empty_watchlist_is_usage_error(self, runner, config_path):
        result = _invoke(runner, config_path, "history")
        assert result.exit_code == 2
        assert "watch-list is empty" in result.output

    def test_lookback_out_of_range(self, runner, config_path):
        result = _invoke(runner, config_path, "history", "-t", "AAPL", "-l", "1001")
        assert result.exit_code == 2
        assert "cannot exceed 1000" in result.output


# ---------------------------------------------------------------------------
# watch
# ---------------------------------------------------------------------------


class TestWatchCommands:
    def test_add_list_remove(self, runner, config_path):
        result = _invoke(runner, config_path, "watch", "add", "aapl", "msft", "bad1")
        assert result.exit_code == 0, result.output
        assert "Added AAPL" in result.output
        assert "Skipped bad1" in result.output

        listed = _invoke(runner, config_path, "watch", "list")
        assert "AAPL" in listed.stdout
        assert "MSFT" in listed.stdout

        removed = _invoke(runner, config_path, "watch", "remove", "AAPL")
        assert "Removed AAPL" in removed.output
        assert "AAPL" not in _invoke(runner, config_path, "watch", "list").stdout

    def test_clear(self, runner, config_path):
        _invoke(runner, config_path, "watch", "add", "AAPL")
        result = _invoke(runner, config_path, "watch", "clear")
        assert result.exit_code == 0
        assert "Watch-list is empty" in _invoke(runner, config_path, "watch", "list").output

    def test_lookback(self, runner, config_path):
        result = _invoke(runner, config_path, "watch", "lookback", "63")
        assert result.exit_code == 0
        assert "Lookback: 63 days" in _invoke(runner, config_path, "watch", "list").output

    def test_lookback_invalid(self, runner, config_path):
        result = _invoke(runner, config_path, "watch", "lookback", "0")
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


class TestServeCommand:
    def test_runs_uvicorn_with_config(self, runner, config_path, monkeypatch):
        uvicorn = pytest.importorskip("uvicorn")
        # Registered so the value exported by serve is removed afterwards
        monkeypatch.setenv("SHARPE_WATCH_CONFIG", "unused.yml")
        with patch.object(uvicorn, "run") as run:
            result = _invoke(runner, config_path, "serve", "--port", "9999")
        assert result.exit_code == 0, result.output
        run.assert_called_once()
        kwargs = run.call_args.kwargs
        assert kwargs["factory"] is True
        assert kwargs["port"] == 9999
        assert kwargs["host"] == "0.0.0.0"
        assert os.environ["SHARPE_WATCH_CONFIG"] == config_path

"""Integration test fixtures: real CSV files on disk, no network."""

from __future__ import annotations

from pathlib import Path

import pytest

from sharpe_watch.core.config import SharpeWatchConfig


def _write_csv(path: Path, series) -> None:
    lines = ["Date,Open,High,Low,Close,Volume"]
    lines += [f"{p.date},{p.open},{p.high},{p.low},{p.close},{p.volume:.0f}" for p in series]
    path.write_text("\n".join(lines) + "\n")


@pytest.fixture
def csv_dir(tmp_path: Path, make_series, growth_closes) -> Path:
    """Directory with a 500-day constant-growth GROW, a flat FLAT and a partly corrupt MIXD."""
    directory = tmp_path / "prices"
    directory.mkdir()

    _write_csv(directory / "GROW.csv", make_series(growth_closes))
    _write_csv(directory / "FLAT.csv", make_series([50.0] * 300))

    mixed = directory / "MIXD.csv"
    _write_csv(mixed, make_series([10.0 + i for i in range(30)]))
    with open(mixed, "a") as f:
        f.write("2025-06-02,0,0,0,0,100\n")
        f.write("2025-06-03,12,12,12,n/a,100\n")
    return directory


@pytest.fixture
def integration_config(csv_dir: Path, tmp_path: Path) -> SharpeWatchConfig:
    return SharpeWatchConfig.model_validate(
        {
            "source": {"provider": "csv", "csv_dir": str(csv_dir)},
            "watchlist": {"path": str(tmp_path / "watchlist.json")},
            "api": {"cron_secret": "integration"},
        }
    )

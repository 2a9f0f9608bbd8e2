"""Tests for sharpe_watch.watchlist."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from sharpe_watch.watchlist import (
    InMemoryWatchlistStore,
    JsonWatchlistStore,
    Watchlist,
    WatchlistState,
)


@pytest.fixture
def store() -> InMemoryWatchlistStore:
    return InMemoryWatchlistStore()


@pytest.fixture
def watchlist(store) -> Watchlist:
    return Watchlist(store)


class TestWatchlist:
    def test_defaults(self, watchlist):
        assert watchlist.tickers == []
        assert watchlist.lookback == 250

    def test_add_normalizes(self, watchlist, store):
        assert watchlist.add_ticker("  aapl ")
        assert watchlist.tickers == ["AAPL"]
        assert store.state.tickers == ("AAPL",)

    def test_add_duplicate_rejected(self, watchlist):
        watchlist.add_ticker("AAPL")
        assert not watchlist.add_ticker("aapl")
        assert watchlist.tickers == ["AAPL"]

    @pytest.mark.parametrize("bad", ["", "TOOLONG", "BRK.B", "12"])
    def test_add_invalid_rejected(self, watchlist, store, bad):
        assert not watchlist.add_ticker(bad)
        assert watchlist.tickers == []
        assert store.state == WatchlistState()

    def test_add_beyond_ten_rejected(self, watchlist):
        for i in range(10):
            assert watchlist.add_ticker(f"T{chr(65 + i)}")
        assert not watchlist.add_ticker("EXTRA")
        assert len(watchlist.tickers) == 10

    def test_remove(self, watchlist):
        watchlist.add_ticker("AAPL")
        watchlist.add_ticker("MSFT")
        assert watchlist.remove_ticker("aapl")
        assert watchlist.tickers == ["MSFT"]

    def test_remove_missing(self, watchlist):
        assert not watchlist.remove_ticker("AAPL")

    def test_clear(self, watchlist, store):
        watchlist.add_ticker("AAPL")
        watchlist.set_lookback(21)
        assert watchlist.clear()
        assert watchlist.tickers == []
        assert watchlist.lookback == 21
        assert store.state.tickers == ()

    def test_set_lookback(self, watchlist, store):
        assert watchlist.set_lookback(63)
        assert watchlist.lookback == 63
        assert store.state.lookback == 63

    @pytest.mark.parametrize("bad", [0, 1001, 2.5, "21", True])
    def test_set_lookback_invalid(self, watchlist, store, bad):
        assert not watchlist.set_lookback(bad)
        assert watchlist.lookback == 250
        assert store.state.lookback == 250

    def test_loads_existing_state(self):
        store = InMemoryWatchlistStore(WatchlistState(tickers=("SPY",), lookback=5))
        watchlist = Watchlist(store)
        assert watchlist.tickers == ["SPY"]
        assert watchlist.lookback == 5


class TestJsonWatchlistStore:
    def test_missing_file_is_default(self, tmp_path: Path):
        assert JsonWatchlistStore(tmp_path / "none.json").load() == WatchlistState()

    def test_round_trip_through_watchlist(self, tmp_path: Path):
        path = tmp_path / "nested" / "watchlist.json"
        first = Watchlist(JsonWatchlistStore(path))
        first.add_ticker("AAPL")
        first.add_ticker("QQQ")
        first.set_lookback(21)

        assert json.loads(path.read_text()) == {"tickers": ["AAPL", "QQQ"], "lookback": 21}

        second = Watchlist(JsonWatchlistStore(path))
        assert second.tickers == ["AAPL", "QQQ"]
        assert second.lookback == 21

    def test_custom_default_until_saved(self, tmp_path: Path):
        path = tmp_path / "watchlist.json"
        store = JsonWatchlistStore(path, default=WatchlistState(lookback=63))
        watchlist = Watchlist(store)
        assert watchlist.lookback == 63

        watchlist.add_ticker("AAPL")
        assert json.loads(path.read_text())["lookback"] == 63

    def test_corrupt_file_is_default(self, tmp_path: Path):
        path = tmp_path / "watchlist.json"
        path.write_text("{not json")
        assert JsonWatchlistStore(path).load() == WatchlistState()

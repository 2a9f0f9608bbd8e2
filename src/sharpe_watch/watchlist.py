"""Persisted watch-list of tickers and the preferred lookback.

``Watchlist`` owns the state and the editing rules; where the state lives
is decided by the injected ``WatchlistStore``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ConfigDict, ValidationError

from sharpe_watch.core.constants import DEFAULT_LOOKBACK, MAX_TICKERS_PER_REQUEST
from sharpe_watch.core.exceptions import InvalidInputError
from sharpe_watch.core.validators import is_valid_ticker, validate_lookback

logger = logging.getLogger(__name__)


class WatchlistState(BaseModel):
    """Snapshot of a watch-list."""

    model_config = ConfigDict(frozen=True)

    tickers: tuple[str, ...] = ()
    lookback: int = DEFAULT_LOOKBACK


class WatchlistStore(Protocol):
    """Persistence port for watch-list state."""

    def load(self) -> WatchlistState:
        """Return the stored state, or a default state if none exists."""
        ...

    def save(self, state: WatchlistState) -> None:
        """Persist ``state``, replacing whatever was stored."""
        ...


class InMemoryWatchlistStore:
    """Keeps state in memory only."""

    def __init__(self, state: WatchlistState | None = None) -> None:
        self.state = state or WatchlistState()

    def load(self) -> WatchlistState:
        return self.state

    def save(self, state: WatchlistState) -> None:
        self.state = state


class JsonWatchlistStore:
    """Stores state as a small JSON document.

    A missing or unreadable file loads as ``default`` (an empty watch-list
    with the standard lookback unless given).
    """

    def __init__(self, path: str | Path, default: WatchlistState | None = None) -> None:
        self.path = Path(path)
        self.default = default or WatchlistState()

    def load(self) -> WatchlistState:
        if not self.path.exists():
            return self.default
        try:
            return WatchlistState.model_validate_json(self.path.read_text())
        except (OSError, ValidationError) as e:
            logger.warning("Ignoring unreadable watch-list at %s: %s", self.path, e)
            return self.default

    def save(self, state: WatchlistState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"tickers": list(state.tickers), "lookback": state.lookback}
        self.path.write_text(json.dumps(payload, indent=2))


class Watchlist:
    """Editable list of up to 10 tickers plus a lookback preference.

    Every mutator returns ``True`` when the edit was accepted and saved,
    ``False`` when it was rejected and the state is unchanged.
    """

    def __init__(self, store: WatchlistStore) -> None:
        self._store = store
        self._state = store.load()

    @property
    def tickers(self) -> list[str]:
        return list(self._state.tickers)

    @property
    def lookback(self) -> int:
        return self._state.lookback

    def add_ticker(self, ticker: str) -> bool:
        symbol = ticker.strip().upper() if isinstance(ticker, str) else ""
        if not is_valid_ticker(symbol):
            logger.debug("Rejected watch-list ticker %r", ticker)
            return False
        if symbol in self._state.tickers:
            return False
        if len(self._state.tickers) >= MAX_TICKERS_PER_REQUEST:
            logger.debug("Watch-list full, not adding %s", symbol)
            return False
        self._update(tickers=(*self._state.tickers, symbol))
        return True

    def remove_ticker(self, ticker: str) -> bool:
        symbol = ticker.strip().upper() if isinstance(ticker, str) else ""
        if symbol not in self._state.tickers:
            return False
        self._update(tickers=tuple(t for t in self._state.tickers if t != symbol))
        return True

    def clear(self) -> bool:
        self._update(tickers=())
        return True

    def set_lookback(self, lookback: int) -> bool:
        try:
            validate_lookback(lookback)
        except InvalidInputError:
            return False
        self._update(lookback=lookback)
        return True

    def _update(self, **changes: object) -> None:
        self._state = self._state.model_copy(update=changes)
        self._store.save(self._state)

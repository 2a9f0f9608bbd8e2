"""Boundary validation for ticker symbols and lookback periods.

Everything here runs before any fetch or computation. Failures raise
``InvalidInputError``; nothing is silently clamped or corrected beyond the
normalization of free-text ticker input.
"""

from __future__ import annotations

from typing import Any

from sharpe_watch.core.constants import (
    LOOKBACK_MAX,
    LOOKBACK_MIN,
    MAX_TICKERS_PER_REQUEST,
    TICKER_PATTERN,
)
from sharpe_watch.core.exceptions import InvalidInputError


def is_valid_ticker(ticker: Any) -> bool:
    """True when ``ticker`` is 1-5 uppercase ASCII letters."""
    if not isinstance(ticker, str) or not ticker:
        return False
    return TICKER_PATTERN.match(ticker) is not None


def parse_ticker_input(raw: str | None) -> list[str]:
    """Split comma-separated input into clean, de-duplicated symbols.

    Entries are trimmed and upper-cased; empty entries are dropped and the
    first occurrence of each symbol keeps its position.

    >>> parse_ticker_input("aapl, aapl, googl")
    ['AAPL', 'GOOGL']
    """
    if not raw or not isinstance(raw, str):
        return []

    tickers = [t.strip().upper() for t in raw.split(",")]
    return list(dict.fromkeys(t for t in tickers if t))


def validate_tickers(
    tickers: list[str],
    max_count: int = MAX_TICKERS_PER_REQUEST,
) -> list[str]:
    """Return ``tickers`` unchanged if the list is acceptable, else raise."""
    if not isinstance(tickers, list):
        raise InvalidInputError(
            "Tickers must be a list",
            context={"field": "tickers", "value": tickers},
        )
    if not tickers:
        raise InvalidInputError(
            "At least one ticker is required",
            context={"field": "tickers", "value": tickers},
        )
    if len(tickers) > max_count:
        raise InvalidInputError(
            f"Maximum {max_count} tickers allowed",
            context={"field": "tickers", "value": len(tickers)},
        )

    invalid = [t for t in tickers if not is_valid_ticker(t)]
    if invalid:
        raise InvalidInputError(
            f"Invalid ticker symbols: {', '.join(str(t) for t in invalid)}",
            context={"field": "tickers", "value": invalid},
        )
    return tickers


def validate_ticker_input(
    raw: str | None,
    max_count: int = MAX_TICKERS_PER_REQUEST,
) -> list[str]:
    """Parse and validate free-text ticker input in one step."""
    return validate_tickers(parse_ticker_input(raw), max_count=max_count)


def validate_lookback(lookback: Any) -> int:
    """Return ``lookback`` if it is an integer within bounds, else raise.

    Booleans and floats are rejected even when numerically integral so a
    malformed payload never reaches the analytics engine.
    """
    if isinstance(lookback, bool) or not isinstance(lookback, int):
        raise InvalidInputError(
            "Lookback must be an integer",
            context={"field": "lookback", "value": lookback},
        )
    if lookback < LOOKBACK_MIN:
        raise InvalidInputError(
            f"Lookback must be at least {LOOKBACK_MIN}",
            context={"field": "lookback", "value": lookback},
        )
    if lookback > LOOKBACK_MAX:
        raise InvalidInputError(
            f"Lookback cannot exceed {LOOKBACK_MAX}",
            context={"field": "lookback", "value": lookback},
        )
    return lookback

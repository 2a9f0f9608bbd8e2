"""Custom exception hierarchy for sharpe-watch."""

from typing import Any


class SharpeWatchError(Exception):
    """Base exception for all sharpe-watch errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(SharpeWatchError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Should be treated as fatal.

    Context keys:
        field (str): the config field that failed validation
        value (Any): the invalid value (redacted for secrets)
    """


class InvalidInputError(SharpeWatchError):
    """Malformed caller input: ticker syntax, too many tickers, bad lookback.

    Policy: reject at the boundary before any fetch or computation.

    Context keys:
        field (str): "tickers", "ticker" or "lookback"
        value (Any): the rejected value
    """


class UpstreamUnavailableError(SharpeWatchError):
    """The price source failed, timed out, or returned no usable bars.

    Policy: record as the ticker's `error` field. Other tickers are unaffected.

    Context keys:
        ticker (str): the ticker being fetched
    """


class CacheComputeError(SharpeWatchError):
    """A cached computation raised a non-sharpe-watch exception.

    Policy: nothing is stored for the key. The caller of get_cached converts
    the failure into a per-ticker error; the next call recomputes.

    Context keys:
        key (str): the cache key being computed
    """

"""Sample statistics over numeric sequences (population convention)."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import numpy as np

logger = logging.getLogger(__name__)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sample."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=np.float64)))


def variance(values: Sequence[float]) -> float:
    """Population variance (divides by N); 0.0 for fewer than 2 samples."""
    if len(values) < 2:
        return 0.0
    return float(np.var(np.asarray(values, dtype=np.float64)))


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation; 0.0 for fewer than 2 samples.

    Numeric failures (overflow, invalid operations, non-numeric input) are
    swallowed and reported as 0.0 so a single corrupt window never aborts
    a report. A non-finite result is treated the same way.
    """
    if len(values) < 2:
        return 0.0

    try:
        with np.errstate(over="raise", invalid="raise", divide="raise"):
            result = float(np.std(np.asarray(values, dtype=np.float64)))
    except (FloatingPointError, OverflowError, TypeError, ValueError) as e:
        logger.debug("standard_deviation failed on %d values: %s", len(values), e)
        return 0.0

    if not math.isfinite(result):
        return 0.0
    return result

"""Shared numeric helpers for rates and averages."""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import datetime

SECONDS_PER_DAY = 86400.0


def round_half_up(value: float, digits: int = 0) -> float:
    """Round half away from zero for non-negative values (``Math.round`` style).

    Python's ``round`` uses banker's rounding, which would report 2 for an
    average of 2.5 days.
    """
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def percentage(part: float, whole: float) -> int:
    """Integer percentage of ``part`` in ``whole``; 0 when ``whole`` is 0.

    Parameters
    ----------
    part : float
        Numerator (e.g. resolved tickets).
    whole : float
        Denominator (e.g. created tickets).

    Returns
    -------
    int
        ``part / whole * 100`` rounded half-up, exactly 100 when equal.
    """
    if not whole:
        return 0
    if part == whole:
        return 100
    return int(round_half_up(part / whole * 100))


def safe_mean(values: Iterable[float]) -> float:
    items = list(values)
    if not items:
        return 0.0
    return sum(items) / len(items)


def elapsed_days(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / SECONDS_PER_DAY


def whole_days(start: datetime, end: datetime) -> int:
    """Elapsed days truncated to an integer (floor)."""
    return math.floor(elapsed_days(start, end))

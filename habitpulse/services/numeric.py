"""
Small numeric helpers shared by the scoring engines.

All averages over an empty sequence are 0 rather than an exception; callers
that need a neutral default check the sample count themselves.
"""
from __future__ import annotations

import math
from collections.abc import Iterable, Sequence


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def mean(values: Iterable[float]) -> float:
    items = list(values)
    if not items:
        return 0.0
    return sum(items) / len(items)


def variance(values: Sequence[float]) -> float:
    """Population variance."""
    if not values:
        return 0.0
    m = mean(values)
    return sum((v - m) ** 2 for v in values) / len(values)


def stddev(values: Sequence[float]) -> float:
    return math.sqrt(variance(values))


def window_means(values: Sequence[float], size: int) -> tuple[float, float]:
    """
    Means of the trailing `size` values and of the `size` values before them.

    Both windows are divided by `size` even when the older one is short, so
    a history of 7-13 samples compares against a partially empty window.
    """
    recent = values[-size:]
    older = values[-2 * size:-size] if len(values) > size else []
    return sum(recent) / size, sum(older) / size

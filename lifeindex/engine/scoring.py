"""Category scorer — pure math, never raises."""

from __future__ import annotations

import math
from collections.abc import Iterable

from lifeindex.engine.models import Metric

POINTS_AT_TARGET = 100.0


def effective_target(target: float) -> float:
    """Zero target scores as 1 (the stored target is left alone)."""
    return 1.0 if target == 0 else target


def metric_points(metric: Metric) -> float:
    """Points for one metric: (value / target) * 100. Uncapped, may be negative.

    A ratio beyond the float range comes out as +/-inf.
    """
    return (metric.value / effective_target(metric.target)) * POINTS_AT_TARGET


def total_points(points: Iterable[float]) -> float:
    """Order-independent sum.

    fsum gives the same float for any ordering. Past the float range it
    raises, so the sum falls back to a plain sum over the sorted values
    (+/-inf, or nan when both infinities are present).
    """
    values = list(points)
    try:
        return math.fsum(values)
    except (OverflowError, ValueError):
        return sum(sorted(values))


def score(metrics: Iterable[Metric]) -> float:
    """Sum of metric points. Empty input scores exactly 0."""
    return total_points(metric_points(m) for m in metrics)


def same_score(a: float, b: float) -> bool:
    """Equality that also treats nan as equal to nan."""
    return a == b or (math.isnan(a) and math.isnan(b))

"""Index aggregator — composite score, bounded history, score reconciliation.

Every function here returns new model instances and leaves its inputs alone.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from lifeindex.engine.models import (
    HISTORY_LIMIT,
    CategoryId,
    HistoryPoint,
    LifeState,
    Metric,
)
from lifeindex.engine.scoring import same_score, score, total_points


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def total_index(state: LifeState) -> float:
    """Live sum of the four category scores (never read from history)."""
    return total_points(c.score for c in state.categories.all())


def append_history(
    history: Sequence[HistoryPoint],
    point: HistoryPoint,
    limit: int = HISTORY_LIMIT,
) -> list[HistoryPoint]:
    """Append `point`, dropping the oldest entries beyond `limit`."""
    return [*history, point][-limit:]


def snapshot(state: LifeState, at: datetime) -> HistoryPoint:
    scores = state.categories.scores()
    return HistoryPoint(date=at, total_score=total_index(state), **scores)


def apply_metric_update(
    state: LifeState,
    category_id: CategoryId | str,
    updated_metrics: Sequence[Metric],
    now: datetime | None = None,
) -> LifeState:
    """Replace one category's metrics and record a history point.

    Only the named category changes; the other three are carried over as-is.
    """
    at = _now(now)
    current = state.categories.get(category_id)
    metrics = [m.model_copy() for m in updated_metrics]
    category = current.model_copy(update={"metrics": metrics, "score": score(metrics)})

    updated = state.model_copy(update={"categories": state.categories.replace(category)})
    return updated.model_copy(
        update={
            "history": append_history(state.history, snapshot(updated, at)),
            "last_updated": at,
        }
    )


def reconcile_scores(state: LifeState, now: datetime | None = None) -> tuple[LifeState, bool]:
    """Recompute every stored category score from its metrics.

    Returns (state, changed). When nothing drifted the same state object is
    returned and `changed` is False.
    """
    categories = state.categories
    changed = False
    for category in state.categories.all():
        fresh = score(category.metrics)
        if not same_score(fresh, category.score):
            categories = categories.replace(category.model_copy(update={"score": fresh}))
            changed = True

    if not changed:
        return state, False
    return state.model_copy(update={"categories": categories, "last_updated": _now(now)}), True


def chart_series(state: LifeState) -> list[dict[str, Any]]:
    """Points for the index chart, oldest first.

    With no history yet the chart shows the live index as a single "Now" point.
    """
    if not state.history:
        return [{"date": "Now", "score": total_index(state)}]
    return [{"date": h.date.isoformat(), "score": h.total_score} for h in state.history]

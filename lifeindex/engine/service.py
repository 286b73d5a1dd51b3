"""Life Index service: owns the live LifeState and persists every change."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from lifeindex.engine.aggregator import apply_metric_update, reconcile_scores, total_index
from lifeindex.engine.models import CategoryId, LifeState, Metric
from lifeindex.engine.store import StateStore
from lifeindex.logging import get_logger

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LifeIndexService:
    def __init__(self, store: StateStore, clock: Callable[[], datetime] = utc_now) -> None:
        self.store = store
        self.clock = clock
        self._state: LifeState | None = None

    @property
    def state(self) -> LifeState:
        if self._state is None:
            raise RuntimeError("LifeIndexService.start() has not been awaited")
        return self._state

    async def start(self) -> LifeState:
        """Load the stored state and heal any stale category scores."""
        loaded = await self.store.load()
        state, changed = reconcile_scores(loaded, now=self.clock())
        if changed:
            logger.info("scores_reconciled", scores=state.categories.scores())
            await self.store.save(state)
        self._state = state
        return state

    def total_index(self) -> float:
        return total_index(self.state)

    async def update_metrics(self, category_id: CategoryId | str, metrics: Sequence[Metric]) -> LifeState:
        """Apply a metrics edit to one category and persist the result.

        The save is awaited, so a read after this returns is backed by the store.
        """
        state = apply_metric_update(self.state, category_id, metrics, now=self.clock())
        self._state = state
        await self.store.save(state)
        return state

"""Shared fixtures for the test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from lifeindex.deps import get_insight_generator, get_service
from lifeindex.engine.defaults import default_state
from lifeindex.engine.insight import InsightGenerator
from lifeindex.engine.models import LifeState, Metric
from lifeindex.engine.service import LifeIndexService
from lifeindex.engine.store import InMemoryStateStore
from lifeindex.main import app

T0 = datetime(2026, 2, 15, 12, 0, tzinfo=timezone.utc)


class StepClock:
    """Deterministic clock: each call advances one minute from T0."""

    def __init__(self, start: datetime = T0):
        self._next = start

    def __call__(self) -> datetime:
        now = self._next
        self._next = now + timedelta(minutes=1)
        return now


def make_metric(value: float, target: float, metric_id: str = "x1", **kwargs) -> Metric:
    return Metric(id=metric_id, name=kwargs.pop("name", metric_id), value=value, target=target, **kwargs)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def state() -> LifeState:
    return default_state(now=T0)


@pytest.fixture()
def memory_store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture()
async def service(memory_store) -> LifeIndexService:
    svc = LifeIndexService(memory_store, clock=StepClock())
    await svc.start()
    return svc


@pytest.fixture()
def insight() -> InsightGenerator:
    """Generator with no API key, so it never touches the network."""
    return InsightGenerator(api_key=None)


@pytest.fixture()
def override_deps(service, insight):
    """Override the FastAPI dependencies so no real DB or model is needed."""

    async def _service():
        return service

    async def _insight():
        return insight

    app.dependency_overrides[get_service] = _service
    app.dependency_overrides[get_insight_generator] = _insight
    yield service
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_deps):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

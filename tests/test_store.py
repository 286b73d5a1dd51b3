"""Tests for the state stores, in-memory and SQLite via aiosqlite."""

from __future__ import annotations

import asyncio
import math

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lifeindex.config import settings
from lifeindex.engine.aggregator import apply_metric_update
from lifeindex.engine.defaults import default_state
from lifeindex.engine.store import DEFAULT_STORAGE_KEY, InMemoryStateStore, SqlStateStore
from tests.conftest import T0, make_metric


@pytest.fixture()
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'life_index.db'}")
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


class BrokenSession:
    """Session whose every statement fails like an unreachable database."""

    async def execute(self, stmt, params=None):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    async def commit(self):
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        pass


class TimeoutSession(BrokenSession):
    """Session whose connect times out (asyncpg raises asyncio.TimeoutError)."""

    async def execute(self, stmt, params=None):
        raise asyncio.TimeoutError()


class TestInMemoryStateStore:
    @pytest.mark.asyncio
    async def test_empty_loads_default(self):
        loaded = await InMemoryStateStore().load()
        assert loaded.categories.model_dump() == default_state().categories.model_dump()
        assert loaded.history == []

    @pytest.mark.asyncio
    async def test_roundtrip(self, state):
        store = InMemoryStateStore()
        updated = apply_metric_update(state, "health", [make_metric(6, 5)], now=T0)
        await store.save(updated)
        loaded = await store.load()
        assert loaded.model_dump_json() == updated.model_dump_json()
        assert store.saves == 1

    @pytest.mark.asyncio
    async def test_corrupt_json_loads_default(self):
        store = InMemoryStateStore(payload="{not json")
        loaded = await store.load()
        assert len(loaded.categories.all()) == 4

    @pytest.mark.asyncio
    async def test_wrong_shape_loads_default(self):
        store = InMemoryStateStore(payload='{"categories": {"assets": 1}, "history": []}')
        loaded = await store.load()
        assert loaded.categories.assets.label == "Assets & Skills"

    @pytest.mark.asyncio
    async def test_default_key(self):
        assert InMemoryStateStore().key == DEFAULT_STORAGE_KEY == settings.storage_key


class TestSqlStateStore:
    @pytest.mark.asyncio
    async def test_nothing_stored_loads_default(self, session_factory):
        store = SqlStateStore(session_factory)
        loaded = await store.load()
        assert loaded.categories.health.label == "Health & Eudaimonia"

    @pytest.mark.asyncio
    async def test_save_then_load(self, session_factory, state):
        store = SqlStateStore(session_factory)
        updated = apply_metric_update(state, "assets", [make_metric(50, 0)], now=T0)
        await store.save(updated)
        loaded = await SqlStateStore(session_factory).load()
        assert loaded.model_dump_json() == updated.model_dump_json()

    @pytest.mark.asyncio
    async def test_save_overwrites_single_row(self, session_factory, state):
        store = SqlStateStore(session_factory)
        first = apply_metric_update(state, "assets", [make_metric(1, 1)], now=T0)
        second = apply_metric_update(first, "assets", [make_metric(2, 1)], now=T0)
        await store.save(first)
        await store.save(second)

        async with session_factory() as session:
            result = await session.execute(text("SELECT COUNT(*) FROM kv_store"))
            assert result.scalar() == 1

        loaded = await store.load()
        assert len(loaded.history) == 2

    @pytest.mark.asyncio
    async def test_keys_are_isolated(self, session_factory, state):
        v1 = SqlStateStore(session_factory, key="life-index-v1")
        v2 = SqlStateStore(session_factory, key="life-index-v2")
        await v1.save(apply_metric_update(state, "assets", [], now=T0))
        loaded = await v2.load()
        assert loaded.history == []

    @pytest.mark.asyncio
    async def test_corrupt_row_loads_default(self, session_factory):
        store = SqlStateStore(session_factory)
        await store.read()  # creates the table
        async with session_factory() as session:
            await session.execute(
                text("INSERT INTO kv_store (key, value) VALUES (:key, :value)"),
                {"key": DEFAULT_STORAGE_KEY, "value": "garbage"},
            )
            await session.commit()
        loaded = await store.load()
        assert loaded.history == []
        assert len(loaded.categories.all()) == 4

    @pytest.mark.asyncio
    async def test_load_failure_falls_back(self, state):
        store = SqlStateStore(lambda: BrokenSession())
        loaded = await store.load()
        assert loaded.categories.model_dump() == state.categories.model_dump()

    @pytest.mark.asyncio
    async def test_save_failure_swallowed(self, state):
        store = SqlStateStore(lambda: BrokenSession())
        await store.save(state)  # must not raise

    @pytest.mark.asyncio
    async def test_connect_timeout_falls_back(self, state):
        store = SqlStateStore(lambda: TimeoutSession())
        loaded = await store.load()
        assert loaded.categories.model_dump() == state.categories.model_dump()
        await store.save(state)  # must not raise

    @pytest.mark.asyncio
    async def test_infinite_score_survives_reload(self, session_factory, state):
        store = SqlStateStore(session_factory)
        s1 = apply_metric_update(state, "health", [make_metric(1e300, 1e-10, "h1")], now=T0)
        s2 = apply_metric_update(s1, "cognition", [make_metric(3, 2, "c9")], now=T0)
        await store.save(s2)

        loaded = await SqlStateStore(session_factory).load()
        assert loaded.categories.health.score == math.inf
        assert loaded.history[-1].total_score == math.inf
        assert len(loaded.history) == 2
        assert [m.id for m in loaded.categories.cognition.metrics] == ["c9"]


class TestNonFiniteSnapshots:
    @pytest.mark.asyncio
    async def test_infinite_score_round_trip(self, state):
        store = InMemoryStateStore()
        updated = apply_metric_update(state, "health", [make_metric(1e300, 1e-10)], now=T0)
        await store.save(updated)
        assert '"score":null' not in store.payload
        loaded = await store.load()
        assert loaded.model_dump_json() == updated.model_dump_json()

    @pytest.mark.asyncio
    async def test_nan_score_round_trip(self, state):
        store = InMemoryStateStore()
        metrics = [make_metric(1e300, 1e-10, "a"), make_metric(-1e300, 1e-10, "b")]
        updated = apply_metric_update(state, "assets", metrics, now=T0)
        await store.save(updated)
        loaded = await store.load()
        assert math.isnan(loaded.categories.assets.score)
        assert math.isnan(loaded.history[-1].total_score)
        assert len(loaded.history) == 1

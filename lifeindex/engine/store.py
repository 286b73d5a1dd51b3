"""State store — one JSON snapshot of the whole LifeState under a fixed key.

Table: kv_store
  key (TEXT, primary key), value (TEXT, serialized LifeState)

load() falls back to the default state and save() is best-effort: neither
ever raises to the caller. Failures are logged.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lifeindex.config import settings
from lifeindex.engine.defaults import default_state
from lifeindex.engine.models import LifeState
from lifeindex.logging import get_logger

logger = get_logger(__name__)

DEFAULT_STORAGE_KEY = settings.storage_key

# ValueError covers json decoding and pydantic.ValidationError.
# asyncio.TimeoutError is not a TimeoutError subclass before 3.11.
STORE_ERRORS = (SQLAlchemyError, OSError, ValueError, TimeoutError, asyncio.TimeoutError)


class StateStore(ABC):
    def __init__(self, key: str = DEFAULT_STORAGE_KEY):
        self.key = key

    @abstractmethod
    async def read(self) -> str | None:
        """Return the raw stored snapshot, or None when nothing is stored."""

    @abstractmethod
    async def write(self, payload: str) -> None:
        """Replace the stored snapshot."""

    async def load(self) -> LifeState:
        try:
            raw = await self.read()
            if not raw:
                return default_state()
            return LifeState.model_validate_json(raw)
        except STORE_ERRORS as exc:
            logger.error("state_load_failed", key=self.key, error=str(exc))
            return default_state()

    async def save(self, state: LifeState) -> None:
        try:
            await self.write(state.model_dump_json())
        except STORE_ERRORS as exc:
            logger.error("state_save_failed", key=self.key, error=str(exc))


class InMemoryStateStore(StateStore):
    def __init__(self, key: str = DEFAULT_STORAGE_KEY, payload: str | None = None):
        super().__init__(key)
        self.payload = payload
        self.saves = 0

    async def read(self) -> str | None:
        return self.payload

    async def write(self, payload: str) -> None:
        self.payload = payload
        self.saves += 1


class SqlStateStore(StateStore):
    """Key-value snapshot table over an async SQLAlchemy session factory.

    Works on SQLite (aiosqlite) and PostgreSQL (asyncpg); the upsert uses
    ON CONFLICT, which both dialects support.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], key: str = DEFAULT_STORAGE_KEY):
        super().__init__(key)
        self._session_factory = session_factory
        self._table_ready = False

    async def _ensure_table(self, session: AsyncSession) -> None:
        if self._table_ready:
            return
        await session.execute(
            text("CREATE TABLE IF NOT EXISTS kv_store (key TEXT PRIMARY KEY, value TEXT NOT NULL)")
        )
        await session.commit()
        self._table_ready = True

    async def read(self) -> str | None:
        async with self._session_factory() as session:
            await self._ensure_table(session)
            result = await session.execute(
                text("SELECT value FROM kv_store WHERE key = :key"),
                {"key": self.key},
            )
            row = result.fetchone()
            return row[0] if row is not None else None

    async def write(self, payload: str) -> None:
        async with self._session_factory() as session:
            await self._ensure_table(session)
            await session.execute(
                text(
                    "INSERT INTO kv_store (key, value) VALUES (:key, :value) "
                    "ON CONFLICT (key) DO UPDATE SET value = excluded.value"
                ),
                {"key": self.key, "value": payload},
            )
            await session.commit()

from contextlib import asynccontextmanager

from fastapi import FastAPI

from lifeindex.config import settings
from lifeindex.db import async_session, engine
from lifeindex.engine.insight import InsightGenerator
from lifeindex.engine.router import router as index_router
from lifeindex.engine.service import LifeIndexService
from lifeindex.engine.store import SqlStateStore
from lifeindex.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    service = LifeIndexService(SqlStateStore(async_session, key=settings.storage_key))
    await service.start()
    app.state.life_index = service
    app.state.insight = InsightGenerator.from_settings()
    yield
    await engine.dispose()


app = FastAPI(title="LifeIndex", version="0.1.0", lifespan=lifespan)
app.include_router(index_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "index": {
            "state": "/index/state",
            "summary": "/index/summary",
            "chart": "/index/chart",
            "category": "/index/categories/{category_id}",
            "metrics": "/index/categories/{category_id}/metrics",
            "analyze": "/index/analyze",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}

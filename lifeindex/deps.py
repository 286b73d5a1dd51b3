"""FastAPI dependencies for the live service and the insight generator."""

from fastapi import Request

from lifeindex.engine.insight import InsightGenerator
from lifeindex.engine.service import LifeIndexService


async def get_service(request: Request) -> LifeIndexService:
    return request.app.state.life_index


async def get_insight_generator(request: Request) -> InsightGenerator:
    return request.app.state.insight

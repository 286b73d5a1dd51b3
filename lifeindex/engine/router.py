"""Index HTTP router — state, scores, chart, metric edits, analysis."""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from lifeindex.deps import get_insight_generator, get_service
from lifeindex.engine.aggregator import chart_series
from lifeindex.engine.insight import InsightGenerator
from lifeindex.engine.models import CategoryData, CategoryId, LifeState, Metric
from lifeindex.engine.service import LifeIndexService


class IndexJSONResponse(JSONResponse):
    """JSON that keeps overflowed scores as Infinity/NaN, matching the stored snapshot."""

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


router = APIRouter(prefix="/index", tags=["index"], default_response_class=IndexJSONResponse)


# ---------------------------------------------------------------------------
# Read views
# ---------------------------------------------------------------------------


@router.get("/state", response_model=LifeState)
async def get_state(service: LifeIndexService = Depends(get_service)) -> LifeState:
    return service.state


@router.get("/summary")
async def get_summary(service: LifeIndexService = Depends(get_service)) -> dict:
    state = service.state
    return {
        "total_index": service.total_index(),
        "scores": state.categories.scores(),
        "last_updated": state.last_updated.isoformat(),
        "history_points": len(state.history),
    }


@router.get("/chart")
async def get_chart(service: LifeIndexService = Depends(get_service)) -> list[dict]:
    return chart_series(service.state)


@router.get("/categories/{category_id}", response_model=CategoryData)
async def get_category(
    category_id: CategoryId,
    service: LifeIndexService = Depends(get_service),
) -> CategoryData:
    return service.state.categories.get(category_id)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


@router.put("/categories/{category_id}/metrics", response_model=LifeState)
async def put_metrics(
    category_id: CategoryId,
    metrics: list[Metric],
    service: LifeIndexService = Depends(get_service),
) -> LifeState:
    return await service.update_metrics(category_id, metrics)


@router.post("/analyze")
async def analyze(
    service: LifeIndexService = Depends(get_service),
    insight: InsightGenerator = Depends(get_insight_generator),
) -> dict[str, str]:
    return {"analysis": await insight.analyze(service.state)}

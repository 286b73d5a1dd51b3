"""LifeState contract — Pydantic v2 models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

HISTORY_LIMIT = 30


class CategoryId(str, Enum):
    assets = "assets"
    health = "health"
    cognition = "cognition"
    contribution = "contribution"


class MetricType(str, Enum):
    numeric = "numeric"  # counted quantity
    scale = "scale"  # bounded rating


class Metric(BaseModel):
    """One tracked quantity. `target` is the value worth exactly 100 points."""

    model_config = ConfigDict(allow_inf_nan=False)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "New Component"
    value: float = 0.0
    target: float = 100.0
    unit: str = "units"
    type: MetricType = MetricType.numeric  # descriptive only, never used in scoring
    description: str | None = None


class CategoryData(BaseModel):
    model_config = ConfigDict(ser_json_inf_nan="constants")

    id: CategoryId
    label: str
    color: str
    metrics: list[Metric] = Field(default_factory=list)
    score: float = 0.0  # derived from metrics, uncapped


class Categories(BaseModel):
    """Fixed four-slot record. Categories can't be added or removed."""

    model_config = ConfigDict(extra="forbid", ser_json_inf_nan="constants")

    assets: CategoryData
    health: CategoryData
    cognition: CategoryData
    contribution: CategoryData

    @model_validator(mode="after")
    def _slot_ids_match(self) -> Categories:
        for cid in CategoryId:
            if getattr(self, cid.value).id != cid:
                raise ValueError(f"Category in slot '{cid.value}' has id '{getattr(self, cid.value).id.value}'")
        return self

    def get(self, category_id: CategoryId | str) -> CategoryData:
        return getattr(self, CategoryId(category_id).value)

    def all(self) -> list[CategoryData]:
        return [getattr(self, cid.value) for cid in CategoryId]

    def scores(self) -> dict[str, float]:
        return {cid.value: getattr(self, cid.value).score for cid in CategoryId}

    def replace(self, category: CategoryData) -> Categories:
        return self.model_copy(update={category.id.value: category})


class HistoryPoint(BaseModel):
    """Snapshot of all scores at one moment. Never edited after creation."""

    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    date: datetime
    total_score: float
    assets: float
    health: float
    cognition: float
    contribution: float


class LifeState(BaseModel):
    # Overflowed scores (inf, nan) are written as Infinity/NaN so they load back.
    model_config = ConfigDict(ser_json_inf_nan="constants")

    categories: Categories
    history: list[HistoryPoint] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("history")
    @classmethod
    def _keep_most_recent(cls, v: list[HistoryPoint]) -> list[HistoryPoint]:
        return v[-HISTORY_LIMIT:]

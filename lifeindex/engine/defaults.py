"""Hardcoded starting state — seed metrics for a fresh install."""

from __future__ import annotations

from datetime import datetime, timezone

from lifeindex.engine.models import (
    Categories,
    CategoryData,
    CategoryId,
    LifeState,
    Metric,
    MetricType,
)
from lifeindex.engine.scoring import score

numeric = MetricType.numeric
scale = MetricType.scale


def _category(cid: CategoryId, label: str, color: str, metrics: list[Metric]) -> CategoryData:
    return CategoryData(id=cid, label=label, color=color, metrics=metrics, score=score(metrics))


def default_categories() -> Categories:
    return Categories(
        assets=_category(
            CategoryId.assets,
            "Assets & Skills",
            "#10b981",
            [
                Metric(id="m1", name="Liquid Cash", value=15000, target=10000, unit="$", type=numeric,
                       description="Reference: $10k = 100pts"),
                Metric(id="m2", name="Investments", value=60000, target=50000, unit="$", type=numeric,
                       description="Reference: $50k = 100pts"),
                Metric(id="m3", name="Skill Value", value=7, target=5, unit="Lvl", type=scale,
                       description="Reference: Lvl 5 = 100pts"),
            ],
        ),
        health=_category(
            CategoryId.health,
            "Health & Eudaimonia",
            "#ef4444",
            [
                Metric(id="h1", name="Sleep Quality", value=7.5, target=7, unit="/10", type=scale),
                Metric(id="h2", name="Exercise", value=180, target=150, unit="mins", type=numeric),
                Metric(id="h3", name="Eudaimonia", value=6, target=5, unit="/10", type=scale),
            ],
        ),
        cognition=_category(
            CategoryId.cognition,
            "Cognition & Wisdom",
            "#3b82f6",
            [
                Metric(id="c1", name="Deep Reading", value=3, target=2, unit="hrs/wk", type=numeric),
                Metric(id="c2", name="Learning Index", value=6, target=5, unit="/10", type=scale),
                Metric(id="c3", name="Critical Thinking", value=7, target=6, unit="/10", type=scale),
            ],
        ),
        contribution=_category(
            CategoryId.contribution,
            "Contribution & Connection",
            "#eab308",
            [
                Metric(id="s1", name="Family Time", value=8, target=6, unit="hrs/wk", type=numeric),
                Metric(id="s2", name="Social Impact", value=4, target=5, unit="/10", type=scale),
                Metric(id="s3", name="Relationships", value=8, target=7, unit="/10", type=scale),
            ],
        ),
    )


def default_state(now: datetime | None = None) -> LifeState:
    return LifeState(
        categories=default_categories(),
        history=[],
        last_updated=now if now is not None else datetime.now(timezone.utc),
    )

"""Insight generator — natural-language market report for the Life Index.

Sends one chat-completion request to an OpenAI-compatible endpoint (Gemini
by default). Returns the generated text, or a fixed message when the key is
missing or the call fails for any reason.
"""

from __future__ import annotations

import json
import math
from typing import Any

from openai import AsyncOpenAI

from lifeindex.config import settings
from lifeindex.engine.models import LifeState
from lifeindex.logging import get_logger

logger = get_logger(__name__)

MISSING_KEY_MESSAGE = "API Key is missing. Please configure your environment."
UNAVAILABLE_MESSAGE = "Analysis currently unavailable due to market volatility (API Error)."
EMPTY_MESSAGE = "No analysis generated."

PROMPT_TEMPLATE = """
You are the Chief Life Officer and a Financial Analyst for a "Life Index" (an uncapped, weighted index similar to the S&P 500, but for personal life).

Current Market Data:
{market_data}

Context:
- This index is UNBOUNDED (no max score). It grows as the user accumulates value in Assets, Health, Cognition, and Contribution.
- Each component is weighted: "Ref" is the value required to generate 100 index points.

Task:
1. Provide a "Market Report". Is the index Bullish (growing) or Bearish?
2. Analyze the portfolio diversity (Balance between the 4 sectors).
3. Identify "Undervalued Assets" (areas with low points relative to others).
4. Give 3 "Buy" recommendations (high-ROI actions) to boost the index.

Style: Financial news anchor meets Stoic philosopher. High energy, metaphors about liquidity/dividends/compound interest. Keep it under 250 words.
"""


def _js_number(number: float) -> float | int:
    """Whole numbers as ints (220, not 220.0), up to where JS switches to exponents."""
    if math.isfinite(number) and float(number).is_integer() and abs(number) < 1e21:
        return int(number)
    return number


def _fmt(number: float) -> str:
    return str(_js_number(number))


def build_summary(state: LifeState) -> dict[str, Any]:
    """Condensed view of the state sent to the model.

    total_index is the last recorded history total (0 before any update).
    """
    return {
        "totalIndex": _js_number(state.history[-1].total_score) if state.history else 0,
        "categories": [
            {
                "name": c.label,
                "points": _js_number(c.score),
                "components": ", ".join(
                    f"{m.name}: {_fmt(m.value)} {m.unit} (Ref: {_fmt(m.target)})" for m in c.metrics
                ),
            }
            for c in state.categories.all()
        ],
    }


def build_prompt(state: LifeState) -> str:
    return PROMPT_TEMPLATE.format(market_data=json.dumps(build_summary(state), indent=2))


class InsightGenerator:
    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gemini-3-flash-preview",
        base_url: str | None = None,
        temperature: float = 0.7,
        client: Any = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.temperature = temperature
        self._client = client

    @classmethod
    def from_settings(cls) -> InsightGenerator:
        return cls(
            api_key=settings.insight_api_key,
            model=settings.insight_model,
            base_url=settings.insight_base_url,
            temperature=settings.insight_temperature,
        )

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    async def analyze(self, state: LifeState) -> str:
        if not self.api_key:
            return MISSING_KEY_MESSAGE

        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": build_prompt(state)}],
                temperature=self.temperature,
            )
            text = resp.choices[0].message.content
        except Exception as exc:
            logger.error("insight_generation_failed", model=self.model, error=str(exc))
            return UNAVAILABLE_MESSAGE

        return text or EMPTY_MESSAGE

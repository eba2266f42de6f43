"""
Prompt-driven market analyzer.

Wraps a text generation coroutine (an LLM agent) and turns its reply into
validated opportunities. The reply must contain a JSON array of opportunity
objects, optionally inside a fenced code block or under an "opportunities"
key.
"""

import json
import re
from typing import Any, Awaitable, Callable, Sequence

import structlog

from ..errors import AnalysisError, BoundaryValidationError
from ..models.trading import Opportunity
from ..validation.boundary import validate_opportunities
from .base import MarketAnalyzer

logger = structlog.get_logger(__name__)

GenerateFn = Callable[[str], Awaitable[str]]

ANALYSIS_PROMPT = (
    "Analyze market conditions for {pairs} and identify trading opportunities. "
    "Consider current prices, trends, and market sentiment. "
    "Reply with a JSON array where each element has the keys "
    '"pair", "action" ("buy", "sell" or "hold"), "confidence" (0 to 1), '
    '"reason" and "price".'
)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def extract_json_payload(text: str) -> Any:
    """
    Find the first JSON array or object in a model reply.

    Raises:
        ValueError: If the reply contains no decodable JSON
    """
    fenced = _FENCED_BLOCK.search(text)
    candidates = [fenced.group(1)] if fenced else []
    candidates.append(text)

    decoder = json.JSONDecoder()
    for candidate in candidates:
        for index, char in enumerate(candidate):
            if char not in "[{":
                continue
            try:
                payload, _end = decoder.raw_decode(candidate, index)
            except json.JSONDecodeError:
                continue
            if isinstance(payload, dict) and "opportunities" in payload:
                return payload["opportunities"]
            return payload

    raise ValueError("no JSON payload found in reply")


class PromptedMarketAnalyzer(MarketAnalyzer):
    """MarketAnalyzer that asks a text generation agent for opportunities."""

    def __init__(self, generate: GenerateFn, prompt_template: str = ANALYSIS_PROMPT) -> None:
        self.generate = generate
        self.prompt_template = prompt_template

    def build_prompt(self, pairs: Sequence[str]) -> str:
        return self.prompt_template.format(pairs=", ".join(pairs))

    async def analyze(self, pairs: Sequence[str]) -> list[Opportunity]:
        pairs = list(pairs)
        if not pairs:
            raise AnalysisError("No trading pairs to analyze")

        try:
            reply = await self.generate(self.build_prompt(pairs))
        except Exception as e:
            raise AnalysisError(f"Analysis agent failed: {e}", pairs=pairs) from e

        if not isinstance(reply, str):
            raise AnalysisError(
                f"Analysis agent returned {type(reply).__name__}, expected text",
                pairs=pairs
            )

        try:
            payload = extract_json_payload(reply)
            opportunities = validate_opportunities(payload)
        except (ValueError, BoundaryValidationError) as e:
            logger.warning("Unusable analysis reply", pairs=pairs, error=str(e))
            raise AnalysisError(f"Could not parse analysis reply: {e}", pairs=pairs) from e

        logger.debug("Parsed analysis reply", pairs=pairs, opportunities=len(opportunities))
        return opportunities

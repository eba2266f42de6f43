"""Pytest configuration and shared fixtures."""

import asyncio
import pytest
from datetime import datetime, timezone
from typing import Optional, Sequence

from tradeflow.collaborators.base import MarketAnalyzer, TradeExecutor, TradeReceipt
from tradeflow.models.trading import Opportunity, TradeAction

FIXED_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    """Clock that always reports FIXED_TIME."""
    return FIXED_TIME


class StubAnalyzer(MarketAnalyzer):
    """Analyzer returning canned opportunities and recording calls."""

    def __init__(self, opportunities: Sequence[Opportunity] = (),
                 error: Optional[Exception] = None):
        self.opportunities = list(opportunities)
        self.error = error
        self.calls: list[list[str]] = []

    async def analyze(self, pairs):
        self.calls.append(list(pairs))
        if self.error is not None:
            raise self.error
        return list(self.opportunities)


class StubExecutor(TradeExecutor):
    """Executor that fails or delays selected pairs and records calls."""

    def __init__(self, failures: Optional[dict] = None, delays: Optional[dict] = None):
        self.failures = failures or {}
        self.delays = delays or {}
        self.calls: list[tuple[str, str]] = []

    async def execute(self, opportunity, amount):
        self.calls.append((opportunity.pair, amount))
        delay = self.delays.get(opportunity.pair)
        if delay:
            await asyncio.sleep(delay)
        if opportunity.pair in self.failures:
            raise self.failures[opportunity.pair]
        return TradeReceipt(amount=amount, status="executed")


def make_opportunity(pair: str = "USDC/WETH", action: str = "buy",
                     confidence: float = 0.8, price: float = 100.0) -> Opportunity:
    """Build an opportunity with sensible defaults."""
    return Opportunity(
        pair=pair,
        action=TradeAction(action),
        confidence=confidence,
        reason=f"{action} signal for {pair}",
        price=price,
    )


@pytest.fixture
def sample_opportunities() -> list[Opportunity]:
    """One strong buy and one weak hold."""
    return [
        Opportunity(
            pair="USDC/WETH",
            action=TradeAction.BUY,
            confidence=0.75,
            reason="Strong bullish trend detected",
            price=2500.50,
        ),
        Opportunity(
            pair="USDC/WBTC",
            action=TradeAction.HOLD,
            confidence=0.60,
            reason="Sideways movement, waiting for breakout",
            price=45000.00,
        ),
    ]


@pytest.fixture
def sample_analysis_reply() -> str:
    """Agent reply wrapping opportunities in a fenced JSON block."""
    return (
        "Here is my analysis.\n"
        "```json\n"
        '[{"pair": "USDC/WETH", "action": "buy", "confidence": 0.75, '
        '"reason": "Strong bullish trend detected", "price": 2500.5}, '
        '{"pair": "USDC/WBTC", "action": "hold", "confidence": 0.6, '
        '"reason": "Sideways movement", "price": 45000}]\n'
        "```\n"
    )


@pytest.fixture
def opportunity_factory():
    """Factory for opportunities."""
    return make_opportunity


@pytest.fixture
def analyzer_factory():
    """Factory for stub analyzers."""
    return StubAnalyzer


@pytest.fixture
def executor_factory():
    """Factory for stub executors."""
    return StubExecutor


@pytest.fixture
def clock():
    """Deterministic clock for timestamps."""
    return fixed_clock

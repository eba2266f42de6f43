"""
Trading pipeline data models.

This module defines the immutable values that flow between pipeline steps:
opportunities proposed by analysis, outcomes of execution attempts, and the
summary returned at the end of a run.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class TradeAction(str, Enum):
    """Action proposed for a trading pair."""
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class OutcomeStatus(str, Enum):
    """Result of attempting one opportunity."""
    EXECUTED = "executed"
    FAILED = "failed"
    SKIPPED = "skipped"


class FinalStatus(str, Enum):
    """Status of the pipeline run, independent of individual trade results."""
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Opportunity:
    """Candidate trading action proposed by market analysis."""
    pair: str
    action: TradeAction
    confidence: float           # 0.0 - 1.0
    reason: str
    price: float                # Quoted price at analysis time, > 0

    def __post_init__(self) -> None:
        if not self.pair:
            raise ValueError("pair must be a non-empty string")
        if not isinstance(self.action, TradeAction):
            object.__setattr__(self, "action", TradeAction(self.action))
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got: {self.confidence}")
        if not math.isfinite(self.price) or self.price <= 0:
            raise ValueError(f"price must be positive and finite, got: {self.price}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "pair": self.pair,
            "action": self.action.value,
            "confidence": self.confidence,
            "reason": self.reason,
            "price": self.price,
        }


@dataclass(frozen=True)
class ExecutionOutcome:
    """Recorded result of attempting to execute one opportunity."""
    pair: str
    action: str
    amount: str
    status: OutcomeStatus
    timestamp: str              # ISO-8601
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result = {
            "pair": self.pair,
            "action": self.action,
            "amount": self.amount,
            "status": self.status.value,
            "timestamp": self.timestamp,
        }
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class CycleRequest:
    """Input of the autonomous trading pipeline."""
    trading_pairs: tuple[str, ...]
    max_trades_per_cycle: int = 10


@dataclass(frozen=True)
class MarketAnalysis:
    """Output of the analyze-market step."""
    opportunities: tuple[Opportunity, ...]
    analysis_time: str
    max_trades_per_cycle: int = 10


@dataclass(frozen=True)
class ExecutionReport:
    """Output of the execute-trade step."""
    outcomes: tuple[ExecutionOutcome, ...]
    total_trades: int


@dataclass(frozen=True)
class PipelineRunSummary:
    """Terminal artifact of one pipeline run."""
    final_status: FinalStatus
    execution_time: str
    total_trades: int
    outcomes: tuple[ExecutionOutcome, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Render with the camelCase keys used on the wire."""
        return {
            "finalStatus": self.final_status.value,
            "executionTime": self.execution_time,
            "totalTrades": self.total_trades,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }

"""
Trade execution with per-opportunity failure isolation.

Every eligible opportunity gets exactly one attempt. Attempts are modelled
as result values (filled, rejected or skipped) and reduced to execution
outcomes in input order, whatever order the attempts finish in.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence, Union

import structlog

from ..collaborators.base import TradeExecutor, TradeReceipt
from ..config.defaults import ExecutionParams
from ..errors import ExecutionError
from ..models.trading import ExecutionOutcome, Opportunity, OutcomeStatus
from ..utils.time import Clock, now_iso, utc_now

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AmountPolicy:
    """Per-trade amount, configurable per pair."""
    default_amount: str = "100"
    overrides: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_params(cls, params: ExecutionParams) -> "AmountPolicy":
        return cls(
            default_amount=params.default_amount,
            overrides=dict(params.amount_overrides),
        )

    def amount_for(self, opportunity: Opportunity) -> str:
        return self.overrides.get(opportunity.pair, self.default_amount)


@dataclass(frozen=True)
class TradeFilled:
    opportunity: Opportunity
    receipt: TradeReceipt
    timestamp: str


@dataclass(frozen=True)
class TradeRejected:
    opportunity: Opportunity
    amount: str
    error: str
    timestamp: str


@dataclass(frozen=True)
class TradeSkipped:
    opportunity: Opportunity
    amount: str
    reason: str
    timestamp: str


TradeAttempt = Union[TradeFilled, TradeRejected, TradeSkipped]


def to_outcome(attempt: TradeAttempt) -> ExecutionOutcome:
    """Reduce one attempt to its execution outcome."""
    opportunity = attempt.opportunity
    if isinstance(attempt, TradeFilled):
        return ExecutionOutcome(
            pair=opportunity.pair,
            action=opportunity.action.value,
            amount=attempt.receipt.amount,
            status=OutcomeStatus.EXECUTED,
            timestamp=attempt.timestamp,
        )
    if isinstance(attempt, TradeRejected):
        return ExecutionOutcome(
            pair=opportunity.pair,
            action=opportunity.action.value,
            amount=attempt.amount,
            status=OutcomeStatus.FAILED,
            timestamp=attempt.timestamp,
            error=attempt.error,
        )
    return ExecutionOutcome(
        pair=opportunity.pair,
        action=opportunity.action.value,
        amount=attempt.amount,
        status=OutcomeStatus.SKIPPED,
        timestamp=attempt.timestamp,
        error=attempt.reason,
    )


def _error_message(error: Exception) -> str:
    message = str(error)
    return message if message else type(error).__name__


class TradeExecutionAdapter:
    """Runs a batch of opportunities through a TradeExecutor."""

    def __init__(
        self,
        executor: TradeExecutor,
        amount_policy: Optional[AmountPolicy] = None,
        max_concurrency: int = 4,
        clock: Clock = utc_now
    ) -> None:
        if max_concurrency <= 0:
            raise ValueError(f"max_concurrency must be positive, got: {max_concurrency}")
        self.executor = executor
        self.amount_policy = amount_policy or AmountPolicy()
        self.max_concurrency = max_concurrency
        self.clock = clock
        self.logger = logger

    async def execute_all(
        self,
        opportunities: Sequence[Opportunity],
        max_trades: Optional[int] = None
    ) -> list[ExecutionOutcome]:
        """
        Attempt every opportunity and collect outcomes in input order.

        Args:
            opportunities: Eligible opportunities
            max_trades: Dispatch at most this many; the rest are recorded as skipped

        Returns:
            One outcome per opportunity, in the order given
        """
        opportunities = list(opportunities)
        limit = len(opportunities) if max_trades is None else max(max_trades, 0)
        dispatched = opportunities[:limit]
        overflow = opportunities[limit:]

        semaphore = asyncio.Semaphore(self.max_concurrency)
        attempts: list[TradeAttempt] = list(
            await asyncio.gather(*(self._attempt(o, semaphore) for o in dispatched))
        )
        attempts.extend(
            TradeSkipped(
                opportunity=o,
                amount=self.amount_policy.amount_for(o),
                reason=f"max trades per cycle ({limit}) reached",
                timestamp=now_iso(self.clock),
            )
            for o in overflow
        )

        if overflow:
            self.logger.info(
                "Skipped opportunities over the per-cycle limit",
                max_trades=limit,
                skipped=[o.pair for o in overflow]
            )

        return [to_outcome(attempt) for attempt in attempts]

    async def _attempt(self, opportunity: Opportunity, semaphore: asyncio.Semaphore) -> TradeAttempt:
        amount = self.amount_policy.amount_for(opportunity)

        async with semaphore:
            try:
                receipt = await self.executor.execute(opportunity, amount)
                if not isinstance(receipt, TradeReceipt):
                    raise ExecutionError(
                        f"Executor returned {type(receipt).__name__}, expected TradeReceipt",
                        pair=opportunity.pair,
                    )
            except ExecutionError as e:
                self.logger.warning(
                    "Trade execution failed",
                    pair=opportunity.pair,
                    action=opportunity.action.value,
                    error=str(e)
                )
                return TradeRejected(opportunity, amount, _error_message(e), now_iso(self.clock))
            except Exception as e:
                self.logger.error(
                    "Unexpected error executing trade",
                    pair=opportunity.pair,
                    action=opportunity.action.value,
                    error=str(e),
                    error_type=type(e).__name__
                )
                return TradeRejected(
                    opportunity, amount, f"Unexpected error: {_error_message(e)}", now_iso(self.clock)
                )

        if not receipt.succeeded:
            self.logger.warning(
                "Trade not executed",
                pair=opportunity.pair,
                status=receipt.status
            )
            return TradeRejected(
                opportunity, amount, f"Trade not executed: status '{receipt.status}'", now_iso(self.clock)
            )

        self.logger.info(
            "Trade executed",
            pair=opportunity.pair,
            action=opportunity.action.value,
            amount=receipt.amount
        )
        return TradeFilled(opportunity, receipt, now_iso(self.clock))

"""
Autonomous trading cycle coordinator.

Runs one trading cycle through the pipeline:
Request -> Market Analysis -> Gating -> Trade Execution -> Summary
"""

import asyncio
from typing import Optional, Sequence

import structlog

from .collaborators.base import MarketAnalyzer, TradeExecutor
from .config.defaults import AppConfig, get_default_config
from .errors import PipelineRunError
from .models.trading import CycleRequest, PipelineRunSummary
from .pipeline.definition import PipelineDefinition
from .pipeline.runner import PipelineRunner, RunFailure
from .pipeline.steps import build_autonomous_trading_pipeline
from .utils.time import Clock, utc_now

logger = structlog.get_logger(__name__)


class TradingCycleEngine:
    """
    Coordinator for autonomous trading cycles.

    The pipeline definition is built once from the injected collaborators
    and configuration; each call to ``run_autonomous_trading_cycle`` is an
    independent run with its own payloads.
    """

    def __init__(
        self,
        analyzer: MarketAnalyzer,
        executor: TradeExecutor,
        config: Optional[AppConfig] = None,
        runner: Optional[PipelineRunner] = None,
        clock: Clock = utc_now
    ) -> None:
        self.logger = logger
        self.config = config or get_default_config()
        self.runner = runner or PipelineRunner()
        self.definition: PipelineDefinition = build_autonomous_trading_pipeline(
            analyzer, executor, self.config, clock=clock
        )

        self.logger.info(
            "Trading cycle engine initialized",
            pipeline_id=self.definition.pipeline_id,
            steps=list(self.definition.step_ids)
        )

    async def run_autonomous_trading_cycle(
        self,
        pairs: Sequence[str],
        max_trades_per_cycle: Optional[int] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> PipelineRunSummary:
        """
        Run one analyze -> execute -> record cycle.

        Args:
            pairs: Trading pairs to analyze, e.g. ["USDC/WETH"]
            max_trades_per_cycle: Cap on executed trades, defaults to the
                configured value (10)
            cancel_event: Optional event that stops the run between steps

        Returns:
            Summary of the cycle, possibly containing failed outcomes

        Raises:
            ValueError: If pairs is empty or the trade cap is not positive
            PipelineRunError: If a step could not complete
        """
        if isinstance(pairs, str):
            raise ValueError("pairs must be a sequence of pair names, not a string")
        if not pairs:
            raise ValueError("At least one trading pair is required")
        if max_trades_per_cycle is None:
            max_trades_per_cycle = self.config.execution.max_trades_per_cycle
        if max_trades_per_cycle <= 0:
            raise ValueError(f"max_trades_per_cycle must be positive, got: {max_trades_per_cycle}")

        request = CycleRequest(
            trading_pairs=tuple(pairs),
            max_trades_per_cycle=max_trades_per_cycle,
        )

        result = await self.runner.run(self.definition, request, cancel_event=cancel_event)

        if isinstance(result, RunFailure):
            self.logger.error(
                "Trading cycle aborted",
                failed_step_id=result.failed_step_id,
                error=str(result.cause),
                completed_steps=list(result.completed_steps)
            )
            raise PipelineRunError(result) from result.cause

        return result.output


async def run_autonomous_trading_cycle(
    analyzer: MarketAnalyzer,
    executor: TradeExecutor,
    pairs: Sequence[str],
    max_trades_per_cycle: int = 10,
    config: Optional[AppConfig] = None,
    cancel_event: Optional[asyncio.Event] = None
) -> PipelineRunSummary:
    """Convenience wrapper running a single cycle with a fresh engine."""
    engine = TradingCycleEngine(analyzer, executor, config)
    return await engine.run_autonomous_trading_cycle(
        pairs,
        max_trades_per_cycle=max_trades_per_cycle,
        cancel_event=cancel_event,
    )

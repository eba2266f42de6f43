"""
Steps of the autonomous trading pipeline.

    analyze-market  CycleRequest   -> MarketAnalysis
    execute-trade   MarketAnalysis -> ExecutionReport
    record-results  ExecutionReport -> PipelineRunSummary
"""

from typing import Optional

import structlog

from ..collaborators.base import MarketAnalyzer, TradeExecutor
from ..config.defaults import AppConfig, get_default_config
from ..errors import AnalysisError, StepContractError
from ..models.trading import (
    CycleRequest,
    ExecutionReport,
    MarketAnalysis,
    Opportunity,
    PipelineRunSummary,
)
from ..utils.time import Clock, now_iso, utc_now
from .aggregator import aggregate_outcomes, count_executed
from .contracts import StepContract
from .definition import PipelineDefinition
from .execution import AmountPolicy, TradeExecutionAdapter
from .filter import FilterPolicy, filter_opportunities

logger = structlog.get_logger(__name__)

AUTONOMOUS_TRADING_PIPELINE_ID = "autonomous-trading"
ANALYZE_MARKET_STEP_ID = "analyze-market"
EXECUTE_TRADE_STEP_ID = "execute-trade"
RECORD_RESULTS_STEP_ID = "record-results"


class AnalyzeMarketStep(StepContract[CycleRequest, MarketAnalysis]):
    """Asks the market analyzer for opportunities on the requested pairs."""

    id = ANALYZE_MARKET_STEP_ID
    input_type = CycleRequest
    output_type = MarketAnalysis

    def __init__(self, analyzer: MarketAnalyzer, clock: Clock = utc_now) -> None:
        self.analyzer = analyzer
        self.clock = clock

    async def execute(self, payload: CycleRequest) -> MarketAnalysis:
        pairs = list(payload.trading_pairs)
        try:
            opportunities = await self.analyzer.analyze(pairs)
        except AnalysisError:
            raise
        except Exception as e:
            raise AnalysisError(f"Market analysis failed: {e}", pairs=pairs) from e

        if opportunities is None:
            raise AnalysisError("Market analyzer returned no result", pairs=pairs)

        opportunities = tuple(opportunities)
        for item in opportunities:
            if not isinstance(item, Opportunity):
                raise AnalysisError(
                    f"Market analyzer returned {type(item).__name__}, expected Opportunity",
                    pairs=pairs,
                )

        logger.info(
            "Market analysis complete",
            pairs=pairs,
            opportunities=len(opportunities)
        )
        return MarketAnalysis(
            opportunities=opportunities,
            analysis_time=now_iso(self.clock),
            max_trades_per_cycle=payload.max_trades_per_cycle,
        )


class ExecuteTradeStep(StepContract[MarketAnalysis, ExecutionReport]):
    """Gates opportunities and executes the eligible ones."""

    id = EXECUTE_TRADE_STEP_ID
    input_type = MarketAnalysis
    output_type = ExecutionReport

    def __init__(self, adapter: TradeExecutionAdapter, policy: Optional[FilterPolicy] = None) -> None:
        self.adapter = adapter
        self.policy = policy or FilterPolicy()

    async def execute(self, payload: MarketAnalysis) -> ExecutionReport:
        eligible = filter_opportunities(payload.opportunities, self.policy)
        outcomes = await self.adapter.execute_all(
            eligible, max_trades=payload.max_trades_per_cycle
        )
        return ExecutionReport(
            outcomes=tuple(outcomes),
            total_trades=count_executed(outcomes),
        )


class RecordResultsStep(StepContract[ExecutionReport, PipelineRunSummary]):
    """Produces the run summary."""

    id = RECORD_RESULTS_STEP_ID
    input_type = ExecutionReport
    output_type = PipelineRunSummary

    def __init__(self, clock: Clock = utc_now) -> None:
        self.clock = clock

    async def execute(self, payload: ExecutionReport) -> PipelineRunSummary:
        summary = aggregate_outcomes(payload.outcomes, self.clock)
        if summary.total_trades != payload.total_trades:
            raise StepContractError(
                f"Execution report counts {payload.total_trades} executed trades, "
                f"outcomes show {summary.total_trades}",
                step_id=self.id,
                expected_type=ExecutionReport.__qualname__,
                actual_type=type(payload).__qualname__,
            )
        logger.info(
            "Trading cycle recorded",
            final_status=summary.final_status.value,
            total_trades=summary.total_trades,
            outcomes=len(summary.outcomes)
        )
        return summary


def build_autonomous_trading_pipeline(
    analyzer: MarketAnalyzer,
    executor: TradeExecutor,
    config: Optional[AppConfig] = None,
    clock: Clock = utc_now
) -> PipelineDefinition:
    """Assemble the analyze -> execute -> record pipeline."""
    if config is None:
        config = get_default_config()

    adapter = TradeExecutionAdapter(
        executor,
        amount_policy=AmountPolicy.from_params(config.execution),
        max_concurrency=config.execution.max_concurrency,
        clock=clock,
    )

    return PipelineDefinition(
        pipeline_id=AUTONOMOUS_TRADING_PIPELINE_ID,
        steps=(
            AnalyzeMarketStep(analyzer, clock=clock),
            ExecuteTradeStep(adapter, FilterPolicy.from_params(config.filter)),
            RecordResultsStep(clock=clock),
        ),
        input_type=CycleRequest,
        output_type=PipelineRunSummary,
    )

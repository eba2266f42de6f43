"""Reduction of execution outcomes into a run summary."""

from typing import Iterable

from ..models.trading import ExecutionOutcome, FinalStatus, OutcomeStatus, PipelineRunSummary
from ..utils.time import Clock, now_iso, utc_now


def count_executed(outcomes: Iterable[ExecutionOutcome]) -> int:
    """Number of outcomes that actually traded."""
    return sum(1 for outcome in outcomes if outcome.status is OutcomeStatus.EXECUTED)


def aggregate_outcomes(
    outcomes: Iterable[ExecutionOutcome],
    clock: Clock = utc_now
) -> PipelineRunSummary:
    """
    Summarize a batch of outcomes.

    The summary is "completed" whenever this reduction runs, including when
    every trade failed or was skipped: the status describes the pipeline,
    not trading success.
    """
    outcomes = tuple(outcomes)
    return PipelineRunSummary(
        final_status=FinalStatus.COMPLETED,
        execution_time=now_iso(clock),
        total_trades=count_executed(outcomes),
        outcomes=outcomes,
    )

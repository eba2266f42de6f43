"""
Sequential pipeline runner.

Feeds the initial input to the first step and threads each step's output
into the next one. The first failing step ends the run: later steps never
execute, and the failure is returned as a value naming that step.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Optional, Union

from ..errors import RunCancelledError, StepContractError
from ..logging.config import get_pipeline_logger, log_step_transition
from .contracts import coerce_payload
from .definition import PipelineDefinition

pipeline_logger = get_pipeline_logger(__name__)


@dataclass(frozen=True)
class RunSuccess:
    """Pipeline completed every step."""
    pipeline_id: str
    output: Any
    completed_steps: tuple[str, ...]

    @property
    def succeeded(self) -> bool:
        return True


@dataclass(frozen=True)
class RunFailure:
    """Pipeline aborted at ``failed_step_id``."""
    pipeline_id: str
    failed_step_id: str
    cause: BaseException
    completed_steps: tuple[str, ...]

    @property
    def succeeded(self) -> bool:
        return False

    @property
    def cancelled(self) -> bool:
        return isinstance(self.cause, RunCancelledError)


RunResult = Union[RunSuccess, RunFailure]


class PipelineRunner:
    """Executes pipeline definitions one step at a time."""

    def __init__(self) -> None:
        self.logger = pipeline_logger

    async def run(
        self,
        definition: PipelineDefinition,
        initial_input: Any,
        cancel_event: Optional[asyncio.Event] = None
    ) -> RunResult:
        """
        Run every step of a definition in order.

        Args:
            definition: Validated pipeline definition
            initial_input: Payload for the first step, an instance of the
                pipeline's input type
            cancel_event: Optional event; once set, no further step is started

        Returns:
            RunSuccess with the final output, or RunFailure naming the step
            that could not complete
        """
        pipeline_id = definition.pipeline_id
        completed: list[str] = []

        if not isinstance(initial_input, definition.input_type):
            first_id = definition.steps[0].id
            cause = StepContractError(
                f"Pipeline '{pipeline_id}' expects {definition.input_type.__qualname__}, "
                f"got {type(initial_input).__qualname__}",
                step_id=first_id,
                expected_type=definition.input_type.__qualname__,
                actual_type=type(initial_input).__qualname__,
            )
            return self._fail(pipeline_id, first_id, cause, completed)

        payload = initial_input

        for step in definition.steps:
            if cancel_event is not None and cancel_event.is_set():
                cause = RunCancelledError(
                    f"Pipeline '{pipeline_id}' cancelled before step '{step.id}'",
                    pending_step_id=step.id,
                )
                return self._fail(pipeline_id, step.id, cause, completed, transition="cancelled")

            log_step_transition(self.logger, pipeline_id, step.id, "started")

            try:
                step_input = coerce_payload(payload, step.input_type, step.id)
                output = await step.execute(step_input)
            except Exception as e:
                return self._fail(pipeline_id, step.id, e, completed)

            if not isinstance(output, step.output_type):
                cause = StepContractError(
                    f"Step '{step.id}' returned {type(output).__qualname__}, "
                    f"declared {step.output_type.__qualname__}",
                    step_id=step.id,
                    expected_type=step.output_type.__qualname__,
                    actual_type=type(output).__qualname__,
                )
                return self._fail(pipeline_id, step.id, cause, completed)

            completed.append(step.id)
            log_step_transition(self.logger, pipeline_id, step.id, "completed")
            payload = output

        last_id = definition.steps[-1].id
        try:
            result = coerce_payload(payload, definition.output_type, last_id)
        except StepContractError as e:
            return self._fail(pipeline_id, last_id, e, completed)

        self.logger.info(
            "Pipeline run completed",
            pipeline_id=pipeline_id,
            completed_steps=completed
        )
        return RunSuccess(
            pipeline_id=pipeline_id,
            output=result,
            completed_steps=tuple(completed),
        )

    def _fail(
        self,
        pipeline_id: str,
        step_id: str,
        cause: BaseException,
        completed: list[str],
        transition: str = "failed"
    ) -> RunFailure:
        log_step_transition(
            self.logger,
            pipeline_id,
            step_id,
            transition,
            context={
                "error": str(cause),
                "error_type": type(cause).__name__,
                "completed_steps": list(completed),
            }
        )
        return RunFailure(
            pipeline_id=pipeline_id,
            failed_step_id=step_id,
            cause=cause,
            completed_steps=tuple(completed),
        )

"""Tests for the sequential pipeline runner."""

import asyncio
import pytest
from dataclasses import dataclass

from tradeflow.errors import RunCancelledError, StepContractError
from tradeflow.pipeline.contracts import FunctionStep, StepContract
from tradeflow.pipeline.definition import PipelineDefinition
from tradeflow.pipeline.runner import PipelineRunner, RunFailure, RunSuccess


@dataclass(frozen=True)
class Counter:
    value: int


@dataclass(frozen=True)
class LabelledCounter:
    value: int
    label: str


class RecordingStep(StepContract[Counter, Counter]):
    """Adds one and records its invocation in a shared log."""

    input_type = Counter
    output_type = Counter

    def __init__(self, step_id: str, log: list, fail_with: Exception = None):
        self.id = step_id
        self.log = log
        self.fail_with = fail_with

    async def execute(self, payload: Counter) -> Counter:
        self.log.append(self.id)
        if self.fail_with is not None:
            raise self.fail_with
        return Counter(payload.value + 1)


def build_definition(steps) -> PipelineDefinition:
    return PipelineDefinition("counter", steps, Counter, Counter)


class TestPipelineRunner:
    """Test suite for PipelineRunner.run."""

    def test_threads_output_into_next_step(self) -> None:
        """Test that each output feeds the next step."""
        log: list = []
        definition = build_definition([RecordingStep(f"s{i}", log) for i in range(1, 4)])

        result = asyncio.run(PipelineRunner().run(definition, Counter(0)))

        assert isinstance(result, RunSuccess)
        assert result.succeeded
        assert result.output == Counter(3)
        assert result.completed_steps == ("s1", "s2", "s3")
        assert log == ["s1", "s2", "s3"]

    @pytest.mark.parametrize("failing_index", [0, 1, 2, 3])
    def test_failing_step_stops_later_steps(self, failing_index: int) -> None:
        """Test that a failure stops every later step."""
        log: list = []
        steps = [
            RecordingStep(f"s{i}", log, RuntimeError("boom") if i == failing_index else None)
            for i in range(4)
        ]

        result = asyncio.run(PipelineRunner().run(build_definition(steps), Counter(0)))

        assert isinstance(result, RunFailure)
        assert not result.succeeded
        assert result.failed_step_id == f"s{failing_index}"
        assert log == [f"s{i}" for i in range(failing_index + 1)]
        assert result.completed_steps == tuple(f"s{i}" for i in range(failing_index))
        assert str(result.cause) == "boom"

    def test_wrong_initial_input_fails_on_first_step(self) -> None:
        """Test that a wrong initial payload fails on the first step."""
        log: list = []
        definition = build_definition([RecordingStep("first", log)])

        result = asyncio.run(PipelineRunner().run(definition, {"value": 0}))

        assert isinstance(result, RunFailure)
        assert result.failed_step_id == "first"
        assert isinstance(result.cause, StepContractError)
        assert log == []

    def test_wrong_output_type_is_a_contract_failure(self) -> None:
        """Test that an undeclared output type fails the step."""
        async def lie(payload: Counter) -> Counter:
            return "not a counter"

        log: list = []
        definition = build_definition([FunctionStep("liar", Counter, Counter, lie), RecordingStep("next", log)])

        result = asyncio.run(PipelineRunner().run(definition, Counter(0)))

        assert isinstance(result, RunFailure)
        assert result.failed_step_id == "liar"
        assert isinstance(result.cause, StepContractError)
        assert log == []

    def test_structurally_compatible_payload_is_coerced(self) -> None:
        """Test that compatible payloads are rebuilt for the next step."""
        async def label(payload: Counter) -> LabelledCounter:
            return LabelledCounter(payload.value, "x")

        log: list = []
        definition = PipelineDefinition(
            "counter",
            [FunctionStep("label", Counter, LabelledCounter, label), RecordingStep("count", log)],
            Counter,
            Counter,
        )

        result = asyncio.run(PipelineRunner().run(definition, Counter(5)))

        assert isinstance(result, RunSuccess)
        assert result.output == Counter(6)

    def test_cancel_before_start_runs_nothing(self) -> None:
        """Test that a run cancelled up front starts no step."""
        log: list = []
        definition = build_definition([RecordingStep("s1", log), RecordingStep("s2", log)])

        async def run():
            event = asyncio.Event()
            event.set()
            return await PipelineRunner().run(definition, Counter(0), cancel_event=event)

        result = asyncio.run(run())

        assert isinstance(result, RunFailure)
        assert result.cancelled
        assert result.failed_step_id == "s1"
        assert isinstance(result.cause, RunCancelledError)
        assert log == []

    def test_cancel_between_steps_stops_remaining_steps(self) -> None:
        """Test that cancellation takes effect at the next step."""
        log: list = []

        async def run():
            event = asyncio.Event()

            async def cancel_after(payload: Counter) -> Counter:
                log.append("trigger")
                event.set()
                return Counter(payload.value + 1)

            definition = build_definition([
                FunctionStep("trigger", Counter, Counter, cancel_after),
                RecordingStep("never", log),
            ])
            return await PipelineRunner().run(definition, Counter(0), cancel_event=event)

        result = asyncio.run(run())

        assert isinstance(result, RunFailure)
        assert result.cancelled
        assert result.failed_step_id == "never"
        assert result.completed_steps == ("trigger",)
        assert log == ["trigger"]

    def test_runs_are_independent(self) -> None:
        """Test that runs share no state."""
        log: list = []
        definition = build_definition([RecordingStep("s1", log)])
        runner = PipelineRunner()

        async def run_twice():
            return await asyncio.gather(
                runner.run(definition, Counter(0)),
                runner.run(definition, Counter(10)),
            )

        first, second = asyncio.run(run_twice())

        assert first.output == Counter(1)
        assert second.output == Counter(11)

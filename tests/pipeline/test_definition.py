"""Tests for step contracts and construction-time pipeline validation."""

import asyncio
import pytest
from dataclasses import dataclass

from tradeflow.errors import DefinitionError, StepContractError
from tradeflow.pipeline.contracts import (
    FunctionStep,
    StepContract,
    coerce_payload,
    describe_mismatch,
    is_compatible,
)
from tradeflow.pipeline.definition import PipelineDefinition


@dataclass(frozen=True)
class Number:
    value: int


@dataclass(frozen=True)
class TaggedNumber:
    value: int
    tag: str


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class NumberWithDefault:
    value: int
    label: str = "n/a"


async def _increment(payload: Number) -> Number:
    return Number(payload.value + 1)


async def _tag(payload: Number) -> TaggedNumber:
    return TaggedNumber(payload.value, "tagged")


async def _stringify(payload: Number) -> Text:
    return Text(str(payload.value))


def increment_step(step_id: str = "increment") -> FunctionStep:
    return FunctionStep(step_id, Number, Number, _increment)


class TestTypeCompatibility:
    """Test structural compatibility between payload types."""

    def test_same_type_is_compatible(self) -> None:
        """Test that a type feeds itself."""
        assert is_compatible(Number, Number)

    def test_superset_dataclass_feeds_subset(self) -> None:
        """Test that extra producer fields are allowed."""
        assert is_compatible(TaggedNumber, Number)

    def test_subset_does_not_feed_superset(self) -> None:
        """Test that missing required fields are reported."""
        mismatch = describe_mismatch(Number, TaggedNumber)
        assert mismatch is not None
        assert "tag" in mismatch

    def test_missing_field_with_default_is_allowed(self) -> None:
        """Test that fields with defaults may be absent."""
        assert is_compatible(Number, NumberWithDefault)

    def test_conflicting_annotation_is_rejected(self) -> None:
        """Test that a shared field must have the same annotation."""
        mismatch = describe_mismatch(Text, Number)
        assert mismatch is not None
        assert "value" in mismatch

    def test_unrelated_plain_classes_are_rejected(self) -> None:
        """Test that unrelated classes do not fit."""
        assert not is_compatible(int, str)

    def test_coerce_rebuilds_compatible_payload(self) -> None:
        """Test that compatible payloads are rebuilt as the expected type."""
        coerced = coerce_payload(TaggedNumber(3, "x"), Number, "step")
        assert coerced == Number(3)

    def test_coerce_passes_instances_through(self) -> None:
        """Test that instances are returned unchanged."""
        payload = Number(1)
        assert coerce_payload(payload, Number) is payload

    def test_coerce_rejects_incompatible_payload(self) -> None:
        """Test that incompatible payloads raise a contract error."""
        with pytest.raises(StepContractError) as exc_info:
            coerce_payload(Text("1"), Number, "increment")
        assert exc_info.value.step_id == "increment"


class TestFunctionStep:
    """Test the coroutine-function step adapter."""

    def test_executes_wrapped_coroutine(self) -> None:
        """Test that the wrapped coroutine is awaited."""
        step = increment_step()
        assert asyncio.run(step.execute(Number(1))) == Number(2)

    def test_rejects_plain_function(self) -> None:
        """Test that plain functions cannot be steps."""
        with pytest.raises(TypeError):
            FunctionStep("sync", Number, Number, lambda payload: payload)

    def test_is_a_step_contract(self) -> None:
        """Test that function steps are step contracts."""
        assert isinstance(increment_step(), StepContract)


class TestPipelineDefinition:
    """Test construction-time validation of definitions."""

    def test_valid_definition(self) -> None:
        """Test that a well-typed chain is accepted."""
        definition = PipelineDefinition(
            pipeline_id="numbers",
            steps=[increment_step("a"), increment_step("b"), FunctionStep("tag", Number, TaggedNumber, _tag)],
            input_type=Number,
            output_type=TaggedNumber,
        )
        assert definition.step_ids == ("a", "b", "tag")
        assert len(definition) == 3
        assert isinstance(definition.steps, tuple)

    def test_structural_subset_between_steps_is_accepted(self) -> None:
        """Test that structurally compatible steps may be chained."""
        definition = PipelineDefinition(
            pipeline_id="numbers",
            steps=[FunctionStep("tag", Number, TaggedNumber, _tag), increment_step()],
            input_type=Number,
            output_type=Number,
        )
        assert definition.step_ids == ("tag", "increment")

    def test_empty_definition_fails(self) -> None:
        """Test that a pipeline needs at least one step."""
        with pytest.raises(DefinitionError) as exc_info:
            PipelineDefinition("empty", [], Number, Number)
        assert exc_info.value.mismatch == "empty step sequence"

    def test_pipeline_input_mismatch_names_first_step(self) -> None:
        """Test that an input mismatch names the first step."""
        with pytest.raises(DefinitionError) as exc_info:
            PipelineDefinition("numbers", [increment_step("first")], Text, Number)
        assert exc_info.value.step_id == "first"

    def test_adjacent_step_mismatch_names_offending_step(self) -> None:
        """Test that a chain mismatch names the receiving step."""
        with pytest.raises(DefinitionError) as exc_info:
            PipelineDefinition(
                "numbers",
                [FunctionStep("stringify", Number, Text, _stringify), increment_step("after")],
                Number,
                Number,
            )
        assert exc_info.value.step_id == "after"
        assert "stringify" in str(exc_info.value)

    def test_pipeline_output_mismatch_names_last_step(self) -> None:
        """Test that an output mismatch names the last step."""
        with pytest.raises(DefinitionError) as exc_info:
            PipelineDefinition("numbers", [increment_step("last")], Number, TaggedNumber)
        assert exc_info.value.step_id == "last"

    def test_duplicate_step_ids_fail(self) -> None:
        """Test that step ids must be unique."""
        with pytest.raises(DefinitionError) as exc_info:
            PipelineDefinition("numbers", [increment_step("same"), increment_step("same")], Number, Number)
        assert exc_info.value.step_id == "same"

    def test_non_step_entry_fails(self) -> None:
        """Test that every entry must be a step contract."""
        with pytest.raises(DefinitionError):
            PipelineDefinition("numbers", [increment_step(), _increment], Number, Number)

    def test_parameterized_step_types_are_rejected(self) -> None:
        """Test that steps declaring generic aliases fail at construction."""
        async def identity(payload):
            return payload

        with pytest.raises(DefinitionError) as exc_info:
            PipelineDefinition(
                "lists", [FunctionStep("identity", list[int], list[int], identity)], list, list
            )
        assert exc_info.value.step_id == "identity"
        assert "not a class" in exc_info.value.mismatch

    def test_parameterized_pipeline_types_are_rejected(self) -> None:
        """Test that pipeline input and output must be plain classes."""
        with pytest.raises(DefinitionError) as exc_info:
            PipelineDefinition("numbers", [increment_step("only")], list[Number], Number)
        assert exc_info.value.step_id == "only"

        with pytest.raises(DefinitionError):
            PipelineDefinition("numbers", [increment_step("only")], Number, "Number")

    def test_definition_is_immutable(self) -> None:
        """Test that definitions cannot be modified."""
        definition = PipelineDefinition("numbers", [increment_step()], Number, Number)
        with pytest.raises(AttributeError):
            definition.pipeline_id = "other"

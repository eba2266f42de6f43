"""
Pipeline definitions validated at construction.

A definition is an ordered chain of step contracts plus the pipeline's own
input and output types. Every boundary of the chain is checked when the
definition is built, so an invalid definition never exists.
"""

from dataclasses import dataclass
from typing import Any, Iterator, Sequence, get_origin

import structlog

from ..errors import DefinitionError
from .contracts import StepContract, describe_mismatch

logger = structlog.get_logger(__name__)


def _require_payload_class(tp: Any, what: str, step_id: str) -> None:
    # Payload checks use isinstance, which rejects parameterized generics.
    if not isinstance(tp, type) or get_origin(tp) is not None:
        raise DefinitionError(
            f"{what} must be a plain class, got {tp!r}",
            step_id=step_id,
            mismatch=f"{tp!r} is not a class"
        )


@dataclass(frozen=True)
class PipelineDefinition:
    """Ordered, type-checked sequence of steps."""

    pipeline_id: str
    steps: Sequence[StepContract]
    input_type: type
    output_type: type

    def __post_init__(self) -> None:
        steps = tuple(self.steps)
        object.__setattr__(self, "steps", steps)
        self._validate(steps)

        logger.debug(
            "Pipeline definition validated",
            pipeline_id=self.pipeline_id,
            steps=[step.id for step in steps]
        )

    def _validate(self, steps: tuple[StepContract, ...]) -> None:
        if not self.pipeline_id:
            raise DefinitionError("Pipeline id must be a non-empty string")

        if not steps:
            raise DefinitionError(
                f"Pipeline '{self.pipeline_id}' has no steps",
                mismatch="empty step sequence"
            )

        seen: set[str] = set()
        for index, step in enumerate(steps):
            if not isinstance(step, StepContract):
                raise DefinitionError(
                    f"Pipeline '{self.pipeline_id}' entry {index} is not a step contract: {step!r}",
                    mismatch="not a StepContract"
                )
            if not step.id:
                raise DefinitionError(
                    f"Pipeline '{self.pipeline_id}' entry {index} has an empty step id",
                    mismatch="empty step id"
                )
            if step.id in seen:
                raise DefinitionError(
                    f"Duplicate step id '{step.id}' in pipeline '{self.pipeline_id}'",
                    step_id=step.id,
                    mismatch="duplicate step id"
                )
            seen.add(step.id)
            for role, tp in (("input", step.input_type), ("output", step.output_type)):
                _require_payload_class(tp, f"step '{step.id}' {role} type", step.id)

        _require_payload_class(self.input_type, "pipeline input type", steps[0].id)
        _require_payload_class(self.output_type, "pipeline output type", steps[-1].id)

        first = steps[0]
        mismatch = describe_mismatch(self.input_type, first.input_type)
        if mismatch:
            raise DefinitionError(
                f"Pipeline input does not match step '{first.id}': {mismatch}",
                step_id=first.id,
                mismatch=mismatch
            )

        for current, following in zip(steps, steps[1:]):
            mismatch = describe_mismatch(current.output_type, following.input_type)
            if mismatch:
                raise DefinitionError(
                    f"Output of step '{current.id}' does not match input of "
                    f"step '{following.id}': {mismatch}",
                    step_id=following.id,
                    mismatch=mismatch
                )

        last = steps[-1]
        mismatch = describe_mismatch(last.output_type, self.output_type)
        if mismatch:
            raise DefinitionError(
                f"Output of final step '{last.id}' does not match pipeline output: {mismatch}",
                step_id=last.id,
                mismatch=mismatch
            )

    @property
    def step_ids(self) -> tuple[str, ...]:
        return tuple(step.id for step in self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[StepContract]:
        return iter(self.steps)

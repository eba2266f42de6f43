"""
Pipeline-level error classifications.

These exceptions describe malformed step chains, contract violations at
run time and aborted runs.
"""

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from ..pipeline.runner import RunFailure


class PipelineError(Exception):
    """Base class for pipeline orchestration errors."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class DefinitionError(PipelineError):
    """Malformed pipeline definition, raised only at construction time."""

    def __init__(self, message: str, step_id: Optional[str] = None,
                 mismatch: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.step_id = step_id
        self.mismatch = mismatch


class StepContractError(PipelineError):
    """A payload did not match the type a step declared."""

    def __init__(self, message: str, step_id: Optional[str] = None,
                 expected_type: Optional[str] = None,
                 actual_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.step_id = step_id
        self.expected_type = expected_type
        self.actual_type = actual_type


class RunCancelledError(PipelineError):
    """The run was cancelled before a step could start."""

    def __init__(self, message: str, pending_step_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.pending_step_id = pending_step_id


class PipelineRunError(PipelineError):
    """Raised to callers when a pipeline run aborts."""

    def __init__(self, failure: "RunFailure"):
        super().__init__(
            f"Pipeline '{failure.pipeline_id}' failed at step "
            f"'{failure.failed_step_id}': {failure.cause}",
            context={"completed_steps": list(failure.completed_steps)},
        )
        self.failure = failure
        self.failed_step_id = failure.failed_step_id


class ConfigurationError(PipelineError):
    """Configuration values failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []

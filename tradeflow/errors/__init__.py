"""
Error classification for the trading pipeline.

Pipeline errors describe problems with the step chain itself, collaborator
errors describe failures of the external analysis and execution services.
"""

from .pipeline import (
    PipelineError,
    DefinitionError,
    StepContractError,
    RunCancelledError,
    PipelineRunError,
    ConfigurationError,
)
from .collaborators import (
    CollaboratorError,
    AnalysisError,
    ExecutionError,
    PlatformAPIError,
    BoundaryValidationError,
)

__all__ = [
    # Pipeline Errors
    "PipelineError",
    "DefinitionError",
    "StepContractError",
    "RunCancelledError",
    "PipelineRunError",
    "ConfigurationError",
    # Collaborator Errors
    "CollaboratorError",
    "AnalysisError",
    "ExecutionError",
    "PlatformAPIError",
    "BoundaryValidationError",
]

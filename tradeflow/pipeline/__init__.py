"""
Typed sequential pipeline core.

Steps declare their input and output types, definitions check that adjacent
steps fit together when they are built, and the runner threads each step's
output into the next step.
"""

from .contracts import FunctionStep, StepContract
from .definition import PipelineDefinition
from .runner import PipelineRunner, RunFailure, RunResult, RunSuccess

__all__ = [
    "FunctionStep",
    "PipelineDefinition",
    "PipelineRunner",
    "RunFailure",
    "RunResult",
    "RunSuccess",
    "StepContract",
]

"""
Collaborator error classifications.

Failures raised by the market analyzer, the trade executor and the
competition platform client.
"""

from typing import Any, Optional


class CollaboratorError(Exception):
    """Base class for failures of external collaborators."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class AnalysisError(CollaboratorError):
    """Market analysis failed. Aborts the run before any trade is attempted."""

    def __init__(self, message: str, pairs: Optional[list[str]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.pairs = pairs or []


class ExecutionError(CollaboratorError):
    """A single trade failed. Recorded as a failed outcome, never aborts the batch."""

    def __init__(self, message: str, pair: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.pair = pair
        self.recoverable = True


class PlatformAPIError(CollaboratorError):
    """Competition platform HTTP request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 endpoint: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.endpoint = endpoint
        self.recoverable = status_code is None or status_code >= 500


class BoundaryValidationError(CollaboratorError):
    """A collaborator response did not have the expected structure."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

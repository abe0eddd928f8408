"""
Error taxonomy for safety score computation.

Validation errors are raised before any work happens and are never retryable.
Oracle failures are raised only under the fail-fast policy and carry the
segment that failed so callers can decide to retry or degrade.
"""

from typing import Optional


class SafetyScoringError(Exception):
    """Base class for all scoring errors."""


class InputValidationError(SafetyScoringError):
    """Scoring input is missing a required sub-structure or is malformed."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []


class OracleFailureError(SafetyScoringError):
    """A predictive oracle call for a route segment failed."""

    def __init__(self, segment_index: int, cause: BaseException):
        super().__init__(
            f"Route prediction failed for segment {segment_index}: {cause}"
        )
        self.segment_index = segment_index
        self.cause = cause

# src/core/errors.py — v1
"""Pipeline error taxonomy.

Each error carries the HTTP status the API layer maps it to. Retries and
cache misses never surface here: the analyzer only raises once it has given
up, and a failed cache read is handled inside the orchestrator.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for terminal request failures."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidInput(PipelineError):
    """A required document reference is missing or empty."""

    status_code = 400


class FetchFailure(PipelineError):
    """A source document could not be fetched or parsed."""

    status_code = 400

    def __init__(self, side: str, reference: str, reason: str = "") -> None:
        self.side = side
        self.reference = reference
        self.reason = reason
        super().__init__(f"Invalid {side} URL")


class AnalysisFailure(PipelineError):
    """The analysis capability failed terminally or exhausted its retries."""

    status_code = 500

    def __init__(
        self,
        message: str,
        attempts: int = 0,
        last_error: BaseException | None = None,
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(message)


class AnalysisTimeout(AnalysisFailure):
    """The caller's deadline expired before the analysis succeeded."""


class PersistenceFailure(PipelineError):
    """The result artifact could not be written."""

    status_code = 500

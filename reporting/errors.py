"""
Report generation failures.

Every error here is terminal for the current generation call: nothing is
recovered internally and no partial PDF is ever returned. `retryable`
tells the caller whether trying again (with backoff) can help.
"""

from __future__ import annotations

from typing import Optional


class ReportGenerationError(Exception):
    """Base class for report generation failures."""

    retryable: bool = False
    default_message: str = "Report generation failed."

    def __init__(self, message: Optional[str] = None, project_id: Optional[str] = None):
        self.project_id = project_id
        super().__init__(message or self.default_message)


class ProjectNotFoundError(ReportGenerationError):
    """Raised when no project record was supplied."""

    default_message = "Project not found."


class GenerationTimeoutError(ReportGenerationError):
    """Raised when the document was not ready within the time bound."""

    retryable = True
    default_message = "Report generation timed out."

    def __init__(
        self,
        timeout: float,
        message: Optional[str] = None,
        project_id: Optional[str] = None,
    ):
        self.timeout = timeout
        super().__init__(
            message or f"Report generation exceeded {timeout:g}s.",
            project_id=project_id,
        )


class StreamFailureError(ReportGenerationError):
    """Raised when writing a chunk of the output failed."""

    retryable = True
    default_message = "Failed to write report output."


class EmptyOutputError(ReportGenerationError):
    """Raised when generation finished but produced zero bytes."""

    default_message = "Report generation produced no output."


class LayoutOverflowError(ReportGenerationError):
    """Raised when a block was drawn past the usable page area."""

    default_message = "Content was drawn past the bottom margin."

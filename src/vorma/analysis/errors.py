"""Exceptions raised by the analysis pipeline."""

from __future__ import annotations


class AnalysisError(Exception):
    """Base class for analysis pipeline errors."""


class ServiceError(AnalysisError):
    """A remote service answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PipelineBusyError(AnalysisError):
    """A video was submitted while another analysis is still running."""


class InvalidVideoError(AnalysisError):
    """The selected file is not an uploadable video."""

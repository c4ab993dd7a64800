"""Project-native typed exceptions for pipeline web service failures."""

from __future__ import annotations


class PipelineServiceError(Exception):
    """Base exception for adapter-level web service failures.

    Attributes:
        status_code: Optional HTTP status code returned by the service.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PipelineConnectionError(PipelineServiceError, ConnectionError):
    """Transport-level connectivity failure while talking to the service."""


class PipelineTimeoutError(PipelineServiceError, TimeoutError):
    """Transport timeout while waiting for a service response."""


class PipelineRequestError(PipelineServiceError, ValueError):
    """Request rejected by the service with a client-side status code."""


class PipelineAuthenticationError(PipelineRequestError):
    """Request rejected because credentials are missing or invalid."""


class PipelineNotFoundError(PipelineRequestError):
    """Requested script, job or client does not exist on the service."""


class PipelineResponseError(PipelineServiceError, RuntimeError):
    """Server-side failure or response that violates the document contract."""

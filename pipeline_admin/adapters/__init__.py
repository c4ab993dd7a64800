"""Adapter layer package for pipeline web service integration boundaries."""

from .interfaces import PipelineServicePort
from .pipeline_errors import (
	PipelineAuthenticationError,
	PipelineConnectionError,
	PipelineNotFoundError,
	PipelineRequestError,
	PipelineResponseError,
	PipelineServiceError,
	PipelineTimeoutError,
)
from .pipeline_web_service import PipelineWebServiceAdapter

__all__ = [
	"PipelineAuthenticationError",
	"PipelineConnectionError",
	"PipelineNotFoundError",
	"PipelineRequestError",
	"PipelineResponseError",
	"PipelineServiceError",
	"PipelineServicePort",
	"PipelineTimeoutError",
	"PipelineWebServiceAdapter",
]

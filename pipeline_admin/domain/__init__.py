"""Domain models and value rules used across application layer boundaries."""

from .data_types import (
	AnyUriType,
	BooleanType,
	ChoiceType,
	DataType,
	DirUriType,
	FileUriType,
	IntegerType,
	PatternType,
	StringType,
	ValueType,
	domain_describe_data_type,
)
from .errors import UriNotFoundError, UriResolutionError, ValueValidationError
from .models import (
	CLIENT_ROLES,
	JOB_PRIORITIES,
	JOB_TERMINAL_STATUSES,
	Job,
	JobMessage,
	JobRequest,
	JobSize,
	JobSizes,
	JobStatus,
	ScriptArgumentDeclaration,
	ScriptDescriptor,
	ServiceClient,
	ServiceProperty,
)
from .uri_resolution import UriResolutionMode, domain_build_base_uri, domain_resolution_mode_for, domain_resolve_uri
from .validation import domain_format_option_error, domain_validate_sequence, domain_validate_value

__all__ = [
	"AnyUriType",
	"BooleanType",
	"CLIENT_ROLES",
	"ChoiceType",
	"DataType",
	"DirUriType",
	"FileUriType",
	"IntegerType",
	"JOB_PRIORITIES",
	"JOB_TERMINAL_STATUSES",
	"Job",
	"JobMessage",
	"JobRequest",
	"JobSize",
	"JobSizes",
	"JobStatus",
	"PatternType",
	"ScriptArgumentDeclaration",
	"ScriptDescriptor",
	"ServiceClient",
	"ServiceProperty",
	"StringType",
	"UriNotFoundError",
	"UriResolutionError",
	"UriResolutionMode",
	"ValueType",
	"ValueValidationError",
	"domain_build_base_uri",
	"domain_describe_data_type",
	"domain_format_option_error",
	"domain_resolution_mode_for",
	"domain_resolve_uri",
	"domain_validate_sequence",
	"domain_validate_value",
]

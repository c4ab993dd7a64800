"""Job layer package for job submission and result collection workflows."""

from .interfaces import JobExecutionOptions, JobExecutionResult, LastJobIdStorePort
from .job_errors import JobPreconditionError, LastJobIdError
from .job_execution import JobExecutionOrchestrator
from .last_job_id import FileLastJobIdStore, job_default_last_job_id_path
from .result_writer import job_write_results_directory, job_write_results_zip

__all__ = [
	"FileLastJobIdStore",
	"JobExecutionOptions",
	"JobExecutionOrchestrator",
	"JobExecutionResult",
	"JobPreconditionError",
	"LastJobIdError",
	"LastJobIdStorePort",
	"job_default_last_job_id_path",
	"job_write_results_directory",
	"job_write_results_zip",
]

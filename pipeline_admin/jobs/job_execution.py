"""Job-layer orchestrator driving one submitted job from request to results."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from pipeline_admin.adapters import PipelineServicePort
from pipeline_admin.domain import JobRequest, JobStatus

from .interfaces import JobExecutionOptions, JobExecutionResult, LastJobIdStorePort
from .job_errors import JobPreconditionError
from .result_writer import job_write_results_directory, job_write_results_zip

logger = logging.getLogger(__name__)


class JobExecutionOrchestrator:
    """Submit a job, follow its message stream and collect its results.

    One call to `job_execute` moves a request through
    `Built -> Submitted -> Streaming -> {Finalizing | Errored} -> Done`.
    Failures are propagated as raised; nothing is retried or cleaned up on
    the server.
    """

    def __init__(
        self,
        service: PipelineServicePort,
        last_job_id_store: LastJobIdStorePort,
        stdout: TextIO | None = None,
    ):
        """Initialize orchestrator dependencies.

        Args:
            service: Pipeline service port.
            last_job_id_store: Store receiving the submitted job id.
            stdout: Text stream for user-facing progress lines.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if service is None:
            raise ValueError("service must not be None")
        if last_job_id_store is None:
            raise ValueError("last_job_id_store must not be None")

        self._service = service
        self._last_job_id_store = last_job_id_store
        self._stdout = stdout or sys.stdout

    def job_execute(self, request: JobRequest, options: JobExecutionOptions) -> JobExecutionResult:
        """Execute one job request.

        Args:
            request: Populated job request.
            options: Client-side execution settings.

        Returns:
            JobExecutionResult: Job id, last status and where results went.

        Raises:
            JobPreconditionError: Raised before submission when no output is set for a foreground job.
            LastJobIdError: Raised when the job id cannot be stored.
            PipelineServiceError: Raised for service failures, including stream errors.
            OSError: Raised when results cannot be written locally.
        """

        if not request.background and not options.output:
            raise JobPreconditionError("--output option is mandatory if the job is not running in the background")
        if request.background and options.output:
            logger.warning(
                "--output option ignored as the job will run in the background",
                extra={"event": "jobs.execution.output_ignored", "script_id": request.script_id},
            )

        job, messages = self._service.adapter_submit_job(request)
        self._job_echo(f"Job {job.job_id} sent to the server")
        logger.debug(
            "job submitted",
            extra={"event": "jobs.execution.submitted", "job_id": job.job_id, "script_id": request.script_id},
        )

        if request.background or options.persistent:
            self._last_job_id_store.store_last_job_id(job.job_id)
        if request.background:
            return JobExecutionResult(job_id=job.job_id, status=job.status)

        status = job.status
        for message in messages:
            if message.error is not None:
                logger.debug(
                    "job message stream failed",
                    extra={"event": "jobs.execution.errored", "job_id": job.job_id},
                )
                raise message.error
            if not options.quiet:
                rendered_message = message.message_render()
                if rendered_message is not None:
                    self._job_echo(rendered_message)
            if message.status:
                status = message.status

        logger.debug(
            "job message stream ended",
            extra={"event": "jobs.execution.streamed", "job_id": job.job_id, "status": status},
        )
        if status == JobStatus.ERROR.value:
            self._job_echo(f"Job finished with status: {status}")
            return JobExecutionResult(job_id=job.job_id, status=status)

        return self._job_finalize(job.job_id, status, options)

    def _job_finalize(self, job_id: str, status: str, options: JobExecutionOptions) -> JobExecutionResult:
        if options.zipped:
            output_path = job_write_results_zip(self._service, job_id, options.output)
        else:
            output_path = job_write_results_directory(self._service, job_id, options.output)

        deleted = False
        if not options.persistent:
            self._service.adapter_delete_job(job_id)
            deleted = True
            self._job_echo("The job has been deleted from the server")
        self._job_echo(f"Job finished with status: {status}")
        return JobExecutionResult(job_id=job_id, status=status, output_path=str(output_path), deleted=deleted)

    def _job_echo(self, line: str) -> None:
        print(line, file=self._stdout)

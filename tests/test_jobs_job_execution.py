"""Regression tests for job execution orchestration against a stub service."""

from __future__ import annotations

from collections.abc import Iterator
import io
import logging
from pathlib import Path
from typing import BinaryIO
import zipfile

import pytest

from pipeline_admin.adapters import PipelineConnectionError
from pipeline_admin.domain import Job, JobMessage, JobRequest
from pipeline_admin.jobs import (
    JobExecutionOptions,
    JobExecutionOrchestrator,
    JobPreconditionError,
)


def _zip_bytes(entries: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return buffer.getvalue()


class _StubPipelineService:
    """In-memory service stub recording orchestrator calls."""

    def __init__(self, messages: list[JobMessage], result_archive: bytes = b"", initial_status: str = "IDLE"):
        self.calls: list[tuple[str, str]] = []
        self.submitted_requests: list[JobRequest] = []
        self._messages = messages
        self._result_archive = result_archive
        self._initial_status = initial_status

    def adapter_submit_job(self, request: JobRequest) -> tuple[Job, Iterator[JobMessage]]:
        self.calls.append(("submit", request.script_id))
        self.submitted_requests.append(request)
        return Job(job_id="job-1", status=self._initial_status), iter(self._messages)

    def adapter_fetch_results(self, job_id: str, destination: BinaryIO) -> None:
        self.calls.append(("results", job_id))
        destination.write(self._result_archive)

    def adapter_delete_job(self, job_id: str) -> None:
        self.calls.append(("delete", job_id))


class _MemoryLastJobIdStore:
    def __init__(self) -> None:
        self.stored_ids: list[str] = []

    def store_last_job_id(self, job_id: str) -> None:
        self.stored_ids.append(job_id)

    def read_last_job_id(self) -> str:
        return self.stored_ids[-1]


def _orchestrator(service: _StubPipelineService, store: _MemoryLastJobIdStore) -> tuple[JobExecutionOrchestrator, io.StringIO]:
    stdout = io.StringIO()
    return JobExecutionOrchestrator(service=service, last_job_id_store=store, stdout=stdout), stdout


def test_jobs_execution_missing_output_fails_before_submission() -> None:
    """Raise a precondition error before any service call for foreground jobs.

    Returns:
        None: Assertions validate the precondition check.

    Raises:
        AssertionError: Raised when the service is contacted.
    """

    service = _StubPipelineService(messages=[])
    orchestrator, _stdout = _orchestrator(service, _MemoryLastJobIdStore())

    with pytest.raises(JobPreconditionError, match="--output option is mandatory"):
        orchestrator.job_execute(JobRequest(script_id="s1"), JobExecutionOptions())

    assert service.calls == []


def test_jobs_execution_success_extracts_results_and_deletes_job(tmp_path: Path) -> None:
    """Stream messages, unpack results and delete the finished job.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate output, call order and printed lines.

    Raises:
        AssertionError: Raised when finalization is incorrect.
    """

    service = _StubPipelineService(
        messages=[
            JobMessage(status="RUNNING", text="converting", level="INFO", sequence=0),
            JobMessage(status="RUNNING"),
            JobMessage(status="SUCCESS", text="done", level="INFO", sequence=1),
        ],
        result_archive=_zip_bytes({"book/index.html": b"<html/>"}),
    )
    store = _MemoryLastJobIdStore()
    orchestrator, stdout = _orchestrator(service, store)
    output_directory = tmp_path / "out"

    result = orchestrator.job_execute(JobRequest(script_id="s1"), JobExecutionOptions(output=str(output_directory)))

    assert result.status == "SUCCESS"
    assert result.deleted is True
    assert (output_directory / "book" / "index.html").read_bytes() == b"<html/>"
    assert service.calls == [("submit", "s1"), ("results", "job-1"), ("delete", "job-1")]
    assert store.stored_ids == []
    assert stdout.getvalue().splitlines() == [
        "Job job-1 sent to the server",
        "[INFO] converting",
        "[INFO] done",
        "The job has been deleted from the server",
        "Job finished with status: SUCCESS",
    ]


def test_jobs_execution_zip_into_existing_directory_writes_result_zip(tmp_path: Path) -> None:
    archive = _zip_bytes({"a.txt": b"a"})
    service = _StubPipelineService(messages=[JobMessage(status="SUCCESS")], result_archive=archive)
    orchestrator, _stdout = _orchestrator(service, _MemoryLastJobIdStore())

    result = orchestrator.job_execute(
        JobRequest(script_id="s1"),
        JobExecutionOptions(output=str(tmp_path), zipped=True),
    )

    assert result.output_path == str(tmp_path / "result.zip")
    assert (tmp_path / "result.zip").read_bytes() == archive


def test_jobs_execution_persistent_keeps_job_and_stores_id(tmp_path: Path) -> None:
    """Keep persistent jobs on the server and remember their id.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate persistence behavior.

    Raises:
        AssertionError: Raised when the job is deleted or its id is not stored.
    """

    service = _StubPipelineService(messages=[JobMessage(status="SUCCESS")], result_archive=_zip_bytes({}))
    store = _MemoryLastJobIdStore()
    orchestrator, stdout = _orchestrator(service, store)

    result = orchestrator.job_execute(
        JobRequest(script_id="s1"),
        JobExecutionOptions(output=str(tmp_path / "out"), persistent=True),
    )

    assert result.deleted is False
    assert ("delete", "job-1") not in service.calls
    assert store.stored_ids == ["job-1"]
    assert "The job has been deleted from the server" not in stdout.getvalue()


def test_jobs_execution_background_returns_after_submission(caplog: pytest.LogCaptureFixture) -> None:
    """Return right after submission for background jobs, ignoring output.

    Args:
        caplog: Pytest log capture fixture.

    Returns:
        None: Assertions validate background behavior.

    Raises:
        AssertionError: Raised when the stream is consumed or the id is not stored.
    """

    service = _StubPipelineService(messages=[JobMessage(status="SUCCESS", text="never printed")])
    store = _MemoryLastJobIdStore()
    orchestrator, stdout = _orchestrator(service, store)

    with caplog.at_level(logging.WARNING, logger="pipeline_admin.jobs.job_execution"):
        result = orchestrator.job_execute(
            JobRequest(script_id="s1", background=True),
            JobExecutionOptions(output="ignored"),
        )

    assert result.job_id == "job-1"
    assert result.status == "IDLE"
    assert service.calls == [("submit", "s1")]
    assert store.stored_ids == ["job-1"]
    assert stdout.getvalue() == "Job job-1 sent to the server\n"
    assert "--output option ignored" in caplog.text


def test_jobs_execution_stream_error_is_raised_without_cleanup() -> None:
    stream_error = PipelineConnectionError("Pipeline request jobs.poll failed: refused")
    service = _StubPipelineService(messages=[JobMessage(status="RUNNING", text="a"), JobMessage(error=stream_error)])
    orchestrator, _stdout = _orchestrator(service, _MemoryLastJobIdStore())

    with pytest.raises(PipelineConnectionError, match="refused"):
        orchestrator.job_execute(JobRequest(script_id="s1"), JobExecutionOptions(output="out"))

    assert service.calls == [("submit", "s1")]


def test_jobs_execution_persistent_id_is_stored_before_stream_failure() -> None:
    """Store the job id right after submission so a failing stream keeps it.

    Returns:
        None: Assertions validate store ordering relative to streaming.

    Raises:
        AssertionError: Raised when the id is stored late or lost.
    """

    stream_error = PipelineConnectionError("Pipeline request jobs.poll failed: refused")
    store = _MemoryLastJobIdStore()
    ids_seen_by_stream: list[list[str]] = []

    def _failing_stream() -> Iterator[JobMessage]:
        ids_seen_by_stream.append(list(store.stored_ids))
        yield JobMessage(error=stream_error)

    service = _StubPipelineService(messages=[])
    service.adapter_submit_job = lambda request: (Job(job_id="job-1", status="IDLE"), _failing_stream())
    orchestrator, stdout = _orchestrator(service, store)

    with pytest.raises(PipelineConnectionError, match="refused"):
        orchestrator.job_execute(JobRequest(script_id="s1"), JobExecutionOptions(output="out", persistent=True))

    assert ids_seen_by_stream == [["job-1"]]
    assert store.stored_ids == ["job-1"]
    assert stdout.getvalue() == "Job job-1 sent to the server\n"


def test_jobs_execution_background_stores_id_without_reading_stream() -> None:
    service = _StubPipelineService(
        messages=[JobMessage(error=PipelineConnectionError("Pipeline request jobs.poll failed: refused"))]
    )
    store = _MemoryLastJobIdStore()
    orchestrator, _stdout = _orchestrator(service, store)

    result = orchestrator.job_execute(JobRequest(script_id="s1", background=True), JobExecutionOptions())

    assert result.job_id == "job-1"
    assert store.stored_ids == ["job-1"]
    assert service.calls == [("submit", "s1")]


def test_jobs_execution_error_status_skips_results(tmp_path: Path) -> None:
    service = _StubPipelineService(messages=[JobMessage(status="ERROR", text="boom", level="ERROR")])
    orchestrator, stdout = _orchestrator(service, _MemoryLastJobIdStore())

    result = orchestrator.job_execute(JobRequest(script_id="s1"), JobExecutionOptions(output=str(tmp_path / "out")))

    assert result.status == "ERROR"
    assert service.calls == [("submit", "s1")]
    assert not (tmp_path / "out").exists()
    assert stdout.getvalue().splitlines()[-1] == "Job finished with status: ERROR"


def test_jobs_execution_quiet_suppresses_messages(tmp_path: Path) -> None:
    service = _StubPipelineService(
        messages=[JobMessage(status="SUCCESS", text="hidden", level="INFO")],
        result_archive=_zip_bytes({}),
    )
    orchestrator, stdout = _orchestrator(service, _MemoryLastJobIdStore())

    orchestrator.job_execute(JobRequest(script_id="s1"), JobExecutionOptions(output=str(tmp_path), quiet=True))

    assert "hidden" not in stdout.getvalue()

"""Writers that store a job's zipped results on the local file system."""

from __future__ import annotations

import logging
from pathlib import Path
import tempfile
import zipfile

from pipeline_admin.adapters import PipelineServicePort

logger = logging.getLogger(__name__)

RESULT_ZIP_FILE_NAME = "result.zip"


def job_write_results_zip(service: PipelineServicePort, job_id: str, output: str | Path) -> Path:
    """Store the job results as one zip file.

    When `output` names an existing directory the archive is written to
    `<output>/result.zip`.

    Args:
        service: Pipeline service port.
        job_id: Job identifier.
        output: Destination file or directory.

    Returns:
        Path: Path of the written archive.

    Raises:
        OSError: Raised when the destination cannot be written.
        PipelineServiceError: Raised when the service fails to provide results.
    """

    destination_path = Path(output)
    if destination_path.is_dir():
        destination_path = destination_path / RESULT_ZIP_FILE_NAME
    destination_path.parent.mkdir(parents=True, exist_ok=True)
    with destination_path.open("wb") as destination:
        service.adapter_fetch_results(job_id, destination)
    logger.debug(
        "job results stored as archive",
        extra={"event": "jobs.results.zip_written", "job_id": job_id, "path": str(destination_path)},
    )
    return destination_path


def job_write_results_directory(service: PipelineServicePort, job_id: str, output: str | Path) -> Path:
    """Store the job results unpacked into a directory tree.

    Args:
        service: Pipeline service port.
        job_id: Job identifier.
        output: Destination directory, created when missing.

    Returns:
        Path: Destination directory.

    Raises:
        OSError: Raised when the destination exists as a file or cannot be written.
        zipfile.BadZipFile: Raised when the service returns a malformed archive.
        PipelineServiceError: Raised when the service fails to provide results.
    """

    destination_directory = Path(output)
    if destination_directory.exists() and not destination_directory.is_dir():
        raise NotADirectoryError(f"Output {destination_directory} exists and is not a directory")
    destination_directory.mkdir(parents=True, exist_ok=True)

    with tempfile.TemporaryFile() as buffer:
        service.adapter_fetch_results(job_id, buffer)
        buffer.seek(0)
        with zipfile.ZipFile(buffer) as archive:
            archive.extractall(destination_directory)
            extracted_count = len(archive.namelist())
    logger.debug(
        "job results extracted",
        extra={
            "event": "jobs.results.extracted",
            "job_id": job_id,
            "path": str(destination_directory),
            "entry_count": extracted_count,
        },
    )
    return destination_directory

"""File-backed persistence of the most recently submitted job identifier."""

from __future__ import annotations

import logging
import os
from pathlib import Path
import sys
from typing import Final

from .interfaces import LastJobIdStorePort
from .job_errors import LastJobIdError

logger = logging.getLogger(__name__)

LAST_JOB_ID_FILE_NAME: Final[str] = "last_job_id"


def job_default_last_job_id_path(
    platform_name: str | None = None,
    home_directory: Path | None = None,
    environment: dict[str, str] | None = None,
) -> Path:
    """Return the platform-specific default location of the last-job-id file.

    Args:
        platform_name: Platform label as reported by `sys.platform`.
        home_directory: Home directory override.
        environment: Environment mapping override.

    Returns:
        Path: Default last-job-id file path.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    resolved_platform = platform_name or sys.platform
    resolved_home = home_directory or Path.home()
    resolved_environment = os.environ if environment is None else environment

    if resolved_platform.startswith("win"):
        app_data = resolved_environment.get("APPDATA", "").strip()
        base_directory = Path(app_data) if app_data else resolved_home / "AppData" / "Roaming"
        return base_directory / "pipeline-admin" / LAST_JOB_ID_FILE_NAME
    if resolved_platform == "darwin":
        return resolved_home / "Library" / "Application Support" / "pipeline-admin" / LAST_JOB_ID_FILE_NAME
    return resolved_home / ".pipeline-admin" / LAST_JOB_ID_FILE_NAME


class FileLastJobIdStore(LastJobIdStorePort):
    """Last-job-id store backed by a single text file."""

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def store_last_job_id(self, job_id: str) -> None:
        """Write `job_id` to the store file, creating parent directories.

        Args:
            job_id: Job identifier.

        Returns:
            None: Writes the identifier as side effect.

        Raises:
            LastJobIdError: Raised when the id is blank or the file cannot be written.
        """

        normalized_job_id = job_id.strip()
        if not normalized_job_id:
            raise LastJobIdError("job_id must not be blank")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(normalized_job_id, encoding="utf-8")
        except OSError as error:
            raise LastJobIdError(f"Could not store last job id in {self._path}: {error}") from error
        logger.debug(
            "last job id stored",
            extra={"event": "jobs.last_job_id.stored", "job_id": normalized_job_id, "path": str(self._path)},
        )

    def read_last_job_id(self) -> str:
        """Return the stored job identifier.

        Returns:
            str: Stored job identifier.

        Raises:
            LastJobIdError: Raised when the file is missing, unreadable or empty.
        """

        try:
            stored_value = self._path.read_text(encoding="utf-8").strip()
        except FileNotFoundError as error:
            raise LastJobIdError(f"No last job id stored in {self._path}") from error
        except OSError as error:
            raise LastJobIdError(f"Could not read last job id from {self._path}: {error}") from error
        if not stored_value:
            raise LastJobIdError(f"No last job id stored in {self._path}")
        return stored_value

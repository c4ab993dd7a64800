"""Typed interfaces for job-layer orchestration responsibilities."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class JobExecutionOptions:
    """Client-side execution settings for one submitted job.

    Attributes:
        output: Destination path for results; required unless running in background.
        zipped: Whether results are stored as one zip file instead of a directory tree.
        quiet: Whether job messages are suppressed.
        persistent: Whether the job is kept on the server after completion.
    """

    output: str | None = None
    zipped: bool = False
    quiet: bool = False
    persistent: bool = False


@dataclass(frozen=True)
class JobExecutionResult:
    """Result contract for one job execution.

    Attributes:
        job_id: Server-side job identifier.
        status: Last observed job status.
        output_path: Location results were written to, if fetched.
        deleted: Whether the job was deleted from the server.
    """

    job_id: str
    status: str
    output_path: str | None = None
    deleted: bool = False


class LastJobIdStorePort(Protocol):
    """Port definition for persisting the most recently submitted job id."""

    def store_last_job_id(self, job_id: str) -> None:
        """Persist one job identifier, replacing any previous value.

        Args:
            job_id: Job identifier.

        Returns:
            None: Writes the identifier as side effect.

        Raises:
            LastJobIdError: Raised when the identifier cannot be written.
        """

    def read_last_job_id(self) -> str:
        """Return the persisted job identifier.

        Returns:
            str: Last stored job identifier.

        Raises:
            LastJobIdError: Raised when no identifier is stored or it cannot be read.
        """

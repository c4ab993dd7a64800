"""Typed interfaces for adapter-layer responsibilities."""

from collections.abc import Iterator
from typing import BinaryIO, Protocol

from pipeline_admin.domain import (
    Job,
    JobMessage,
    JobRequest,
    JobSizes,
    ScriptDescriptor,
    ServiceClient,
    ServiceProperty,
)


class PipelineServicePort(Protocol):
    """Port definition for the remote job-processing service."""

    def adapter_is_local_mode(self) -> bool:
        """Return whether the service shares the client's file system.

        Returns:
            bool: True when local `file:` URIs are accepted.

        Raises:
            ConnectionError: Raised when the service cannot be reached.
        """

    def adapter_list_scripts(self) -> list[ScriptDescriptor]:
        """Return descriptors for every script the service exposes.

        Returns:
            list[ScriptDescriptor]: Fully detailed script descriptors.

        Raises:
            ConnectionError: Raised when the service cannot be reached.
        """

    def adapter_submit_job(self, request: JobRequest) -> tuple[Job, Iterator[JobMessage]]:
        """Submit one job request.

        Args:
            request: Fully populated job request.

        Returns:
            tuple[Job, Iterator[JobMessage]]: Created job and its lazy, single-use
            message stream that ends when the job reaches a terminal status.

        Raises:
            ConnectionError: Raised when the service cannot be reached.
            ValueError: Raised when the service rejects the request.
        """

    def adapter_get_job(self, job_id: str) -> Job:
        """Return the current state of one job.

        Args:
            job_id: Job identifier.

        Returns:
            Job: Current job snapshot.

        Raises:
            ValueError: Raised when the job does not exist.
        """

    def adapter_list_jobs(self) -> list[Job]:
        """Return every job visible to the configured client."""

    def adapter_fetch_results(self, job_id: str, destination: BinaryIO) -> None:
        """Stream the job's zipped results into a writable binary destination.

        Args:
            job_id: Job identifier.
            destination: Writable binary stream.

        Returns:
            None: Writes to `destination` as side effect.

        Raises:
            ConnectionError: Raised when the service cannot be reached.
        """

    def adapter_delete_job(self, job_id: str) -> None:
        """Delete one job and its data from the service.

        Args:
            job_id: Job identifier.

        Returns:
            None: Deletion happens on the service.

        Raises:
            ValueError: Raised when the job does not exist.
        """

    def adapter_list_clients(self) -> list[ServiceClient]:
        """Return all registered client accounts."""

    def adapter_get_client(self, client_id: str) -> ServiceClient:
        """Return one client account."""

    def adapter_create_client(self, client: ServiceClient) -> ServiceClient:
        """Create one client account and return the stored record."""

    def adapter_modify_client(self, client: ServiceClient) -> ServiceClient:
        """Replace one client account and return the stored record."""

    def adapter_delete_client(self, client_id: str) -> None:
        """Delete one client account."""

    def adapter_list_properties(self) -> list[ServiceProperty]:
        """Return the service runtime properties."""

    def adapter_get_sizes(self) -> JobSizes:
        """Return stored job data sizes."""

    def adapter_halt(self, key: str) -> None:
        """Stop the service using its shutdown key."""

    def adapter_close(self) -> None:
        """Release transport resources held by the adapter."""

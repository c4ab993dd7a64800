"""Pipeline web service adapter implementation over httpx."""

from __future__ import annotations

import base64
from collections.abc import Iterator
from datetime import datetime, timezone
import hashlib
import hmac
import logging
import random
import time
from typing import BinaryIO, Callable, Final
from urllib.parse import quote, urlencode

import httpx

from pipeline_admin.domain import (
    JOB_TERMINAL_STATUSES,
    DataType,
    Job,
    JobMessage,
    JobRequest,
    JobSizes,
    ScriptDescriptor,
    ServiceClient,
    ServiceProperty,
)

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
from .pipeline_xml import (
    adapter_xml_build_client,
    adapter_xml_build_job_request,
    adapter_xml_parse_alive,
    adapter_xml_parse_client,
    adapter_xml_parse_clients,
    adapter_xml_parse_data_type,
    adapter_xml_parse_document,
    adapter_xml_parse_error_description,
    adapter_xml_parse_job,
    adapter_xml_parse_job_messages,
    adapter_xml_parse_jobs,
    adapter_xml_parse_properties,
    adapter_xml_parse_script,
    adapter_xml_parse_script_references,
    adapter_xml_parse_sizes,
)

logger = logging.getLogger(__name__)


class PipelineWebServiceAdapter(PipelineServicePort):
    """Adapter implementation for the pipeline REST web service."""

    _USER_AGENT: Final[str] = "pipeline-admin/0.1 (Python/httpx)"
    _XML_HEADERS: Final[dict[str, str]] = {"Content-Type": "application/xml"}

    def __init__(
        self,
        base_url: str,
        client_key: str = "",
        client_secret: str = "",
        request_timeout_seconds: float = 30.0,
        poll_interval_seconds: float = 1.0,
        transport: httpx.BaseTransport | None = None,
        nonce_provider: Callable[[], str] | None = None,
    ):
        """Initialize web service adapter.

        Args:
            base_url: Base endpoint URL of the web service.
            client_key: Client id used to sign requests; blank disables signing.
            client_secret: Client secret used to sign requests.
            request_timeout_seconds: HTTP request timeout in seconds.
            poll_interval_seconds: Delay between job polls while streaming messages.
            transport: Optional httpx transport override.
            nonce_provider: Optional provider of request nonces for signing.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_base_url = base_url.strip()
        normalized_client_key = client_key.strip()
        if not normalized_base_url:
            raise ValueError("base_url must not be blank")
        if normalized_client_key and not client_secret:
            raise ValueError("client_secret must not be blank when client_key is set")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")
        if poll_interval_seconds < 0:
            raise ValueError("poll_interval_seconds must be >= 0")

        self._base_url = normalized_base_url.rstrip("/")
        self._client_key = normalized_client_key
        self._client_secret = client_secret
        self._poll_interval_seconds = poll_interval_seconds
        self._nonce_provider = nonce_provider or _adapter_random_nonce
        self._local_mode: bool | None = None
        self._data_type_cache: dict[str, DataType] = {}
        self._client = httpx.Client(
            timeout=httpx.Timeout(request_timeout_seconds),
            headers={"User-Agent": self._USER_AGENT},
            transport=transport,
        )

    def adapter_close(self) -> None:
        """Close the underlying HTTP connection pool."""

        self._client.close()

    def adapter_is_local_mode(self) -> bool:
        """Return whether the service shares the client's file system.

        The answer is read once from the alive endpoint and cached.

        Returns:
            bool: True when the service accepts local `file:` URIs.

        Raises:
            PipelineServiceError: Raised when the alive endpoint fails.
        """

        if self._local_mode is None:
            root = self._adapter_get_document("/alive", op="alive")
            self._local_mode = adapter_xml_parse_alive(root)
        return self._local_mode

    def adapter_list_scripts(self) -> list[ScriptDescriptor]:
        """Return detailed descriptors for every published script.

        Returns:
            list[ScriptDescriptor]: Script descriptors in listing order.

        Raises:
            PipelineServiceError: Raised when listing or detail requests fail.
        """

        listing_root = self._adapter_get_document("/scripts", op="scripts.list")
        descriptors: list[ScriptDescriptor] = []
        for script_id, _href in adapter_xml_parse_script_references(listing_root):
            script_root = self._adapter_get_document(f"/scripts/{quote(script_id, safe='')}", op="scripts.get")
            descriptors.append(
                adapter_xml_parse_script(script_root, data_type_resolver=self._adapter_resolve_data_type)
            )
        return descriptors

    def adapter_submit_job(self, request: JobRequest) -> tuple[Job, Iterator[JobMessage]]:
        """Submit one job request and open its message stream.

        Requests carrying data are sent as multipart form data with the
        `job-request` document and the `job-data` archive.

        Args:
            request: Fully populated job request.

        Returns:
            tuple[Job, Iterator[JobMessage]]: Created job and its lazy message stream.

        Raises:
            PipelineServiceError: Raised when the service rejects or fails the submission.
        """

        script_href = f"{self._base_url}/scripts/{quote(request.script_id, safe='')}"
        document = adapter_xml_build_job_request(request, script_href=script_href)
        if request.data is not None:
            response = self._adapter_request(
                "POST",
                "/jobs",
                op="jobs.submit",
                files={
                    "job-request": ("jobRequest.xml", document, "application/xml"),
                    "job-data": ("data.zip", request.data, "application/zip"),
                },
            )
        else:
            response = self._adapter_request(
                "POST",
                "/jobs",
                op="jobs.submit",
                content=document,
                headers=self._XML_HEADERS,
            )
        job = adapter_xml_parse_job(adapter_xml_parse_document(response.content, context_label="jobs.submit"))
        logger.info(
            "pipeline job submitted",
            extra={"event": "pipeline.job.submitted", "job_id": job.job_id, "script_id": request.script_id},
        )
        return job, self._adapter_iter_job_messages(job.job_id)

    def adapter_get_job(self, job_id: str) -> Job:
        """Return the current state of one job."""

        return adapter_xml_parse_job(self._adapter_get_document(f"/jobs/{quote(job_id, safe='')}", op="jobs.get"))

    def adapter_list_jobs(self) -> list[Job]:
        """Return every job visible to the configured client."""

        return adapter_xml_parse_jobs(self._adapter_get_document("/jobs", op="jobs.list"))

    def adapter_fetch_results(self, job_id: str, destination: BinaryIO) -> None:
        """Stream the zipped job results into `destination`.

        Args:
            job_id: Job identifier.
            destination: Writable binary stream.

        Returns:
            None: Writes to `destination` as side effect.

        Raises:
            PipelineServiceError: Raised for transport failures and non-success responses.
        """

        url = self._adapter_build_url(f"/jobs/{quote(job_id, safe='')}/result.zip")
        try:
            with self._client.stream("GET", url) as response:
                if response.status_code >= 400:
                    response.read()
                    self._adapter_raise_for_status(response, op="jobs.results")
                for chunk in response.iter_bytes():
                    destination.write(chunk)
        except httpx.TimeoutException as error:
            self._adapter_log_failure(op="jobs.results", error=error)
            raise PipelineTimeoutError("Pipeline request jobs.results timed out") from error
        except httpx.HTTPError as error:
            self._adapter_log_failure(op="jobs.results", error=error)
            raise PipelineConnectionError(f"Pipeline request jobs.results failed: {error}") from error

    def adapter_delete_job(self, job_id: str) -> None:
        """Delete one job and its data from the service."""

        self._adapter_request("DELETE", f"/jobs/{quote(job_id, safe='')}", op="jobs.delete")

    def adapter_list_clients(self) -> list[ServiceClient]:
        """Return all registered client accounts."""

        return adapter_xml_parse_clients(self._adapter_get_document("/admin/clients", op="clients.list"))

    def adapter_get_client(self, client_id: str) -> ServiceClient:
        """Return one client account."""

        return adapter_xml_parse_client(
            self._adapter_get_document(f"/admin/clients/{quote(client_id, safe='')}", op="clients.get")
        )

    def adapter_create_client(self, client: ServiceClient) -> ServiceClient:
        """Create one client account and return the stored record."""

        response = self._adapter_request(
            "POST",
            "/admin/clients",
            op="clients.create",
            content=adapter_xml_build_client(client),
            headers=self._XML_HEADERS,
        )
        return adapter_xml_parse_client(adapter_xml_parse_document(response.content, context_label="clients.create"))

    def adapter_modify_client(self, client: ServiceClient) -> ServiceClient:
        """Replace one client account and return the stored record."""

        response = self._adapter_request(
            "PUT",
            f"/admin/clients/{quote(client.client_id, safe='')}",
            op="clients.modify",
            content=adapter_xml_build_client(client),
            headers=self._XML_HEADERS,
        )
        return adapter_xml_parse_client(adapter_xml_parse_document(response.content, context_label="clients.modify"))

    def adapter_delete_client(self, client_id: str) -> None:
        """Delete one client account."""

        self._adapter_request("DELETE", f"/admin/clients/{quote(client_id, safe='')}", op="clients.delete")

    def adapter_list_properties(self) -> list[ServiceProperty]:
        """Return the service runtime properties."""

        return adapter_xml_parse_properties(self._adapter_get_document("/admin/properties", op="properties.list"))

    def adapter_get_sizes(self) -> JobSizes:
        """Return stored job data sizes."""

        return adapter_xml_parse_sizes(self._adapter_get_document("/admin/sizes", op="sizes.get"))

    def adapter_halt(self, key: str) -> None:
        """Stop the service using its shutdown key."""

        normalized_key = key.strip()
        if not normalized_key:
            raise ValueError("halt key must not be blank")
        self._adapter_request("GET", f"/admin/halt/{quote(normalized_key, safe='')}", op="admin.halt")

    def _adapter_iter_job_messages(self, job_id: str) -> Iterator[JobMessage]:
        """Poll one job and yield its new messages until a terminal status.

        Every poll yields the messages not seen yet, or a bare status update
        when there are none. A failed poll yields one error-bearing message and
        ends the stream.

        Args:
            job_id: Job identifier.

        Returns:
            Iterator[JobMessage]: Lazy, single-use message stream.

        Raises:
            RuntimeError: Failures are yielded as messages, not raised.
        """

        last_sequence = -1
        seen_unnumbered: set[tuple[str | None, str | None]] = set()
        while True:
            query_parameters = {"msgSeq": str(last_sequence)} if last_sequence >= 0 else None
            try:
                root = self._adapter_get_document(
                    f"/jobs/{quote(job_id, safe='')}",
                    op="jobs.poll",
                    query_parameters=query_parameters,
                )
                job = adapter_xml_parse_job(root)
                messages = adapter_xml_parse_job_messages(root, status=job.status)
            except PipelineServiceError as error:
                yield JobMessage(error=error)
                return

            new_messages = []
            for message in messages:
                if message.sequence is None:
                    # the server repeats unnumbered messages on every poll
                    message_key = (message.level, message.text)
                    if message_key in seen_unnumbered:
                        continue
                    seen_unnumbered.add(message_key)
                elif message.sequence <= last_sequence:
                    continue
                new_messages.append(message)
            for message in new_messages:
                if message.sequence is not None:
                    last_sequence = message.sequence
                yield message
            if not new_messages:
                yield JobMessage(status=job.status)

            if job.status in JOB_TERMINAL_STATUSES:
                return
            if self._poll_interval_seconds > 0:
                time.sleep(self._poll_interval_seconds)

    def _adapter_resolve_data_type(self, data_type_id: str) -> DataType:
        """Load one named data type definition, caching by identifier."""

        cached_data_type = self._data_type_cache.get(data_type_id)
        if cached_data_type is not None:
            return cached_data_type
        root = self._adapter_get_document(f"/datatypes/{quote(data_type_id, safe='')}", op="datatypes.get")
        data_type = adapter_xml_parse_data_type(root)
        self._data_type_cache[data_type_id] = data_type
        return data_type

    def _adapter_get_document(
        self,
        path: str,
        op: str,
        query_parameters: dict[str, str] | None = None,
    ):
        response = self._adapter_request("GET", path, op=op, query_parameters=query_parameters)
        return adapter_xml_parse_document(response.content, context_label=op)

    def _adapter_request(
        self,
        method: str,
        path: str,
        op: str,
        query_parameters: dict[str, str] | None = None,
        content: bytes | None = None,
        files: dict[str, tuple[str, bytes, str]] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Execute one HTTP request and map failures to typed adapter errors.

        Args:
            method: HTTP method.
            path: Path relative to the base URL.
            op: Operation label used in errors and logs.
            query_parameters: Optional query string parameters.
            content: Optional raw request body.
            files: Optional multipart parts.
            headers: Optional extra request headers.

        Returns:
            httpx.Response: Successful response.

        Raises:
            PipelineTimeoutError: Raised when the request times out.
            PipelineConnectionError: Raised for transport failures.
            PipelineRequestError: Raised for 4xx responses.
            PipelineResponseError: Raised for 5xx responses.
        """

        url = self._adapter_build_url(path, query_parameters)
        started = time.perf_counter()
        try:
            response = self._client.request(method, url, content=content, files=files, headers=headers)
        except httpx.TimeoutException as error:
            self._adapter_log_failure(op=op, error=error, started=started)
            raise PipelineTimeoutError(f"Pipeline request {op} timed out") from error
        except httpx.HTTPError as error:
            self._adapter_log_failure(op=op, error=error, started=started)
            raise PipelineConnectionError(f"Pipeline request {op} failed: {error}") from error

        logger.debug(
            "pipeline request completed",
            extra={
                "event": "pipeline.request.completed",
                "op": op,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        if response.status_code >= 400:
            self._adapter_raise_for_status(response, op=op)
        return response

    def _adapter_raise_for_status(self, response: httpx.Response, op: str) -> None:
        """Raise the typed error matching a non-success HTTP response."""

        status_code = response.status_code
        description = adapter_xml_parse_error_description(response.content) or response.reason_phrase
        message = f"Pipeline {op} failed with HTTP {status_code}: {description}"
        logger.error(
            "pipeline request rejected",
            extra={"event": "pipeline.request.rejected", "op": op, "status_code": status_code},
        )
        if status_code in (401, 403):
            raise PipelineAuthenticationError(message, status_code=status_code)
        if status_code == 404:
            raise PipelineNotFoundError(message, status_code=status_code)
        if status_code < 500:
            raise PipelineRequestError(message, status_code=status_code)
        raise PipelineResponseError(message, status_code=status_code)

    def _adapter_build_url(self, path: str, query_parameters: dict[str, str] | None = None) -> str:
        """Build the absolute request URL, signed when credentials are configured.

        Signed URLs carry `authid`, `time` and `nonce`, followed by `sign`, the
        base64 HMAC-SHA1 of everything before it keyed with the client secret.

        Args:
            path: Path relative to the base URL.
            query_parameters: Optional query string parameters.

        Returns:
            str: Absolute request URL.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        url = f"{self._base_url}{path}"
        if query_parameters:
            url = f"{url}?{urlencode(query_parameters)}"
        if not self._client_key:
            return url

        separator = "&" if "?" in url else "?"
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        unsigned_url = (
            f"{url}{separator}authid={quote(self._client_key, safe='')}"
            f"&time={timestamp}&nonce={self._nonce_provider()}"
        )
        digest = hmac.new(self._client_secret.encode("utf-8"), unsigned_url.encode("utf-8"), hashlib.sha1).digest()
        signature = base64.b64encode(digest).decode("ascii")
        return f"{unsigned_url}&sign={quote(signature, safe='')}"

    def _adapter_log_failure(self, op: str, error: Exception, started: float | None = None) -> None:
        duration_ms = round((time.perf_counter() - started) * 1000, 2) if started is not None else None
        logger.error(
            "pipeline request failed",
            extra={
                "event": "pipeline.request.failed",
                "op": op,
                "duration_ms": duration_ms,
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )


def _adapter_random_nonce() -> str:
    return "".join(random.choice("0123456789") for _ in range(30))

"""Typed domain models shared across runtime layers.

Script descriptors, jobs, sizes and clients are immutable snapshots of server
state. `JobRequest` is the one mutable contract: it is filled incrementally by
argument callbacks during parsing and consumed once at submission time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from .data_types import DataType, FileUriType


class JobStatus(str, Enum):
    """Job states reported by the pipeline web service."""

    IDLE = "IDLE"
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    FAIL = "FAIL"


JOB_TERMINAL_STATUSES: Final[frozenset[str]] = frozenset(
    {JobStatus.SUCCESS.value, JobStatus.ERROR.value, JobStatus.FAIL.value}
)

JOB_PRIORITIES: Final[tuple[str, ...]] = ("high", "medium", "low")

CLIENT_ROLES: Final[tuple[str, ...]] = ("ADMIN", "CLIENTAPP")


@dataclass(frozen=True)
class ScriptArgumentDeclaration:
    """Declared script input or option.

    Attributes:
        name: Port or option name used as request key.
        nicename: Human-readable label.
        short_description: One-line description.
        long_description: Full description.
        data_type: Accepted value shape.
        sequence: Whether a comma-delimited list of values is accepted.
        required: Whether the argument must be supplied.
        media_type: Optional declared media type.
    """

    name: str
    nicename: str = ""
    short_description: str = ""
    long_description: str = ""
    data_type: DataType = field(default_factory=FileUriType)
    sequence: bool = False
    required: bool = True
    media_type: str | None = None

    def declaration_help_text(self) -> str:
        """Return the one-line help text shown next to the argument.

        Returns:
            str: Short description, falling back to the nicename, marked with
            ` [...]` when a longer description exists.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        short_description = self.short_description.strip()
        long_description = self.long_description.strip()
        if not short_description:
            return self.nicename.strip()
        if len(long_description) > len(short_description):
            return f"{short_description} [...]"
        return short_description


@dataclass(frozen=True)
class ScriptDescriptor:
    """Script interface received from the server.

    Attributes:
        script_id: Stable script identifier.
        href: Canonical script resource URL.
        nicename: Human-readable name.
        description: Script description.
        version: Script version label.
        inputs: Ordered input declarations.
        options: Ordered option declarations.
        homepage: Optional documentation URL.
    """

    script_id: str
    href: str = ""
    nicename: str = ""
    description: str = ""
    version: str = ""
    inputs: tuple[ScriptArgumentDeclaration, ...] = ()
    options: tuple[ScriptArgumentDeclaration, ...] = ()
    homepage: str | None = None


@dataclass
class JobRequest:
    """Client-side description of one job submission.

    Attributes:
        script_id: Script to execute.
        nicename: Optional job nice name.
        priority: Optional priority (`high`, `medium` or `low`).
        inputs: Input name to ordered resolved URIs.
        options: Option name to ordered validated values.
        data: Optional archive bytes uploaded with the request.
        background: Whether the client returns right after submission.
    """

    script_id: str
    nicename: str = ""
    priority: str | None = None
    inputs: dict[str, list[str]] = field(default_factory=dict)
    options: dict[str, list[str]] = field(default_factory=dict)
    data: bytes | None = None
    background: bool = False

    def request_append_inputs(self, name: str, uris: list[str]) -> None:
        """Append resolved URIs to one input, keeping insertion order.

        Args:
            name: Declared input name.
            uris: Resolved URI strings.

        Returns:
            None: Updates the request as side effect.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        self.inputs.setdefault(name, []).extend(uris)

    def request_append_options(self, name: str, values: list[str]) -> None:
        """Append validated values to one option, keeping insertion order.

        Args:
            name: Declared option name.
            values: Normalized option values.

        Returns:
            None: Updates the request as side effect.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        self.options.setdefault(name, []).extend(values)


@dataclass(frozen=True)
class Job:
    """Server-side job handle.

    Attributes:
        job_id: Opaque job identifier.
        status: Latest known job status.
        nicename: Optional job nice name.
        href: Job resource URL.
    """

    job_id: str
    status: str
    nicename: str = ""
    href: str = ""


@dataclass(frozen=True)
class JobMessage:
    """One unit of a job's live message stream.

    A message carries either log text, a plain status update, or a terminal
    error. The stream ends after an error-bearing message.

    Attributes:
        status: Job status observed when the message was produced.
        text: Optional log line.
        level: Optional log level label.
        sequence: Optional message sequence number.
        error: Optional terminal error.
    """

    status: str = ""
    text: str | None = None
    level: str | None = None
    sequence: int | None = None
    error: Exception | None = None

    def message_render(self) -> str | None:
        """Return printable message text, if the message carries any."""

        if self.text is None:
            return None
        if self.level:
            return f"[{self.level}] {self.text}"
        return self.text


@dataclass(frozen=True)
class JobSize:
    """Stored data sizes for one job, in bytes."""

    job_id: str
    context: int
    output: int
    log: int

    def size_total(self) -> int:
        """Return the sum of context, output and log sizes."""

        return self.context + self.output + self.log


@dataclass(frozen=True)
class JobSizes:
    """Aggregated stored data sizes reported by the server."""

    total: int
    job_sizes: tuple[JobSize, ...] = ()


@dataclass(frozen=True)
class ServiceClient:
    """Server-side client account.

    Attributes:
        client_id: Unique client identifier.
        secret: Client secret.
        role: `ADMIN` or `CLIENTAPP`.
        contact: Optional contact e-mail address.
    """

    client_id: str
    secret: str = ""
    role: str = ""
    contact: str = ""


@dataclass(frozen=True)
class ServiceProperty:
    """Runtime property exposed by the server."""

    name: str
    value: str
    bundle_name: str = ""

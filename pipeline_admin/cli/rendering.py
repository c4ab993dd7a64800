"""Plain-text renderers for administrative command output."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from pipeline_admin.domain import Job, JobSize, JobSizes, ServiceClient, ServiceProperty

SizeFormatter = Callable[[int], str]


def cli_format_size_bytes(size: int) -> str:
    return str(size)


def cli_format_size_megabytes(size: int) -> str:
    return f"{size / 1048576:.4f}M"


def cli_render_clients(clients: Sequence[ServiceClient]) -> str:
    """Render the client list as `id (role)` rows under a header."""

    lines = ["client_id         (role)", ""]
    lines.extend(f"{client.client_id}          ({client.role})" for client in clients)
    return "\n".join(lines) + "\n"


def cli_render_client(client: ServiceClient) -> str:
    """Render one client record with its secret masked.

    Args:
        client: Client record.

    Returns:
        str: Multi-line client description.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return (
        f"Client id:      {client.client_id}\n"
        f"Role:           {client.role}\n"
        f"Contact:        {client.contact}\n"
        "Secret:         ****\n"
    )


def cli_render_properties(properties: Sequence[ServiceProperty]) -> str:
    lines = ["Name          Value           Bundle", ""]
    lines.extend(
        f"{service_property.name}            {service_property.value}              {service_property.bundle_name}"
        for service_property in properties
    )
    return "\n".join(lines) + "\n"


def cli_render_sizes_total(sizes: JobSizes, size_formatter: SizeFormatter) -> str:
    return f"Total {size_formatter(sizes.total)}\n"


def cli_render_sizes_list(job_sizes: Sequence[JobSize], size_formatter: SizeFormatter) -> str:
    """Render per-job stored sizes as a table.

    Args:
        job_sizes: Per-job size records.
        size_formatter: Formatter applied to every size column.

    Returns:
        str: Table with context, output, log and total columns.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    lines = ["JobId                 Context Size    Output Size    Log Size    Total Size", ""]
    for job_size in job_sizes:
        lines.append(
            f"{job_size.job_id}   {size_formatter(job_size.context)}    {size_formatter(job_size.output)}"
            f"    {size_formatter(job_size.log)}    {size_formatter(job_size.size_total())}"
        )
    return "\n".join(lines) + "\n"


def cli_render_job(job: Job) -> str:
    lines = [f"Job Id:          {job.job_id}", f"Status:          {job.status}"]
    if job.nicename:
        lines.append(f"Name:            {job.nicename}")
    return "\n".join(lines) + "\n"


def cli_render_jobs(jobs: Sequence[Job]) -> str:
    lines = ["Job Id                                  Status      Name", ""]
    lines.extend(f"{job.job_id}    {job.status}    {job.nicename}" for job in jobs)
    return "\n".join(lines) + "\n"

"""Application bootstrap wiring for startup validation and dependency assembly."""

from pathlib import Path
import sys
from typing import TextIO

from pipeline_admin.adapters import PipelineWebServiceAdapter
from pipeline_admin.cli import AdminCommands, CommandLineApplication, JobCommands
from pipeline_admin.config import AppSettings, config_load_settings
from pipeline_admin.jobs import FileLastJobIdStore, JobExecutionOrchestrator, job_default_last_job_id_path


def bootstrap_create_service_adapter(settings: AppSettings | None = None) -> PipelineWebServiceAdapter:
    """Create the pipeline web service adapter from validated settings.

    Args:
        settings: Optional preloaded settings.

    Returns:
        PipelineWebServiceAdapter: Configured adapter instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    return PipelineWebServiceAdapter(
        base_url=resolved_settings.pipeline_base_url,
        client_key=resolved_settings.pipeline_client_key,
        client_secret=resolved_settings.pipeline_client_secret,
        request_timeout_seconds=resolved_settings.pipeline_request_timeout_seconds,
        poll_interval_seconds=resolved_settings.pipeline_poll_interval_seconds,
    )


def bootstrap_create_command_line(
    settings: AppSettings | None = None,
    service: PipelineWebServiceAdapter | None = None,
    stdout: TextIO | None = None,
) -> CommandLineApplication:
    """Assemble the command-line application after validating startup configuration.

    Args:
        settings: Optional preloaded settings.
        service: Optional preconstructed service adapter.
        stdout: Optional output stream for job progress lines.

    Returns:
        CommandLineApplication: Fully wired command-line application.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    resolved_service = service or bootstrap_create_service_adapter(resolved_settings)
    last_job_id_path = (
        Path(resolved_settings.last_job_id_path)
        if resolved_settings.last_job_id_path
        else job_default_last_job_id_path()
    )
    last_job_id_store = FileLastJobIdStore(path=last_job_id_path)
    orchestrator = JobExecutionOrchestrator(
        service=resolved_service,
        last_job_id_store=last_job_id_store,
        stdout=stdout or sys.stdout,
    )
    return CommandLineApplication(
        service=resolved_service,
        orchestrator=orchestrator,
        admin_commands=AdminCommands(
            service=resolved_service,
            halt_key_path=Path(resolved_settings.pipeline_halt_key_path),
        ),
        job_commands=JobCommands(service=resolved_service, last_job_id_store=last_job_id_store),
        scripts_enabled=resolved_settings.scripts_enabled,
    )

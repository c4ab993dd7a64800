"""Command-line application assembling fixed and synthesized commands."""

from __future__ import annotations

from collections.abc import Sequence
import logging
from pathlib import Path
from typing import TextIO

from pipeline_admin.adapters import PipelineServicePort
from pipeline_admin.domain import ScriptDescriptor, domain_resolution_mode_for
from pipeline_admin.jobs import JobExecutionOrchestrator

from .admin_commands import AdminCommands
from .job_commands import JobCommands
from .parser import CommandLineParser
from .script_commands import ScriptCommand, cli_synthesize_script_commands

logger = logging.getLogger(__name__)


class CommandLineApplication:
    """Root command line with administrative, job and script commands.

    Script descriptors are fetched from the service once and reused; every
    parser build synthesizes fresh script commands so each parse fills a new
    job request.
    """

    def __init__(
        self,
        service: PipelineServicePort,
        orchestrator: JobExecutionOrchestrator,
        admin_commands: AdminCommands,
        job_commands: JobCommands,
        scripts_enabled: bool = True,
        base_directory: Path | None = None,
        prog: str = "pipeline-admin",
    ):
        if service is None:
            raise ValueError("service must not be None")
        self._service = service
        self._orchestrator = orchestrator
        self._admin_commands = admin_commands
        self._job_commands = job_commands
        self._scripts_enabled = scripts_enabled
        self._base_directory = base_directory
        self._prog = prog
        self._descriptors: list[ScriptDescriptor] | None = None
        self.script_commands: list[ScriptCommand] = []

    def cli_build_parser(self) -> CommandLineParser:
        """Build the root parser with every available command registered.

        Returns:
            CommandLineParser: Root parser.

        Raises:
            PipelineServiceError: Raised when scripts are enabled and cannot be listed.
        """

        parser = CommandLineParser(
            prog=self._prog,
            description="Administrative client for the pipeline web service",
        )
        subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)
        self._admin_commands.admin_register(subparsers)
        self._job_commands.job_register(subparsers)

        self.script_commands = []
        if self._scripts_enabled:
            reserved_command_names = set(subparsers.choices)
            descriptors = []
            for descriptor in self._cli_load_descriptors():
                if descriptor.script_id in reserved_command_names:
                    logger.warning(
                        "script skipped because its id is a built-in command",
                        extra={"event": "cli.script_command.skipped", "script_id": descriptor.script_id},
                    )
                    continue
                descriptors.append(descriptor)
            self.script_commands = cli_synthesize_script_commands(
                subparsers,
                descriptors,
                resolution_mode=domain_resolution_mode_for(self._service.adapter_is_local_mode()),
                orchestrator=self._orchestrator,
                base_directory=self._base_directory,
            )
        return parser

    def cli_run(self, argv: Sequence[str], stdout: TextIO) -> int:
        """Parse `argv` and run the selected command.

        Args:
            argv: Command-line arguments without the program name.
            stdout: Output stream for command results.

        Returns:
            int: Process exit status.

        Raises:
            CommandLineError: Raised when the command line is invalid.
            PipelineServiceError: Raised for service failures.
        """

        parser = self.cli_build_parser()
        arguments = parser.parse_args(list(argv))
        logger.debug("command selected", extra={"event": "cli.command.selected", "command": arguments.command})
        return arguments.command_handler(arguments, stdout)

    def _cli_load_descriptors(self) -> list[ScriptDescriptor]:
        if self._descriptors is None:
            self._descriptors = self._service.adapter_list_scripts()
        return self._descriptors

"""Command synthesis from server-provided script descriptors.

Every script becomes one sub-command whose arguments are derived from the
script's declared inputs and options. Argument callbacks validate each value
as it is parsed and fill the command's own `JobRequest`, so a fully parsed
command line is a fully validated request.
"""

from __future__ import annotations

import argparse
from collections.abc import Iterable
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Final, TextIO

from pipeline_admin.domain import (
    JOB_PRIORITIES,
    JobRequest,
    JobStatus,
    ScriptArgumentDeclaration,
    ScriptDescriptor,
    UriResolutionMode,
    ValueValidationError,
    domain_format_option_error,
    domain_resolve_uri,
    domain_validate_sequence,
    domain_validate_value,
)
from pipeline_admin.jobs import JobExecutionOptions, JobExecutionOrchestrator, JobExecutionResult

from .parser import ArgumentCallback, cli_add_callback_argument, cli_escape_help

logger = logging.getLogger(__name__)

RESERVED_ARGUMENT_NAMES: Final[frozenset[str]] = frozenset(
    {"output", "zip", "nicename", "priority", "quiet", "persistent", "background", "data", "help"}
)
INPUT_PREFIX: Final[str] = "i-"
OPTION_PREFIX: Final[str] = "x-"


@dataclass(frozen=True)
class CommandArgument:
    """One row of a script command's argument table.

    Attributes:
        flags: Option strings accepted on the command line.
        kind: `input`, `option` or `control`.
        callback: Callback run for every occurrence.
        help_text: One-line help.
        required: Whether the argument must be supplied.
        switch: Whether the argument takes no value.
        metavar: Value placeholder shown in help.
    """

    flags: tuple[str, ...]
    kind: str
    callback: ArgumentCallback
    help_text: str
    required: bool = False
    switch: bool = False
    metavar: str = "VALUE"


class ScriptCommand:
    """Sub-command synthesized from one script descriptor."""

    def __init__(
        self,
        descriptor: ScriptDescriptor,
        resolution_mode: UriResolutionMode,
        orchestrator: JobExecutionOrchestrator,
        base_directory: Path | None = None,
    ):
        """Initialize the command and build its argument table.

        Args:
            descriptor: Script descriptor received from the server.
            resolution_mode: URI resolution mode of the active connection.
            orchestrator: Orchestrator executing the populated request.
            base_directory: Base directory for relative local paths; defaults
                to the working directory at resolution time.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when the descriptor has no script id.
        """

        if not descriptor.script_id.strip():
            raise ValueError("descriptor.script_id must not be blank")

        self._descriptor = descriptor
        self._resolution_mode = resolution_mode
        self._orchestrator = orchestrator
        self._base_directory = base_directory

        self.request = JobRequest(script_id=descriptor.script_id)
        self._output: str | None = None
        self._zipped = False
        self._quiet = False
        self._persistent = False

        self._registered_names: set[str] = set(RESERVED_ARGUMENT_NAMES)
        self.arguments: tuple[CommandArgument, ...] = self._command_build_arguments()

    @property
    def name(self) -> str:
        return self._descriptor.script_id

    @property
    def help_text(self) -> str:
        return f"{self._descriptor.description} [v{self._descriptor.version}]"

    @property
    def execution_options(self) -> JobExecutionOptions:
        return JobExecutionOptions(
            output=self._output,
            zipped=self._zipped,
            quiet=self._quiet,
            persistent=self._persistent,
        )

    def command_register(self, subparsers: argparse._SubParsersAction) -> argparse.ArgumentParser:
        """Register the command and its argument table on `subparsers`.

        Args:
            subparsers: Sub-parser collection of the root parser.

        Returns:
            argparse.ArgumentParser: Registered sub-parser.

        Raises:
            argparse.ArgumentError: Raised when the command name is already taken.
        """

        command_parser = subparsers.add_parser(
            self.name,
            help=cli_escape_help(self.help_text),
            description=cli_escape_help(self.help_text),
        )
        for argument in self.arguments:
            cli_add_callback_argument(
                command_parser,
                argument.flags,
                argument.callback,
                help_text=argument.help_text,
                required=argument.required,
                switch=argument.switch,
                metavar=argument.metavar,
            )
        command_parser.set_defaults(command_handler=self.command_handle)
        return command_parser

    def command_handle(self, _arguments: argparse.Namespace, _stdout: TextIO) -> int:
        result = self.command_run()
        return 1 if result.status == JobStatus.ERROR.value else 0

    def command_run(self) -> JobExecutionResult:
        """Hand the populated request to the orchestrator."""

        logger.debug(
            "script command running",
            extra={
                "event": "cli.script_command.run",
                "script_id": self.name,
                "input_names": sorted(self.request.inputs),
                "option_names": sorted(self.request.options),
            },
        )
        return self._orchestrator.job_execute(self.request, self.execution_options)

    def _command_build_arguments(self) -> tuple[CommandArgument, ...]:
        arguments: list[CommandArgument] = []
        for declaration in self._descriptor.inputs:
            arguments.append(
                CommandArgument(
                    flags=self._command_claim_flags(declaration.name, INPUT_PREFIX),
                    kind="input",
                    callback=self._command_input_callback(declaration),
                    help_text=declaration.declaration_help_text(),
                    required=True,
                    metavar="PATH",
                )
            )
        for declaration in self._descriptor.options:
            arguments.append(
                CommandArgument(
                    flags=self._command_claim_flags(declaration.name, OPTION_PREFIX),
                    kind="option",
                    callback=self._command_option_callback(declaration),
                    help_text=declaration.declaration_help_text(),
                    required=declaration.required,
                )
            )
        arguments.extend(self._command_control_arguments())
        return tuple(arguments)

    def _command_claim_flags(self, name: str, prefix: str) -> tuple[str, ...]:
        """Return the option strings for one declared name and reserve them.

        A name that collides with a control argument or an earlier argument is
        exposed only in its prefixed spelling; any other name is exposed as is
        and also accepts the prefixed spelling.
        """

        prefixed_name = f"{prefix}{name}"
        if name in self._registered_names:
            claimed_names = [prefixed_name]
        else:
            claimed_names = [name]
            if prefixed_name not in self._registered_names:
                claimed_names.append(prefixed_name)
        self._registered_names.update(claimed_names)
        return tuple(f"--{claimed_name}" for claimed_name in claimed_names)

    def _command_input_callback(self, declaration: ScriptArgumentDeclaration) -> ArgumentCallback:
        input_name = declaration.name

        def _callback(value: str | None) -> None:
            uris = [
                domain_resolve_uri(path, self._resolution_mode, base_directory=self._base_directory)
                for path in (value or "").split(",")
            ]
            self.request.request_append_inputs(input_name, uris)

        return _callback

    def _command_option_callback(self, declaration: ScriptArgumentDeclaration) -> ArgumentCallback:
        option_name = declaration.name

        def _callback(value: str | None) -> None:
            raw_value = value or ""
            try:
                if declaration.sequence:
                    values = domain_validate_sequence(
                        raw_value,
                        declaration.data_type,
                        self._resolution_mode,
                        base_directory=self._base_directory,
                    )
                else:
                    values = [
                        domain_validate_value(
                            raw_value,
                            declaration.data_type,
                            self._resolution_mode,
                            base_directory=self._base_directory,
                        )
                    ]
            except ValueValidationError as error:
                rejected_value = error.value if error.value is not None else raw_value
                raise ValueValidationError(domain_format_option_error(option_name, rejected_value, error)) from error
            self.request.request_append_options(option_name, values)

        return _callback

    def _command_control_arguments(self) -> list[CommandArgument]:
        arguments = [
            CommandArgument(
                flags=("--output", "-o"),
                kind="control",
                callback=self._command_set_output,
                help_text=(
                    "Path where to store the results. This option is mandatory when the job is not executed "
                    "in the background"
                ),
                metavar="PATH",
            ),
            CommandArgument(
                flags=("--zip", "-z"),
                kind="control",
                callback=self._command_set_zipped,
                help_text="Write the output to a zip file rather than to a folder",
                switch=True,
            ),
            CommandArgument(
                flags=("--nicename", "-n"),
                kind="control",
                callback=self._command_set_nicename,
                help_text="Set job's nice name",
                metavar="NAME",
            ),
            CommandArgument(
                flags=("--priority", "-r"),
                kind="control",
                callback=self._command_set_priority,
                help_text="Set job's priority (high|medium|low)",
                metavar="PRIORITY",
            ),
            CommandArgument(
                flags=("--quiet", "-q"),
                kind="control",
                callback=self._command_set_quiet,
                help_text="Do not print the job's messages",
                switch=True,
            ),
            CommandArgument(
                flags=("--persistent", "-p"),
                kind="control",
                callback=self._command_set_persistent,
                help_text="Keep the job on the server after it is executed",
                switch=True,
            ),
            CommandArgument(
                flags=("--background", "-b"),
                kind="control",
                callback=self._command_set_background,
                help_text="Sends the job and exits",
                switch=True,
            ),
        ]
        if self._resolution_mode is UriResolutionMode.REMOTE:
            arguments.append(
                CommandArgument(
                    flags=("--data", "-d"),
                    kind="control",
                    callback=self._command_set_data,
                    help_text="Zip file containing the files to convert",
                    required=True,
                    metavar="ZIP",
                )
            )
        return arguments

    def _command_set_output(self, value: str | None) -> None:
        self._output = value

    def _command_set_zipped(self, _value: str | None) -> None:
        self._zipped = True

    def _command_set_nicename(self, value: str | None) -> None:
        self.request.nicename = value or ""

    def _command_set_priority(self, value: str | None) -> None:
        if value not in JOB_PRIORITIES:
            raise ValueValidationError(f"{value} is not a valid priority. Allowed values are high, medium and low")
        self.request.priority = value

    def _command_set_quiet(self, _value: str | None) -> None:
        self._quiet = True

    def _command_set_persistent(self, _value: str | None) -> None:
        self._persistent = True

    def _command_set_background(self, _value: str | None) -> None:
        self.request.background = True

    def _command_set_data(self, value: str | None) -> None:
        data_path = Path(value or "")
        self.request.data = data_path.read_bytes()
        logger.debug(
            "job data loaded",
            extra={"event": "cli.script_command.data_loaded", "path": str(data_path), "size": len(self.request.data)},
        )


def cli_synthesize_script_commands(
    subparsers: argparse._SubParsersAction,
    descriptors: Iterable[ScriptDescriptor],
    resolution_mode: UriResolutionMode,
    orchestrator: JobExecutionOrchestrator,
    base_directory: Path | None = None,
) -> list[ScriptCommand]:
    """Register one sub-command per script descriptor.

    Args:
        subparsers: Sub-parser collection of the root parser.
        descriptors: Script descriptors received from the server.
        resolution_mode: URI resolution mode of the active connection.
        orchestrator: Orchestrator executing populated requests.
        base_directory: Optional base directory for relative local paths.

    Returns:
        list[ScriptCommand]: Registered commands in descriptor order.

    Raises:
        argparse.ArgumentError: Raised when a script id collides with another command.
    """

    commands: list[ScriptCommand] = []
    for descriptor in descriptors:
        command = ScriptCommand(
            descriptor,
            resolution_mode=resolution_mode,
            orchestrator=orchestrator,
            base_directory=base_directory,
        )
        command.command_register(subparsers)
        commands.append(command)
    return commands

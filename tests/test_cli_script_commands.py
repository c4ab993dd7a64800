"""Regression tests for command synthesis from script descriptors."""

from __future__ import annotations

from pathlib import Path

import pytest

from pipeline_admin.cli import CommandLineError, CommandLineParser, ScriptCommand, cli_synthesize_script_commands
from pipeline_admin.domain import (
    BooleanType,
    IntegerType,
    ScriptArgumentDeclaration,
    ScriptDescriptor,
    StringType,
    UriResolutionMode,
)
from pipeline_admin.jobs import JobExecutionOptions, JobExecutionResult


class _RecordingOrchestrator:
    """Orchestrator stub recording executed requests."""

    def __init__(self, status: str = "SUCCESS"):
        self.executions: list[tuple[object, JobExecutionOptions]] = []
        self._status = status

    def job_execute(self, request, options: JobExecutionOptions) -> JobExecutionResult:
        self.executions.append((request, options))
        return JobExecutionResult(job_id="job-1", status=self._status)


_RUN_DESCRIPTOR = ScriptDescriptor(
    script_id="run",
    description="Runs the test script",
    version="1.0",
    inputs=(ScriptArgumentDeclaration(name="source", short_description="Source document"),),
    options=(
        ScriptArgumentDeclaration(name="test-opt", data_type=StringType(), required=True),
        ScriptArgumentDeclaration(name="level", data_type=IntegerType(), required=False, sequence=True),
        ScriptArgumentDeclaration(name="output", data_type=BooleanType(), required=False),
    ),
)


def _build(
    descriptor: ScriptDescriptor,
    base_directory: Path,
    mode: UriResolutionMode = UriResolutionMode.LOCAL,
) -> tuple[CommandLineParser, ScriptCommand, _RecordingOrchestrator]:
    orchestrator = _RecordingOrchestrator()
    parser = CommandLineParser(prog="pipeline-admin")
    subparsers = parser.add_subparsers(dest="command", required=True)
    commands = cli_synthesize_script_commands(
        subparsers,
        [descriptor],
        resolution_mode=mode,
        orchestrator=orchestrator,
        base_directory=base_directory,
    )
    return parser, commands[0], orchestrator


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    (tmp_path / "tmp").mkdir()
    (tmp_path / "tmp" / "file").write_text("content", encoding="utf-8")
    return tmp_path


def test_cli_script_command_end_to_end_populates_request(workspace: Path) -> None:
    """Populate inputs and options from prefixed argument spellings.

    Args:
        workspace: Directory holding `tmp/file`.

    Returns:
        None: Assertions validate request contents and execution hand-off.

    Raises:
        AssertionError: Raised when the request is populated incorrectly.
    """

    parser, command, orchestrator = _build(_RUN_DESCRIPTOR, workspace)

    arguments = parser.parse_args(
        ["run", "--i-source", "./tmp/file", "--x-test-opt", "./myfile.xml", "--output", "./out"]
    )
    exit_status = arguments.command_handler(arguments, None)

    assert exit_status == 0
    assert command.request.inputs == {"source": [(workspace / "tmp" / "file").as_uri()]}
    assert command.request.options == {"test-opt": ["./myfile.xml"]}
    request, options = orchestrator.executions[0]
    assert request is command.request
    assert options.output == "./out"


def test_cli_script_command_missing_required_option_names_it(workspace: Path) -> None:
    parser, _command, orchestrator = _build(_RUN_DESCRIPTOR, workspace)

    with pytest.raises(CommandLineError, match="test-opt"):
        parser.parse_args(["run", "--i-source", "./tmp/file", "--output", "./out"])

    assert orchestrator.executions == []


def test_cli_script_command_invalid_priority_is_rejected(workspace: Path) -> None:
    parser, _command, _orchestrator = _build(_RUN_DESCRIPTOR, workspace)

    with pytest.raises(
        CommandLineError,
        match="urgent is not a valid priority. Allowed values are high, medium and low",
    ):
        parser.parse_args(["run", "--source", "./tmp/file", "--test-opt", "x", "--priority", "urgent"])


def test_cli_script_command_colliding_option_is_prefixed_only(workspace: Path) -> None:
    """Expose an option named like a control argument only with its prefix.

    Args:
        workspace: Directory holding `tmp/file`.

    Returns:
        None: Assertions validate flag naming and request keys.

    Raises:
        AssertionError: Raised when collision handling is incorrect.
    """

    parser, command, _orchestrator = _build(_RUN_DESCRIPTOR, workspace)
    flags_by_kind = {argument.flags[0]: argument.kind for argument in command.arguments}

    assert ("--x-output",) in [argument.flags for argument in command.arguments]
    assert flags_by_kind["--output"] == "control"
    assert ("--source", "--i-source") in [argument.flags for argument in command.arguments]

    parser.parse_args(
        ["run", "--source", "./tmp/file", "--test-opt", "x", "--x-output", "TRUE", "--output", "./out"]
    )

    assert command.request.options["output"] == ["true"]
    assert command.execution_options.output == "./out"


def test_cli_script_command_sequence_and_repeats_keep_order(workspace: Path) -> None:
    (workspace / "b.xml").write_text("<b/>", encoding="utf-8")
    parser, command, _orchestrator = _build(_RUN_DESCRIPTOR, workspace)

    parser.parse_args(
        [
            "run",
            "--source",
            "tmp/file,b.xml",
            "--source",
            "b.xml",
            "--test-opt",
            "x",
            "--level",
            "3,0x10",
            "--level",
            "7",
        ]
    )

    assert command.request.inputs["source"] == [
        (workspace / "tmp" / "file").as_uri(),
        (workspace / "b.xml").as_uri(),
        (workspace / "b.xml").as_uri(),
    ]
    assert command.request.options["level"] == ["3", "0x10", "7"]


def test_cli_script_command_invalid_sequence_element_leaves_request_untouched(workspace: Path) -> None:
    """Reject a sequence with one bad element without appending any element.

    Args:
        workspace: Directory holding `tmp/file`.

    Returns:
        None: Assertions validate all-or-nothing sequence handling.

    Raises:
        AssertionError: Raised when partial values are appended.
    """

    parser, command, _orchestrator = _build(_RUN_DESCRIPTOR, workspace)

    with pytest.raises(CommandLineError, match="'x' is not allowed as the value for option --level"):
        parser.parse_args(["run", "--source", "tmp/file", "--test-opt", "x", "--level", "1,x,2"])

    assert "level" not in command.request.options


def test_cli_script_command_missing_input_path_aborts_parsing(workspace: Path) -> None:
    parser, command, _orchestrator = _build(_RUN_DESCRIPTOR, workspace)

    with pytest.raises(CommandLineError, match="does not exist"):
        parser.parse_args(["run", "--source", "missing.xml", "--test-opt", "x"])

    assert command.request.inputs == {}


def test_cli_script_command_switches_and_labels_fill_execution_state(workspace: Path) -> None:
    parser, command, _orchestrator = _build(_RUN_DESCRIPTOR, workspace)

    parser.parse_args(
        ["run", "--source", "tmp/file", "--test-opt", "x", "-b", "-p", "-q", "-z", "-n", "nightly", "-r", "low"]
    )

    assert command.request.background is True
    assert command.request.nicename == "nightly"
    assert command.request.priority == "low"
    assert command.execution_options == JobExecutionOptions(output=None, zipped=True, quiet=True, persistent=True)


def test_cli_script_command_remote_mode_requires_data(workspace: Path) -> None:
    """Require `--data` in remote mode and read the archive bytes.

    Args:
        workspace: Directory used for the data archive.

    Returns:
        None: Assertions validate remote mode arguments.

    Raises:
        AssertionError: Raised when data handling is incorrect.
    """

    data_path = workspace / "data.zip"
    data_path.write_bytes(b"PK\x03\x04")
    parser, command, _orchestrator = _build(_RUN_DESCRIPTOR, workspace, mode=UriResolutionMode.REMOTE)

    with pytest.raises(CommandLineError, match="--data"):
        parser.parse_args(["run", "--source", "content/book.xml", "--test-opt", "x"])

    parser, command, _orchestrator = _build(_RUN_DESCRIPTOR, workspace, mode=UriResolutionMode.REMOTE)
    parser.parse_args(["run", "--source", "content/book.xml", "--test-opt", "x", "-d", str(data_path)])

    assert command.request.data == b"PK\x03\x04"
    assert command.request.inputs["source"] == ["content/book.xml"]


def test_cli_script_command_local_mode_has_no_data_argument(workspace: Path) -> None:
    _parser, command, _orchestrator = _build(_RUN_DESCRIPTOR, workspace)

    assert all("--data" not in argument.flags for argument in command.arguments)


def test_cli_script_command_help_text_uses_description_and_version(workspace: Path) -> None:
    _parser, command, _orchestrator = _build(
        ScriptDescriptor(script_id="pct", description="100% coverage", version="2.1"),
        workspace,
    )

    assert command.help_text == "100% coverage [v2.1]"


def test_cli_script_command_error_status_returns_failure_exit_code(workspace: Path) -> None:
    parser, _command, orchestrator = _build(_RUN_DESCRIPTOR, workspace)
    orchestrator._status = "ERROR"

    arguments = parser.parse_args(["run", "--source", "tmp/file", "--test-opt", "x", "-o", "out"])

    assert arguments.command_handler(arguments, None) == 1

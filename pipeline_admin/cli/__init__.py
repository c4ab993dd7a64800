"""Command-line layer package for argument parsing and command dispatch."""

from .admin_commands import AdminCommands, cli_parse_client_role
from .application import CommandLineApplication
from .job_commands import JobCommands
from .parser import CallbackAction, CommandLineError, CommandLineParser, cli_add_callback_argument
from .script_commands import (
	INPUT_PREFIX,
	OPTION_PREFIX,
	RESERVED_ARGUMENT_NAMES,
	CommandArgument,
	ScriptCommand,
	cli_synthesize_script_commands,
)

__all__ = [
	"AdminCommands",
	"CallbackAction",
	"CommandArgument",
	"CommandLineApplication",
	"CommandLineError",
	"CommandLineParser",
	"INPUT_PREFIX",
	"JobCommands",
	"OPTION_PREFIX",
	"RESERVED_ARGUMENT_NAMES",
	"ScriptCommand",
	"cli_add_callback_argument",
	"cli_parse_client_role",
	"cli_synthesize_script_commands",
]

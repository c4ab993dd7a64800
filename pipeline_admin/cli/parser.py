"""argparse building blocks shared by every command-line command."""

from __future__ import annotations

import argparse
from collections.abc import Callable
from typing import Any, NoReturn

ArgumentCallback = Callable[[str | None], None]


class CommandLineError(ValueError):
    """Command line could not be parsed into a runnable command."""


class CommandLineParser(argparse.ArgumentParser):
    """Argument parser that raises `CommandLineError` instead of exiting.

    Prefix abbreviations are disabled so that synthesized option names never
    match each other by accident.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        kwargs.setdefault("allow_abbrev", False)
        super().__init__(*args, **kwargs)

    def error(self, message: str) -> NoReturn:
        raise CommandLineError(f"{self.prog}: {message}")


class CallbackAction(argparse.Action):
    """Action that hands each occurrence of an argument to a callback.

    Callbacks run in command-line order while parsing. `ValueError` and
    `OSError` raised by a callback abort parsing as argument errors.
    """

    def __init__(self, option_strings: list[str], dest: str, callback: ArgumentCallback, **kwargs: Any):
        self._callback = callback
        super().__init__(option_strings, dest, **kwargs)

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Any,
        option_string: str | None = None,
    ) -> None:
        value = values if isinstance(values, str) else None
        try:
            self._callback(value)
        except (ValueError, OSError) as error:
            raise argparse.ArgumentError(self, str(error)) from error


def cli_add_callback_argument(
    parser: argparse.ArgumentParser,
    flags: tuple[str, ...],
    callback: ArgumentCallback,
    help_text: str,
    required: bool = False,
    switch: bool = False,
    metavar: str = "VALUE",
) -> argparse.Action:
    """Register one callback-driven argument on `parser`.

    Args:
        parser: Target parser.
        flags: Option strings, long and short.
        callback: Callback receiving the value, or `None` for switches.
        help_text: Help line; `%` is escaped for argparse formatting.
        required: Whether the argument must appear at least once.
        switch: Whether the argument takes no value.
        metavar: Value placeholder shown in help.

    Returns:
        argparse.Action: Registered action.

    Raises:
        argparse.ArgumentError: Raised when a flag is already registered.
    """

    keyword_arguments: dict[str, Any] = {
        "action": CallbackAction,
        "callback": callback,
        "dest": argparse.SUPPRESS,
        "default": argparse.SUPPRESS,
        "required": required,
        "help": cli_escape_help(help_text),
    }
    if switch:
        keyword_arguments["nargs"] = 0
    else:
        keyword_arguments["metavar"] = metavar
    return parser.add_argument(*flags, **keyword_arguments)


def cli_escape_help(text: str) -> str:
    return text.replace("%", "%%")

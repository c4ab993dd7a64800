"""Administrative commands: client accounts, properties, sizes and halt."""

from __future__ import annotations

import argparse
from dataclasses import replace
import logging
from pathlib import Path
from typing import TextIO

from pipeline_admin.adapters import PipelineServicePort
from pipeline_admin.domain import CLIENT_ROLES, ServiceClient

from .rendering import (
    cli_format_size_bytes,
    cli_format_size_megabytes,
    cli_render_client,
    cli_render_clients,
    cli_render_properties,
    cli_render_sizes_list,
    cli_render_sizes_total,
)

logger = logging.getLogger(__name__)


def cli_parse_client_role(value: str) -> str:
    """Return `value` when it names a client role.

    Args:
        value: Raw role value.

    Returns:
        str: Validated role.

    Raises:
        argparse.ArgumentTypeError: Raised for unknown roles.
    """

    if value not in CLIENT_ROLES:
        raise argparse.ArgumentTypeError(f"{value} is not a valid role")
    return value


class AdminCommands:
    """Administrative command handlers bound to one pipeline service."""

    def __init__(self, service: PipelineServicePort, halt_key_path: Path):
        if service is None:
            raise ValueError("service must not be None")
        self._service = service
        self._halt_key_path = Path(halt_key_path)

    def admin_register(self, subparsers: argparse._SubParsersAction) -> None:
        """Register every administrative command on `subparsers`.

        Args:
            subparsers: Sub-parser collection of the root parser.

        Returns:
            None: Registers commands as side effect.

        Raises:
            argparse.ArgumentError: Raised when a command name is already taken.
        """

        list_parser = subparsers.add_parser("list", help="Returns the list of the available clients")
        list_parser.set_defaults(command_handler=self.admin_list_clients)

        client_parser = subparsers.add_parser("client", help="Prints the detailed client information")
        client_parser.add_argument("client_id", metavar="CLIENT_ID")
        client_parser.set_defaults(command_handler=self.admin_show_client)

        create_parser = subparsers.add_parser("create", help="Creates a new client")
        create_parser.add_argument("--id", "-i", dest="client_id", required=True, help="Client id (must be unique)")
        create_parser.add_argument("--secret", "-s", required=True, help="Client secret")
        create_parser.add_argument(
            "--role",
            "-r",
            type=cli_parse_client_role,
            default="CLIENTAPP",
            help="Client role (ADMIN,CLIENTAPP)",
        )
        create_parser.add_argument("--contact", "-c", default="", help="Client e-mail address")
        create_parser.set_defaults(command_handler=self.admin_create_client)

        modify_parser = subparsers.add_parser("modify", help="Modifies a client")
        modify_parser.add_argument("client_id", metavar="CLIENT_ID")
        modify_parser.add_argument("--secret", "-s", default="", help="Client secret")
        modify_parser.add_argument(
            "--role",
            "-r",
            type=cli_parse_client_role,
            default=None,
            help="Client role (ADMIN,CLIENTAPP)",
        )
        modify_parser.add_argument("--contact", "-c", default="", help="Client e-mail address")
        modify_parser.set_defaults(command_handler=self.admin_modify_client)

        delete_parser = subparsers.add_parser("delete", help="Deletes a client")
        delete_parser.add_argument("client_id", metavar="CLIENT_ID")
        delete_parser.set_defaults(command_handler=self.admin_delete_client)

        properties_parser = subparsers.add_parser("properties", help="List the pipeline ws runtime properties")
        properties_parser.set_defaults(command_handler=self.admin_list_properties)

        sizes_parser = subparsers.add_parser(
            "sizes",
            help="Prints the total size or a detailed list of job data stored in the server",
        )
        sizes_parser.add_argument(
            "--list",
            "-l",
            dest="detailed",
            action="store_true",
            help="Displays a detailed list rather than the total size",
        )
        sizes_parser.add_argument(
            "--human",
            "-H",
            action="store_true",
            help="Use a more human readable size (megabytes)",
        )
        sizes_parser.set_defaults(command_handler=self.admin_show_sizes)

        halt_parser = subparsers.add_parser("halt", help="Stops the WS")
        halt_parser.set_defaults(command_handler=self.admin_halt)

    def admin_list_clients(self, _arguments: argparse.Namespace, stdout: TextIO) -> int:
        stdout.write(cli_render_clients(self._service.adapter_list_clients()))
        return 0

    def admin_show_client(self, arguments: argparse.Namespace, stdout: TextIO) -> int:
        stdout.write(cli_render_client(self._service.adapter_get_client(arguments.client_id)))
        return 0

    def admin_create_client(self, arguments: argparse.Namespace, stdout: TextIO) -> int:
        created_client = self._service.adapter_create_client(
            ServiceClient(
                client_id=arguments.client_id,
                secret=arguments.secret,
                role=arguments.role,
                contact=arguments.contact,
            )
        )
        stdout.write("Client successfully created\n")
        stdout.write(cli_render_client(created_client))
        return 0

    def admin_modify_client(self, arguments: argparse.Namespace, stdout: TextIO) -> int:
        """Modify one client, keeping the server's values for omitted fields.

        Args:
            arguments: Parsed `modify` arguments.
            stdout: Output stream.

        Returns:
            int: Process exit status.

        Raises:
            PipelineServiceError: Raised when the client cannot be read or updated.
        """

        current_client = self._service.adapter_get_client(arguments.client_id)
        updated_client = replace(
            current_client,
            secret=arguments.secret or current_client.secret,
            role=arguments.role or current_client.role,
            contact=arguments.contact or current_client.contact,
        )
        modified_client = self._service.adapter_modify_client(updated_client)
        stdout.write("Client successfully modified\n")
        stdout.write(cli_render_client(modified_client))
        return 0

    def admin_delete_client(self, arguments: argparse.Namespace, stdout: TextIO) -> int:
        self._service.adapter_delete_client(arguments.client_id)
        stdout.write(f"Client {arguments.client_id} deleted\n")
        return 0

    def admin_list_properties(self, _arguments: argparse.Namespace, stdout: TextIO) -> int:
        stdout.write(cli_render_properties(self._service.adapter_list_properties()))
        return 0

    def admin_show_sizes(self, arguments: argparse.Namespace, stdout: TextIO) -> int:
        size_formatter = cli_format_size_megabytes if arguments.human else cli_format_size_bytes
        sizes = self._service.adapter_get_sizes()
        if arguments.detailed:
            stdout.write(cli_render_sizes_list(sizes.job_sizes, size_formatter))
        else:
            stdout.write(cli_render_sizes_total(sizes, size_formatter))
        return 0

    def admin_halt(self, _arguments: argparse.Namespace, stdout: TextIO) -> int:
        """Stop the server with the key stored in the configured key file.

        Args:
            _arguments: Parsed `halt` arguments.
            stdout: Output stream.

        Returns:
            int: Process exit status.

        Raises:
            OSError: Raised when the key file cannot be read.
            PipelineServiceError: Raised when the server rejects the key.
        """

        try:
            halt_key = self._halt_key_path.read_text(encoding="utf-8").strip()
        except OSError as error:
            raise OSError(f"Could not read the halt key from {self._halt_key_path}: {error}") from error
        if not halt_key:
            raise ValueError(f"Halt key file {self._halt_key_path} is empty")
        self._service.adapter_halt(halt_key)
        logger.info("pipeline halt requested", extra={"event": "cli.admin.halt"})
        stdout.write("The ws has been halted\n")
        return 0

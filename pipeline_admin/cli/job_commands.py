"""Job maintenance commands addressing jobs by id or by the last stored id."""

from __future__ import annotations

import argparse
from typing import TextIO

from pipeline_admin.adapters import PipelineServicePort
from pipeline_admin.jobs import LastJobIdStorePort, job_write_results_directory, job_write_results_zip

from .parser import CommandLineError
from .rendering import cli_render_job, cli_render_jobs


class JobCommands:
    """Job maintenance command handlers."""

    def __init__(self, service: PipelineServicePort, last_job_id_store: LastJobIdStorePort):
        if service is None:
            raise ValueError("service must not be None")
        if last_job_id_store is None:
            raise ValueError("last_job_id_store must not be None")
        self._service = service
        self._last_job_id_store = last_job_id_store

    def job_register(self, subparsers: argparse._SubParsersAction) -> None:
        """Register job maintenance commands on `subparsers`.

        Args:
            subparsers: Sub-parser collection of the root parser.

        Returns:
            None: Registers commands as side effect.

        Raises:
            argparse.ArgumentError: Raised when a command name is already taken.
        """

        jobs_parser = subparsers.add_parser("jobs", help="Returns the list of jobs present in the server")
        jobs_parser.set_defaults(command_handler=self.job_list)

        status_parser = subparsers.add_parser("status", help="Returns the status of a job")
        self._job_add_target_arguments(status_parser)
        status_parser.set_defaults(command_handler=self.job_show_status)

        results_parser = subparsers.add_parser("results", help="Stores the results of a job")
        self._job_add_target_arguments(results_parser)
        results_parser.add_argument("--output", "-o", required=True, help="Path where to store the results")
        results_parser.add_argument(
            "--zip",
            "-z",
            dest="zipped",
            action="store_true",
            help="Write the output to a zip file rather than to a folder",
        )
        results_parser.set_defaults(command_handler=self.job_store_results)

        delete_parser = subparsers.add_parser("delete-job", help="Removes a job from the server")
        self._job_add_target_arguments(delete_parser)
        delete_parser.set_defaults(command_handler=self.job_delete)

    def job_list(self, _arguments: argparse.Namespace, stdout: TextIO) -> int:
        stdout.write(cli_render_jobs(self._service.adapter_list_jobs()))
        return 0

    def job_show_status(self, arguments: argparse.Namespace, stdout: TextIO) -> int:
        stdout.write(cli_render_job(self._service.adapter_get_job(self._job_target_id(arguments))))
        return 0

    def job_store_results(self, arguments: argparse.Namespace, stdout: TextIO) -> int:
        job_id = self._job_target_id(arguments)
        if arguments.zipped:
            output_path = job_write_results_zip(self._service, job_id, arguments.output)
        else:
            output_path = job_write_results_directory(self._service, job_id, arguments.output)
        stdout.write(f"Results of job {job_id} stored in {output_path}\n")
        return 0

    def job_delete(self, arguments: argparse.Namespace, stdout: TextIO) -> int:
        job_id = self._job_target_id(arguments)
        self._service.adapter_delete_job(job_id)
        stdout.write(f"Job {job_id} removed\n")
        return 0

    def _job_add_target_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("job_id", metavar="JOB_ID", nargs="?", default=None)
        parser.add_argument(
            "--last",
            "-l",
            action="store_true",
            help="Use the id of the last job sent to the server in background or persistent mode",
        )

    def _job_target_id(self, arguments: argparse.Namespace) -> str:
        """Return the job id named on the command line or the last stored one.

        Args:
            arguments: Parsed arguments carrying `job_id` and `last`.

        Returns:
            str: Target job id.

        Raises:
            CommandLineError: Raised when neither or both are given.
            LastJobIdError: Raised when no last job id is stored.
        """

        if arguments.last and arguments.job_id:
            raise CommandLineError("JOB_ID and --last cannot be used together")
        if arguments.last:
            return self._last_job_id_store.read_last_job_id()
        if not arguments.job_id:
            raise CommandLineError("A JOB_ID or the --last flag is required")
        return arguments.job_id

"""Main module entrypoint for command-line execution.

This module validates startup configuration, configures logging and runs the
selected command against the pipeline web service.
"""

from collections.abc import Sequence
import logging
import sys

from pipeline_admin.bootstrap import bootstrap_create_command_line, bootstrap_create_service_adapter
from pipeline_admin.config import SettingsLoadError, config_load_settings

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> None:
    """Run the selected command with validated startup configuration.

    Args:
        argv: Optional argument list; defaults to `sys.argv[1:]`.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SystemExit: Raised with status 1 when the command fails or the job ends in `ERROR`.
    """

    arguments = list(sys.argv[1:] if argv is None else argv)
    try:
        settings = config_load_settings()
    except SettingsLoadError as error:
        main_print_error(error)
        raise SystemExit(1) from error

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    service = bootstrap_create_service_adapter(settings)
    try:
        application = bootstrap_create_command_line(settings=settings, service=service, stdout=sys.stdout)
        exit_status = application.cli_run(arguments, stdout=sys.stdout)
    except Exception as error:  # pylint: disable=broad-exception-caught
        logger.debug("command failed", exc_info=True)
        main_print_error(error)
        raise SystemExit(1) from error
    finally:
        service.adapter_close()

    if exit_status != 0:
        raise SystemExit(exit_status)


def main_print_error(error: Exception) -> None:
    """Print one command failure in the user-facing error format.

    Args:
        error: Failure to report.

    Returns:
        None: Prints to stdout as side effect.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    print(f"Error:\n\t{error}")


if __name__ == "__main__":
    main()

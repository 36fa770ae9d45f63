"""Typer application factory and CLI entry point for credprovider.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``get``, ``providers``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~credprovider.exceptions.CredentialProviderError` instances become
a clean exit with the error's ``exit_code``; anything else is written to a
crash log under the data directory.

See Also:
    :mod:`credprovider.config`: Settings resolution.
    :mod:`credprovider.output`: Output formatting initialised in
    :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any

import typer
from rich.logging import RichHandler

from credprovider import __version__
from credprovider.commands.config import config_app
from credprovider.commands.credentials import get_command, providers_command
from credprovider.exit_codes import EXIT_GENERIC_FAILURE

LOGGER_NAME = "credprovider"

app = typer.Typer(
    name="credprovider",
    help="Resolve package-feed credentials through credential provider executables.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("get")(get_command)
app.command("providers")(providers_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"credprovider {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route the package loggers to stderr through Rich.

    Provider stderr lines and invocation announcements are logged at DEBUG
    and only shown with ``--verbose``.
    """
    from credprovider.output import get_output

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=get_output().stderr_console,
        show_time=False,
        show_path=False,
        markup=False,
    )
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show provider invocations and stderr."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~credprovider.output.OutputManager` and
    the package logging handler from CLI flags.
    """
    from credprovider.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet))
    _configure_logging(verbose)


EXIT_INTERRUPTED = 130


def _on_sigint(signum: int, frame: Any) -> None:  # noqa: ANN401
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_INTERRUPTED)


def _write_crash_log(exc: Exception) -> Path:
    """Dump the traceback of *exc* under ``<data dir>/logs`` and return the file."""
    from credprovider.config import get_data_dir

    log_path = get_data_dir() / "logs" / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)
    log_path.write_text("".join(traceback.format_exception(exc)), encoding="utf-8")
    return log_path


def main() -> None:
    """Entry point of the ``credprovider`` console script.

    Package errors are reported on stderr and mapped to their exit code.
    Anything else leaves a crash log and exits with
    :data:`~credprovider.exit_codes.EXIT_GENERIC_FAILURE`.
    """
    from credprovider.exceptions import CredentialProviderError
    from credprovider.output import error

    signal.signal(signal.SIGINT, _on_sigint)
    try:
        app()
    except KeyboardInterrupt:
        _on_sigint(signal.SIGINT, None)
    except CredentialProviderError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error. Debug log: {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)

"""Typer application and CLI entry point for vigil.

This module builds the root Typer application and registers the built-in
commands (``start``, ``init``, ``list``, ``show``).

:func:`main` is the console-script entry point declared in
``pyproject.toml``. :class:`~vigil.exceptions.VigilError` exits with the
error's ``exit_code``; anything else is written to a crash log under the
data directory.

See Also:
    :mod:`vigil.lifecycle`: What ``vigil start`` drives.
    :mod:`vigil.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import sys
import traceback
from datetime import datetime

import typer

from vigil import __version__
from vigil.commands.init import init_command
from vigil.commands.inspect import list_command, show_command
from vigil.commands.start import start_command
from vigil.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED


app = typer.Typer(
    name="vigil",
    help="Run plugins whenever files in your project change.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("start")(start_command)
app.command("init")(init_command)
app.command("list")(list_command)
app.command("show")(show_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"vigil {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output for list/show."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output for list/show."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
) -> None:
    """Root callback executed before every command.

    Initialises the global :class:`~vigil.output.OutputManager` from the
    output flags.
    """
    from vigil.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet))


def _write_crash_log() -> str:
    """Write the current traceback to disk and return the log file path."""
    from vigil.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``vigil`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from vigil.exceptions import VigilError
        from vigil.output import error

        if isinstance(exc, VigilError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log()
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)

"""Start command -- watch files and run plugins until stopped."""

from __future__ import annotations

import logging
from typing import Optional

import typer

logger = logging.getLogger(__name__)


def _enable_debug_logging() -> None:
    from rich.logging import RichHandler

    from vigil.output import get_output

    handler = RichHandler(
        console=get_output().stderr_console,
        show_path=False,
        rich_tracebacks=True,
    )
    root = logging.getLogger("vigil")
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)


def start_command(
    vigilfile: Optional[str] = typer.Option(
        None, "--vigilfile", "-G", help="Path to the Vigilfile to use."
    ),
    watchdir: Optional[str] = typer.Option(
        None, "--watchdir", "-w", help="Directory to watch (default: cwd)."
    ),
    group: Optional[list[str]] = typer.Option(
        None, "--group", "-g", help="Only run plugins of this group (repeatable)."
    ),
    notify: bool = typer.Option(
        True, "--notify/--no-notify", help="Enable or disable notifications."
    ),
    no_interactions: bool = typer.Option(
        False, "--no-interactions", "-i", help="Do not start the interactive console."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log debug output."
    ),
    debug_signals: bool = typer.Option(
        False, "--debug-signals", help="Log every pause/resume signal received.", hidden=True
    ),
) -> None:
    """Start watching files and running plugins.

    Evaluates the Vigilfile, starts every plugin, then blocks while
    listening for file changes. Send SIGUSR1 to pause and SIGUSR2 to
    resume; type ``help`` in the console for interactive commands.

    Example::

        vigil start
        vigil start --group backend --no-notify
        vigil start -G ci/Vigilfile -w src -i
    """
    from vigil.config import resolve_options
    from vigil.lifecycle import LifecycleController

    if verbose:
        _enable_debug_logging()

    options = resolve_options(
        cli_vigilfile=vigilfile,
        cli_watchdir=watchdir,
        group=group or None,
        notify=notify,
        no_interactions=no_interactions,
        verbose=verbose,
        debug_signals=debug_signals,
    )
    logger.debug("Options: %s", options.model_dump())
    LifecycleController().start(options)

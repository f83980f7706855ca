"""Inspect commands -- ``vigil list`` and ``vigil show``.

Both are read-only: they evaluate the Vigilfile into a throwaway
:class:`~vigil.registry.Registry` and print a table. Nothing is started.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import typer

from vigil.output import error, print_table

if TYPE_CHECKING:
    from vigil.registry import Registry


def _evaluate(vigilfile: Optional[str]) -> Optional[Registry]:
    """Evaluate the Vigilfile into a new registry, or return ``None`` if missing."""
    from vigil.config import resolve_options
    from vigil.dsl import evaluate_vigilfile, find_vigilfile
    from vigil.registry import Registry

    options = resolve_options(cli_vigilfile=vigilfile)
    if find_vigilfile(options) is None:
        return None
    registry = Registry()
    evaluate_vigilfile(registry, options)
    return registry


def list_command(
    vigilfile: Optional[str] = typer.Option(
        None, "--vigilfile", "-G", help="Path to the Vigilfile to use."
    ),
) -> None:
    """List installed plugins.

    Plugins declared in the Vigilfile are marked in the second column.
    """
    from vigil.plugins.resolver import PluginResolver
    from vigil.registry import normalize_plugin_name

    registry = _evaluate(vigilfile)
    used = (
        {p.name for p in registry.plugins()} if registry is not None else set()
    )

    rows = [
        [name, "yes" if normalize_plugin_name(name) in used else ""]
        for name in PluginResolver().plugin_package_names()
    ]
    print_table(["Plugin", "In Vigilfile"], rows, title="Available plugins")


def show_command(
    vigilfile: Optional[str] = typer.Option(
        None, "--vigilfile", "-G", help="Path to the Vigilfile to use."
    ),
) -> None:
    """Show the groups and plugins declared in the Vigilfile.

    Raises:
        typer.Exit: With code 1 when no Vigilfile is found.
    """
    from vigil.dsl import NOT_FOUND_MESSAGE

    registry = _evaluate(vigilfile)
    if registry is None:
        error(NOT_FOUND_MESSAGE)
        raise typer.Exit(code=1)

    rows: list[list[str]] = []
    for group in registry.groups():
        plugins = registry.plugins(group=group.name)
        if not plugins:
            continue
        group_options = ", ".join(f"{k}={v!r}" for k, v in group.options.items())
        for index, plugin in enumerate(plugins):
            plugin_options = ", ".join(f"{k}={v!r}" for k, v in plugin.options.items())
            rows.append(
                [
                    group.name if index == 0 else "",
                    group_options if index == 0 else "",
                    plugin.title,
                    plugin_options,
                ]
            )
    print_table(["Group", "Group options", "Plugin", "Options"], rows, title="Vigilfile")

"""Init command -- create a Vigilfile and add plugin snippets.

``vigil init`` writes the starter Vigilfile (unless one exists) and then
appends the snippet of every installed plugin. With identifiers, only
those plugins' snippets are appended. ``--bare`` writes the starter file
only, and refuses to run when a Vigilfile already exists.
"""

from __future__ import annotations

from typing import Optional

import typer

from vigil.output import suggest


def init_command(
    identifiers: Optional[list[str]] = typer.Argument(
        None, help="Plugins whose snippets to add (default: all installed)."
    ),
    bare: bool = typer.Option(
        False, "--bare", "-b", help="Only create an empty Vigilfile."
    ),
) -> None:
    """Create a Vigilfile and add plugin snippets to it.

    Raises:
        VigilfileExistsError: With ``--bare`` when a Vigilfile already
            exists.

    Example::

        vigil init
        vigil init shell
        vigil init --bare
    """
    from vigil.scaffold import (
        create_vigilfile,
        initialize_all_templates,
        initialize_template,
    )

    create_vigilfile(abort_on_existence=bare)
    if bare:
        suggest("Add plugins with: vigil init <identifier>")
        return

    if identifiers:
        for identifier in identifiers:
            initialize_template(identifier)
    else:
        initialize_all_templates()

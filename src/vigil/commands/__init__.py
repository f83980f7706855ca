"""Built-in CLI commands for vigil.

* :mod:`~vigil.commands.start` -- run vigil against the Vigilfile.
* :mod:`~vigil.commands.init` -- create a Vigilfile and add plugin
  snippets to it.
* :mod:`~vigil.commands.inspect` -- ``list`` installed plugins and
  ``show`` the groups and plugins a Vigilfile declares.

Each module exports plain callback functions that :func:`vigil.app.main`
registers on the root Typer app.
"""

"""Shell plugin -- run a shell command for changed files.

The main export is :class:`Shell`, resolvable from a Vigilfile as
``plugin("shell", command="...")`` and registered under the ``shell``
entry point of the ``vigil.plugins`` group.
"""

from vigil.plugins.shell.plugin import Shell

__all__ = ["Shell"]

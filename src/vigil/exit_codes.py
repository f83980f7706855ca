"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~vigil.exceptions.VigilError` subclass.

Example::

    $ vigil init --bare
    $ echo $?
    1   # EXIT_GENERIC_FAILURE -- a Vigilfile already exists
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_PLUGIN_ERROR = 10
"""A plugin could not be resolved, loaded or located."""

EXIT_INTERRUPTED = 130
"""The process was interrupted with Ctrl-C."""

"""Exception hierarchy for vigil.

All fatal errors inherit from :class:`VigilError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`vigil.exit_codes`.
The top-level error handler in :func:`vigil.app.main` catches
``VigilError`` and exits with the appropriate code.

Subclass hierarchy::

    VigilError (exit 1)
    +-- InvalidUsageError           (exit 2)
    +-- ConfigError                 (exit 1)
    +-- PluginError                 (exit 10)
    |   +-- ResolutionError         (exit 10)
    |   +-- PluginNotInstalledError (exit 10)
    +-- VigilfileExistsError        (exit 1)
    +-- TemplateNotFoundError       (exit 1)

Two classes sit outside the hierarchy: :class:`ConfigurationEmptyWarning`
is a warning category, and :class:`TaskFailed` is raised by plugins to
report a failed task to the runner.
"""

from vigil.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PLUGIN_ERROR,
)


class VigilError(Exception):
    """Base exception for all vigil errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(VigilError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(VigilError):
    """Raised when the Vigilfile is missing or cannot be evaluated."""

    exit_code = EXIT_GENERIC_FAILURE


class PluginError(VigilError):
    """Raised when a plugin fails to load or initialise."""

    exit_code = EXIT_PLUGIN_ERROR


class ResolutionError(PluginError):
    """Raised by :meth:`~vigil.registry.Registry.add_plugin` when an identifier
    does not map to any plugin class.

    The resolver has already reported its diagnostics by the time this is
    raised.
    """

    def __init__(self, identifier: str, canonical_name: str):
        super().__init__(
            f"Could not resolve plugin '{identifier}' (class {canonical_name})"
        )
        self.identifier = identifier
        self.canonical_name = canonical_name


class PluginNotInstalledError(PluginError):
    """Raised when a plugin package's install location is requested but the
    package is not installed."""


class VigilfileExistsError(VigilError):
    """Raised when scaffolding a Vigilfile over an existing one with
    ``abort_on_existence`` set."""


class TemplateNotFoundError(VigilError):
    """Raised when neither an installed plugin nor a user template provides a
    Vigilfile snippet for an identifier."""


class ConfigurationEmptyWarning(UserWarning):
    """Issued when the Vigilfile was evaluated but registered no plugins."""


class TaskFailed(Exception):
    """Raised by a plugin callback to mark the current task as failed.

    When the plugin's group has ``halt_on_failure`` set, the runner skips the
    remaining plugins of that group for the current run.
    """

"""Configuration helpers: XDG paths and option precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.vigil/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_data_dir` and :func:`get_templates_dir`.
* **Precedence resolution** -- :func:`resolve_options` merges CLI flags,
  environment variables and defaults into a frozen
  :class:`~vigil.models.Options`.
* **Notification override** -- :func:`resolve_notify` applies the
  ``VIGIL_NOTIFY`` environment variable on top of the ``notify`` option.
"""

from __future__ import annotations

import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from vigil.exceptions import ConfigError
from vigil.models import Options

_APP_NAME = "vigil"

VIGILFILE_NAME = "Vigilfile"
"""File name of the project configuration evaluated at setup."""

NOTIFY_ENV_VAR = "VIGIL_NOTIFY"
WATCHDIR_ENV_VAR = "VIGIL_WATCHDIR"
VIGILFILE_ENV_VAR = "VIGIL_VIGILFILE"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/vigil/`` (default ``~/.config/vigil/``).
    On macOS/Windows: ``~/.vigil/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/vigil/`` (default ``~/.local/share/vigil/``).
    On macOS/Windows: ``~/.vigil/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_templates_dir() -> Path:
    """Return the directory holding user-defined Vigilfile templates.

    A file ``<templates_dir>/<identifier>`` is appended to the Vigilfile by
    ``vigil init <identifier>`` when no installed plugin provides its own
    template. The directory is not created here; it is purely user-owned.
    """
    return get_config_dir() / "templates"


# --- Precedence resolution ---


def resolve_options(
    cli_vigilfile: Optional[str] = None,
    cli_watchdir: Optional[str] = None,
    **overrides: Any,
) -> Options:
    """Build the frozen options bag with full precedence.

    Precedence (high to low):
        1. CLI flags (``cli_vigilfile``, ``cli_watchdir``, ``overrides``)
        2. Environment variables (``VIGIL_VIGILFILE``, ``VIGIL_WATCHDIR``)
        3. Defaults declared on :class:`~vigil.models.Options`

    ``overrides`` whose value is ``None`` are treated as "not given" so the
    model default applies.

    Raises:
        ConfigError: If the merged values fail validation.
    """
    data: dict[str, Any] = {}

    env_vigilfile = os.environ.get(VIGILFILE_ENV_VAR)
    if env_vigilfile:
        data["vigilfile"] = env_vigilfile
    env_watchdir = os.environ.get(WATCHDIR_ENV_VAR)
    if env_watchdir:
        data["watchdir"] = env_watchdir

    if cli_vigilfile is not None:
        data["vigilfile"] = cli_vigilfile
    if cli_watchdir is not None:
        data["watchdir"] = cli_watchdir

    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Options.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid options: {exc}") from exc


def resolve_notify(notify_option: bool) -> bool:
    """Return whether notifications should be on.

    An explicit ``False`` option always disables notifications. Otherwise
    ``VIGIL_NOTIFY=false`` disables them; any other value (or no value)
    leaves them enabled.
    """
    if not notify_option:
        return False
    return os.environ.get(NOTIFY_ENV_VAR) != "false"

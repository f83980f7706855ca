"""Plugin resolution -- map a short identifier to a plugin class.

Plugin classes register themselves in a static table the moment they are
defined (see :meth:`vigil.plugins.base.Plugin.__init_subclass__`), so
resolution is a lookup keyed by *canonical name*: the identifier split on
``-``/``_`` with every segment capitalised (``dashed-class-name`` becomes
``DashedClassName``).

:meth:`PluginResolver.resolve` proceeds in four steps:

1. Exact lookup of the canonical name. Plugins defined inline in a
   Vigilfile are found here without importing anything.
2. Load the plugin package: an entry point named after the identifier in
   the ``vigil.plugins`` group, otherwise the ``vigil_<identifier>``
   module. Importing it registers its classes.
3. Exact lookup again, then a case-insensitive scan of the table in
   registration order so that irregularly cased class names still resolve
   (``vspec`` finds ``VSpec``). The first match wins.
4. Report diagnostics (unless asked to fail silently) and return ``None``.

Third-party packages register plugins with an entry point::

    [project.entry-points."vigil.plugins"]
    rspec = "vigil_rspec:Rspec"
"""

from __future__ import annotations

import importlib
import importlib.metadata
import importlib.util
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from vigil.exceptions import PluginNotInstalledError
from vigil.output import error

if TYPE_CHECKING:
    from vigil.plugins.base import Plugin

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "vigil.plugins"
"""The entry-point group name used for plugin discovery."""

MODULE_PREFIX = "vigil_"
DISTRIBUTION_PREFIX = "vigil-"

# canonical class name -> plugin class, in registration order
_plugin_types: dict[str, type[Plugin]] = {}


# ------------------------------------------------------------------
# Naming
# ------------------------------------------------------------------


def canonical_name(identifier: Any) -> str:
    """Return the class name an identifier is expected to resolve to.

    >>> canonical_name("dashed-class-name")
    'DashedClassName'
    >>> canonical_name("underscore_class_name")
    'UnderscoreClassName'
    """
    segments = re.split(r"[-_]", str(identifier))
    return "".join(seg[:1].upper() + seg[1:] for seg in segments if seg)


def module_name(identifier: Any) -> str:
    """Return the importable module name for a plugin package (``vigil_<id>``)."""
    return MODULE_PREFIX + str(identifier).lower().replace("-", "_")


# ------------------------------------------------------------------
# Registration table
# ------------------------------------------------------------------


def register_plugin_type(plugin_cls: type[Plugin]) -> None:
    """Add *plugin_cls* to the registration table under its class name.

    Registering a new class under a name that is already taken replaces
    the previous class in place, which is what happens when a Vigilfile
    declaring an inline plugin is evaluated a second time.
    """
    previous = _plugin_types.get(plugin_cls.__name__)
    if previous is not None and previous is not plugin_cls:
        logger.debug("Replacing plugin class '%s'", plugin_cls.__name__)
    _plugin_types[plugin_cls.__name__] = plugin_cls


def unregister_plugin_type(name: str) -> Optional[type[Plugin]]:
    """Remove and return the class registered under *name*, if any."""
    return _plugin_types.pop(name, None)


def registered_plugin_types() -> list[type[Plugin]]:
    """Return the registered plugin classes in registration order."""
    return list(_plugin_types.values())


# ------------------------------------------------------------------
# Resolution
# ------------------------------------------------------------------


def _entry_points(group: str) -> list[importlib.metadata.EntryPoint]:
    return list(importlib.metadata.entry_points(group=group))


def _same_identifier(a: str, b: str) -> bool:
    return a.lower().replace("_", "-") == b.lower().replace("_", "-")


class PluginResolver:
    """Resolves plugin identifiers to plugin classes.

    Args:
        entry_point_group: Entry-point group searched when the plugin class
            is not registered yet.
    """

    def __init__(self, entry_point_group: str = ENTRY_POINT_GROUP) -> None:
        self._group = entry_point_group

    def resolve(
        self, identifier: Any, fail_silently: bool = False
    ) -> Optional[type[Plugin]]:
        """Return the plugin class for *identifier*, or ``None``.

        Args:
            identifier: Plugin identifier, case-insensitive, words separated
                by ``-`` or ``_``.
            fail_silently: Suppress the diagnostics reported when nothing
                resolves.
        """
        identifier = str(identifier)
        const_name = canonical_name(identifier)

        plugin_cls = _plugin_types.get(const_name)
        if plugin_cls is not None:
            return plugin_cls

        load_error: Optional[ImportError] = None
        try:
            self._load(identifier)
        except ImportError as exc:
            load_error = exc
            logger.debug("Loading plugin '%s' failed: %s", identifier, exc)

        plugin_cls = _plugin_types.get(const_name) or self._find_case_insensitive(
            const_name
        )
        if plugin_cls is not None:
            return plugin_cls

        if not fail_silently:
            if load_error is not None:
                error(
                    f"Could not load '{module_name(identifier)}' "
                    f"or find class {const_name}"
                )
                error(str(load_error))
            else:
                error(f"Could not find class {const_name}")
        return None

    def _load(self, identifier: str) -> None:
        """Import the package providing *identifier*.

        Raises:
            ImportError: If neither an entry point nor a ``vigil_<id>``
                module exists.
        """
        for ep in _entry_points(self._group):
            if _same_identifier(ep.name, identifier):
                loaded = ep.load()
                if isinstance(loaded, type):
                    register_plugin_type(loaded)
                logger.debug("Loaded plugin '%s' from entry point %s", identifier, ep.value)
                return
        importlib.import_module(module_name(identifier))
        logger.debug("Imported plugin module '%s'", module_name(identifier))

    @staticmethod
    def _find_case_insensitive(const_name: str) -> Optional[type[Plugin]]:
        wanted = const_name.lower()
        for name, plugin_cls in _plugin_types.items():
            if name.lower() == wanted:
                return plugin_cls
        return None

    # ------------------------------------------------------------------
    # Installed packages
    # ------------------------------------------------------------------

    def locate_plugin(self, identifier: Any) -> Path:
        """Return the directory of the installed package providing *identifier*.

        Raises:
            PluginNotInstalledError: If no such package is installed.
        """
        identifier = str(identifier)
        target = module_name(identifier)
        for ep in _entry_points(self._group):
            if _same_identifier(ep.name, identifier):
                target = ep.module
                break

        try:
            spec = importlib.util.find_spec(target)
        except (ImportError, ValueError):
            spec = None
        if spec is None or spec.origin is None:
            raise PluginNotInstalledError(f"Plugin '{identifier}' is not installed")
        return Path(spec.origin).parent

    def plugin_package_names(self) -> list[str]:
        """Return the identifiers of all installed plugin packages.

        Collected from the ``vigil.plugins`` entry points and from
        distributions named ``vigil-<identifier>``.
        """
        names = {ep.name.lower() for ep in _entry_points(self._group)}
        for dist in importlib.metadata.distributions():
            dist_name = (dist.name or "").lower()
            if dist_name.startswith(DISTRIBUTION_PREFIX):
                names.add(dist_name[len(DISTRIBUTION_PREFIX):])
        return sorted(names)

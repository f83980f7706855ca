"""Plugin system for vigil -- base class, resolution and bundled plugins.

Key classes:

* :class:`Plugin` -- base class that every plugin extends; subclasses
  register themselves for resolution by name.
* :class:`PluginResolver` -- maps identifiers (``foo-bar``) to plugin
  classes (``FooBar``), importing installed plugin packages on demand.

Bundled plugins live in sub-packages (``vigil.plugins.shell``) and are
exposed through the ``vigil.plugins`` entry-point group like any
third-party plugin.
"""

from vigil.plugins.base import Plugin
from vigil.plugins.resolver import (
    ENTRY_POINT_GROUP,
    PluginResolver,
    canonical_name,
    register_plugin_type,
    registered_plugin_types,
    unregister_plugin_type,
)

__all__ = [
    "ENTRY_POINT_GROUP",
    "Plugin",
    "PluginResolver",
    "canonical_name",
    "register_plugin_type",
    "registered_plugin_types",
    "unregister_plugin_type",
]

"""Plugin and group registry.

:class:`Registry` owns the ordered list of plugin instances and the
ordered list of groups. Plugin order is the order reactions run in; the
``default`` group always exists and always comes first.

The registry is a plain value owned by the
:class:`~vigil.lifecycle.LifecycleController` and handed to whoever needs
it (the Vigilfile evaluator, the runner). Mutation after setup is expected
to happen inside
:meth:`~vigil.lifecycle.LifecycleController.within_preserved_state`.

Queries (:meth:`Registry.plugins`, :meth:`Registry.groups`) accept:

* nothing -- the live list itself;
* a string -- the first entry with that name, or ``None``;
* a compiled regular expression -- every entry whose name matches;
* a mapping / keyword arguments ``group=`` and ``name=`` (plugins only) --
  every entry matching all of the given criteria.

Filtered results are always new lists.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, Optional, Union

from vigil.exceptions import ResolutionError
from vigil.models import DEFAULT_GROUP, Group, normalize_group_name
from vigil.plugins.base import Plugin
from vigil.plugins.resolver import PluginResolver, canonical_name
from vigil.watcher import Watcher

logger = logging.getLogger(__name__)

Filter = Union[None, str, "re.Pattern[str]", Mapping[str, Any]]


def normalize_plugin_name(identifier: Any) -> str:
    """Return the comparison form of a plugin identifier (``foo-bar`` -> ``foobar``)."""
    return str(identifier).lower().replace("-", "").replace("_", "")


class Registry:
    """Ordered registry of plugins and groups.

    Args:
        resolver: Resolver used by :meth:`add_plugin`. A default
            :class:`~vigil.plugins.resolver.PluginResolver` is created when
            omitted.
    """

    def __init__(self, resolver: Optional[PluginResolver] = None) -> None:
        self.resolver = resolver or PluginResolver()
        self._plugins: list[Plugin] = []
        self._groups: list[Group] = []
        self.reset_groups()

    def __repr__(self) -> str:
        return f"<Registry plugins={len(self._plugins)} groups={len(self._groups)}>"

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_plugin(
        self,
        identifier: Any,
        watchers: Optional[list[Watcher]] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> Plugin:
        """Instantiate the plugin named *identifier* and append it.

        Args:
            identifier: Plugin identifier (``"shell"``, ``"foo-bar"``).
            watchers: Watch patterns handed to the plugin constructor.
            options: Plugin options; ``group`` selects the plugin's group.

        Returns:
            The new plugin instance.

        Raises:
            ResolutionError: If *identifier* does not resolve to a plugin class.
        """
        plugin_cls = self.resolver.resolve(identifier)
        if plugin_cls is None:
            raise ResolutionError(str(identifier), canonical_name(identifier))

        plugin = plugin_cls(
            watchers if watchers is not None else [],
            dict(options) if options is not None else {},
        )
        self._plugins.append(plugin)
        logger.debug("Added plugin %s to group '%s'", plugin.title, plugin.group)
        return plugin

    def remove_plugin(self, plugin: Plugin) -> None:
        """Remove *plugin* from the registry (no-op if it is not registered)."""
        try:
            self._plugins.remove(plugin)
        except ValueError:
            pass

    def reset_plugins(self) -> None:
        """Drop every plugin instance."""
        self._plugins.clear()

    def add_group(self, identifier: Any, options: Optional[dict[str, Any]] = None) -> Group:
        """Return the group named *identifier*, creating it if needed.

        Adding an existing group returns it unchanged; its options are not
        replaced.
        """
        name = normalize_group_name(identifier)
        existing = self._find_group(name)
        if existing is not None:
            return existing

        group = Group(name=name, options=dict(options or {}))
        self._groups.append(group)
        logger.debug("Added group '%s'", name)
        return group

    def reset_groups(self) -> None:
        """Remove every group but a fresh ``default`` group with no options."""
        self._groups.clear()
        self._groups.append(Group(name=DEFAULT_GROUP))

    def reset(self) -> None:
        """Drop all plugins and groups, leaving only the ``default`` group."""
        self.reset_plugins()
        self.reset_groups()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def plugins(
        self,
        filter: Filter = None,
        *,
        group: Any = None,
        name: Any = None,
    ) -> Union[list[Plugin], Plugin, None]:
        """Query the registered plugins.

        Args:
            filter: ``None``, a plugin name, a compiled regular expression,
                or a mapping with ``group`` and/or ``name`` keys.
            group: Only plugins of this group (same as ``{"group": ...}``).
            name: Only plugins with this name (same as ``{"name": ...}``).

        Returns:
            The live plugin list when no criteria are given; a single plugin
            (or ``None``) for a string filter; otherwise a new list.
        """
        if isinstance(filter, Mapping):
            group = filter.get("group", group)
            name = filter.get("name", name)
            if group is None and name is None:
                return list(self._plugins)
            filter = None

        if group is not None or name is not None:
            wanted_group = normalize_group_name(group) if group is not None else None
            wanted_name = normalize_plugin_name(name) if name is not None else None
            return [
                p
                for p in self._plugins
                if (wanted_group is None or p.group == wanted_group)
                and (wanted_name is None or p.name == wanted_name)
            ]

        if filter is None:
            return self._plugins
        if isinstance(filter, re.Pattern):
            return [p for p in self._plugins if filter.search(p.name)]

        wanted = normalize_plugin_name(filter)
        return next((p for p in self._plugins if p.name == wanted), None)

    def groups(self, filter: Filter = None) -> Union[list[Group], Group, None]:
        """Query the registered groups by name.

        Args:
            filter: ``None``, a group name, a compiled regular expression,
                or a mapping with a ``name`` key.

        Returns:
            The live group list when *filter* is ``None``; a single group
            (or ``None``) for a string filter; otherwise a new list.
        """
        if isinstance(filter, Mapping):
            if "name" not in filter:
                return list(self._groups)
            wanted = normalize_group_name(filter["name"])
            return [g for g in self._groups if g.name == wanted]

        if filter is None:
            return self._groups
        if isinstance(filter, re.Pattern):
            return [g for g in self._groups if filter.search(g.name)]
        return self._find_group(normalize_group_name(filter))

    def _find_group(self, name: str) -> Optional[Group]:
        return next((g for g in self._groups if g.name == name), None)

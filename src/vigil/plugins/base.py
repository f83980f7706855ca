"""Base class for vigil plugins.

Every plugin subclasses :class:`Plugin`. Defining the subclass is enough
to make it resolvable: :meth:`Plugin.__init_subclass__` adds it to the
resolver's registration table under its class name, so a Vigilfile can
refer to ``FooBar`` as ``plugin("foo-bar")``.

All lifecycle callbacks (``start``, ``stop``, ``reload``, ``run_all``,
``run_on_change``, ``run_on_removal``) are no-ops by default, so plugins
only override what they need. A callback reports a failed task by raising
:class:`~vigil.exceptions.TaskFailed`.

Example:
    Minimal plugin implementation::

        class Echo(Plugin):
            def run_on_change(self, paths):
                print("changed:", ", ".join(paths))

Pass ``register=False`` in the class statement for abstract intermediate
classes that should never be resolved by name::

    class CommandPlugin(Plugin, register=False):
        ...
"""

from __future__ import annotations

import inspect
import re
from pathlib import Path
from typing import Any, Optional

from vigil.config import VIGILFILE_NAME
from vigil.exceptions import PluginNotInstalledError
from vigil.models import DEFAULT_GROUP, normalize_group_name
from vigil.output import error, info
from vigil.plugins.resolver import PluginResolver, register_plugin_type
from vigil.watcher import Watcher


class Plugin:
    """Base class for all vigil plugins.

    The plugin lifecycle is:

    1. Instantiation -- :meth:`~vigil.registry.Registry.add_plugin` calls
       the constructor with the plugin's watchers and options.
    2. :meth:`start` -- called once when vigil starts.
    3. :meth:`run_on_change` / :meth:`run_on_removal` -- called with the
       paths matched by the plugin's watchers, zero or more times.
       :meth:`run_all` and :meth:`reload` are triggered from the console.
    4. :meth:`stop` -- called once during shutdown.

    Args:
        watchers: The plugin's :class:`~vigil.watcher.Watcher` list. The
            list object is kept as given, so later appends are seen.
        options: Plugin options. The ``group`` key is removed and stored
            on :attr:`group`.
    """

    def __init_subclass__(cls, register: bool = True, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if register:
            register_plugin_type(cls)

    def __init__(
        self,
        watchers: Optional[list[Watcher]] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> None:
        self.watchers = watchers if watchers is not None else []
        self.options = dict(options or {})
        self.group = normalize_group_name(self.options.pop("group", DEFAULT_GROUP))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} group={self.group!r}>"

    @property
    def name(self) -> str:
        """Comparison name used by registry queries (``FooBar`` -> ``"foobar"``)."""
        return type(self).__name__.lower()

    @property
    def title(self) -> str:
        """Display name used in messages."""
        return type(self).__name__

    # ------------------------------------------------------------------
    # Lifecycle callbacks
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Called once when vigil starts watching."""

    def stop(self) -> None:
        """Called once when vigil shuts down."""

    def reload(self) -> None:
        """Called when the operator asks for a reload."""

    def run_all(self) -> None:
        """Called when the operator asks to run everything."""

    def run_on_change(self, paths: list[str]) -> None:
        """Called with the created or modified paths matched by the watchers."""

    def run_on_removal(self, paths: list[str]) -> None:
        """Called with the removed paths matched by the watchers."""

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    @classmethod
    def template_path(cls, identifier: Optional[str] = None) -> Path:
        """Location of the Vigilfile snippet shipped with the plugin.

        By convention it lives in ``templates/Vigilfile`` inside the plugin's
        package. With an *identifier* the installed package is found through
        :meth:`~vigil.plugins.resolver.PluginResolver.locate_plugin`; plugins
        that are not installed as a package use the directory of the module
        defining the class.
        """
        roots: list[Path] = []
        if identifier is not None:
            try:
                roots.append(PluginResolver().locate_plugin(identifier))
            except PluginNotInstalledError:
                pass
        roots.append(Path(inspect.getfile(cls)).parent)

        for root in roots:
            candidate = root / "templates" / VIGILFILE_NAME
            if candidate.is_file():
                return candidate
        return roots[-1] / "templates" / VIGILFILE_NAME

    @classmethod
    def init(cls, identifier: str, vigilfile: Optional[Path] = None) -> None:
        """Append this plugin's template to the project's Vigilfile.

        Nothing is written when the Vigilfile is missing or already declares
        the plugin.
        """
        from vigil.scaffold import append_snippet

        vigilfile = vigilfile or Path.cwd() / VIGILFILE_NAME
        if not vigilfile.is_file():
            error(f"{VIGILFILE_NAME} not found")
            return

        content = vigilfile.read_text(encoding="utf-8")
        declared = re.compile(r"""plugin\(\s*['"]%s['"]""" % re.escape(identifier))
        if declared.search(content):
            info(f"{VIGILFILE_NAME} already includes the {identifier} plugin")
            return

        append_snippet(vigilfile, cls.template_path(identifier).read_text(encoding="utf-8"))
        info(f"{identifier} plugin added to {VIGILFILE_NAME}, feel free to edit it")

"""Watch patterns that decide which changed paths a plugin reacts to.

A :class:`Watcher` pairs a pattern with an optional action:

* a compiled regular expression matches with :meth:`re.Pattern.search`;
* a plain string matches one path exactly.

When an action is given it receives the :class:`re.Match` and returns the
path (or paths) the plugin should see instead, e.g. mapping a source file
to its test module. Returning ``None`` or an empty value drops the path.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional, Union

if TYPE_CHECKING:
    from vigil.plugins.base import Plugin

Pattern = Union[str, "re.Pattern[str]"]
Action = Callable[["re.Match[str]"], Any]


@dataclass
class Watcher:
    """A single watch pattern with an optional path-rewriting action."""

    pattern: Pattern
    action: Optional[Action] = None

    def __post_init__(self) -> None:
        if isinstance(self.pattern, re.Pattern):
            self._regex = self.pattern
        else:
            self._regex = re.compile(re.escape(str(self.pattern)))
        self._exact = not isinstance(self.pattern, re.Pattern)

    def match(self, path: str) -> Optional[re.Match[str]]:
        """Return the match for *path*, or ``None``."""
        if self._exact:
            return self._regex.fullmatch(path)
        return self._regex.search(path)

    def paths_for(self, path: str) -> list[str]:
        """Return the paths *path* turns into under this watcher (possibly none)."""
        m = self.match(path)
        if m is None:
            return []
        if self.action is None:
            return [path]
        produced = self.action(m)
        if not produced:
            return []
        if isinstance(produced, str):
            return [produced]
        return [str(p) for p in produced]


def match_files(plugin: Plugin, paths: Iterable[str]) -> list[str]:
    """Return the paths *plugin*'s watchers select from *paths*.

    Order follows *paths*; duplicates are dropped.
    """
    selected: dict[str, None] = {}
    for path in paths:
        for watcher in plugin.watchers:
            for produced in watcher.paths_for(path):
                selected.setdefault(produced, None)
    return list(selected)

"""Task runner: dispatch lifecycle tasks and file changes to plugins.

:class:`Runner` walks the registry group by group, in group order, and
within a group in plugin registration order. Every callback runs
*supervised*:

* :class:`~vigil.exceptions.TaskFailed` marks the task as failed. If the
  plugin's group has ``halt_on_failure`` set, the remaining plugins of
  that group are skipped for this run; other groups still run.
* Any other exception is reported and the plugin is removed from the
  registry ("fired"), so one broken plugin cannot keep failing on every
  change.

The runner never takes the lifecycle lock itself; callers wrap it in
:meth:`~vigil.lifecycle.LifecycleController.within_preserved_state`.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any, Iterable, Iterator, Optional

from vigil.exceptions import TaskFailed
from vigil.models import Group, normalize_group_name
from vigil.output import debug, error, info
from vigil.plugins.base import Plugin
from vigil.registry import Registry
from vigil.watcher import match_files

logger = logging.getLogger(__name__)

TASKS = ("start", "stop", "reload", "run_all", "run_on_change", "run_on_removal")


class Runner:
    """Runs plugin tasks across the registry.

    Args:
        registry: The registry to read plugins and groups from.
        groups: Restrict every run to these group names. Empty means all
            groups.
    """

    def __init__(self, registry: Registry, groups: Optional[Iterable[str]] = None) -> None:
        self.registry = registry
        self._only = [normalize_group_name(g) for g in (groups or [])]

    def run(
        self,
        task: str,
        *,
        group: Optional[str] = None,
        plugin: Optional[Plugin] = None,
    ) -> None:
        """Run *task* on every plugin in scope.

        Args:
            task: One of ``start``, ``stop``, ``reload``, ``run_all``.
            group: Limit the run to this group.
            plugin: Limit the run to this single plugin.
        """
        if task not in TASKS:
            raise ValueError(f"Unknown task: {task}")
        if plugin is not None:
            self.run_supervised_task(plugin, task)
            return

        for grp, plugins in self._scoped(group):
            for candidate in plugins:
                if self._failed_and_halts(grp, self.run_supervised_task(candidate, task)):
                    break

    def run_on_changes(self, modified: list[str], removed: list[str]) -> None:
        """Hand changed paths to every plugin whose watchers select them."""
        for grp, plugins in self._scoped(None):
            for candidate in plugins:
                halted = False
                for task, paths in (("run_on_change", modified), ("run_on_removal", removed)):
                    matched = match_files(candidate, paths) if paths else []
                    if not matched:
                        continue
                    debug(f"{candidate.title} matched {', '.join(matched)}")
                    outcome = self.run_supervised_task(candidate, task, matched)
                    if self._failed_and_halts(grp, outcome):
                        halted = True
                        break
                if halted:
                    break

    def run_supervised_task(self, plugin: Plugin, task: str, *args: Any) -> Any:
        """Call ``plugin.<task>(*args)`` and contain its failures.

        Returns:
            The callback's return value, the :class:`TaskFailed` instance if
            the plugin reported a failure, or the exception that got the
            plugin fired.
        """
        try:
            return getattr(plugin, task)(*args)
        except TaskFailed as exc:
            logger.debug("%s failed its %s task: %s", plugin.title, task, exc)
            return exc
        except Exception as exc:
            error(
                f"{plugin.title} failed to achieve its <{task}>, exception was:\n"
                f"{type(exc).__name__}: {exc}\n{traceback.format_exc()}"
            )
            self.registry.remove_plugin(plugin)
            info(f"{plugin.title} has just been fired")
            return exc

    def _scoped(self, group: Optional[str]) -> Iterator[tuple[Group, list[Plugin]]]:
        names = [normalize_group_name(group)] if group is not None else None
        for grp in list(self.registry.groups()):
            if names is not None and grp.name not in names:
                continue
            if self._only and grp.name not in self._only:
                continue
            yield grp, self.registry.plugins(group=grp.name)

    @staticmethod
    def _failed_and_halts(group: Group, outcome: Any) -> bool:
        return isinstance(outcome, TaskFailed) and group.halt_on_failure

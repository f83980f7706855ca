"""Vigilfile evaluation.

A Vigilfile is plain Python executed with a few helpers in scope::

    with group("backend", halt_on_failure=True):
        with plugin("shell", command="pytest -q {paths}"):
            watch(re.compile(r"^tests/.+\\.py$"))
            watch(re.compile(r"^src/(.+)\\.py$"), lambda m: f"tests/test_{m[1]}.py")

    class Echo(Plugin):
        def run_on_change(self, paths):
            print(paths)

    with plugin("echo"):
        watch("README.md")

``plugin(...)`` registers the plugin as soon as it is called. Using it as a
context manager only directs the ``watch(...)`` calls in the block to
that plugin. ``group(...)`` works the same way for plugins declared in its
block. Names available in the file: ``group``, ``plugin``, ``watch``,
``Plugin``, ``TaskFailed`` and ``re``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Optional

from vigil.config import VIGILFILE_NAME
from vigil.exceptions import ConfigError, TaskFailed
from vigil.models import DEFAULT_GROUP, Options
from vigil.output import debug
from vigil.plugins.base import Plugin
from vigil.registry import Registry
from vigil.watcher import Watcher

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = f"No {VIGILFILE_NAME} found, please create one with 'vigil init'."


def find_vigilfile(options: Optional[Options] = None) -> Optional[Path]:
    """Return the Vigilfile to evaluate, or ``None``.

    Looked up in order: ``options.vigilfile``, ``./Vigilfile``,
    ``~/.Vigilfile``. An explicit ``options.vigilfile`` that does not exist
    yields ``None`` without trying the other locations.
    """
    if options is not None and options.vigilfile:
        path = Path(options.vigilfile).expanduser()
        return path if path.is_file() else None

    for candidate in (Path.cwd() / VIGILFILE_NAME, Path.home() / f".{VIGILFILE_NAME}"):
        if candidate.is_file():
            return candidate
    return None


class _PluginBlock:
    def __init__(self, evaluator: _Evaluator, plugin: Plugin) -> None:
        self._evaluator = evaluator
        self.plugin = plugin

    def __enter__(self) -> Plugin:
        self._evaluator.plugin_stack.append(self.plugin)
        return self.plugin

    def __exit__(self, *exc_info: Any) -> None:
        self._evaluator.plugin_stack.pop()


class _GroupBlock:
    def __init__(self, evaluator: _Evaluator, name: str) -> None:
        self._evaluator = evaluator
        self.name = name

    def __enter__(self) -> str:
        self._evaluator.group_stack.append(self.name)
        return self.name

    def __exit__(self, *exc_info: Any) -> None:
        self._evaluator.group_stack.pop()


class _Evaluator:
    """Holds the block state while one Vigilfile executes."""

    def __init__(self, registry: Registry) -> None:
        self.registry = registry
        self.group_stack: list[str] = []
        self.plugin_stack: list[Plugin] = []

    def group(self, name: Any, **options: Any) -> _GroupBlock:
        grp = self.registry.add_group(name, options)
        return _GroupBlock(self, grp.name)

    def plugin(self, identifier: Any, **options: Any) -> _PluginBlock:
        group = options.get("group") or (
            self.group_stack[-1] if self.group_stack else DEFAULT_GROUP
        )
        options["group"] = self.registry.add_group(group).name
        watchers: list[Watcher] = []
        instance = self.registry.add_plugin(identifier, watchers, options)
        return _PluginBlock(self, instance)

    def watch(self, pattern: Any, action: Any = None) -> Watcher:
        if not self.plugin_stack:
            raise ConfigError("watch() must be called inside a 'with plugin(...)' block")
        watcher = Watcher(pattern, action)
        self.plugin_stack[-1].watchers.append(watcher)
        return watcher

    def namespace(self, path: Optional[Path]) -> dict[str, Any]:
        return {
            "__name__": "vigilfile",
            "__file__": str(path) if path else "<vigilfile>",
            "group": self.group,
            "plugin": self.plugin,
            "watch": self.watch,
            "Plugin": Plugin,
            "TaskFailed": TaskFailed,
            "re": re,
        }


def evaluate_source(registry: Registry, source: str, path: Optional[Path] = None) -> None:
    """Execute Vigilfile *source* against *registry*.

    Raises:
        ConfigError: If the source does not compile.
        ResolutionError: If a declared plugin cannot be resolved.
    """
    filename = str(path) if path else "<vigilfile>"
    try:
        code = compile(source, filename, "exec")
    except SyntaxError as exc:
        raise ConfigError(f"Invalid {VIGILFILE_NAME} {filename}: {exc}") from exc

    evaluator = _Evaluator(registry)
    exec(code, evaluator.namespace(path))


def evaluate_vigilfile(registry: Registry, options: Optional[Options] = None) -> Path:
    """Find the Vigilfile and evaluate it into *registry*.

    Returns:
        The path of the evaluated file.

    Raises:
        ConfigError: If no Vigilfile exists (the message tells the user to
            run ``vigil init``) or it does not compile.
    """
    path = find_vigilfile(options)
    if path is None:
        raise ConfigError(NOT_FOUND_MESSAGE)

    debug(f"Evaluating {path}")
    evaluate_source(registry, path.read_text(encoding="utf-8"), path)
    logger.debug(
        "Evaluated %s: %d plugin(s) in %d group(s)",
        path,
        len(registry.plugins()),
        len(registry.groups()),
    )
    return path

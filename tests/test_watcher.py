"""Tests for vigil.watcher -- watch patterns and file matching."""

from __future__ import annotations

import re

from vigil.plugins.base import Plugin
from vigil.watcher import Watcher, match_files


class Matcher(Plugin):
    pass


class TestWatcher:
    def test_string_matches_exactly(self) -> None:
        watcher = Watcher("src/app.py")

        assert watcher.match("src/app.py")
        assert not watcher.match("src/app.pyc")
        assert not watcher.match("lib/src/app.py")

    def test_string_is_not_a_regex(self) -> None:
        assert not Watcher("a.py").match("abpy")

    def test_regex_searches(self) -> None:
        watcher = Watcher(re.compile(r"\.py$"))

        assert watcher.match("deep/nested/module.py")
        assert not watcher.match("module.pyi")

    def test_action_rewrites_path(self) -> None:
        watcher = Watcher(re.compile(r"^src/(.+)\.py$"), lambda m: f"tests/test_{m[1]}.py")

        assert watcher.paths_for("src/app.py") == ["tests/test_app.py"]

    def test_action_returning_list(self) -> None:
        watcher = Watcher(re.compile(r"^(.+)\.py$"), lambda m: [m[0], f"{m[1]}.pyi"])

        assert watcher.paths_for("a.py") == ["a.py", "a.pyi"]

    def test_action_returning_nothing_drops_path(self) -> None:
        watcher = Watcher(re.compile(".*"), lambda m: None)

        assert watcher.paths_for("a.py") == []

    def test_no_match(self) -> None:
        assert Watcher("a.py").paths_for("b.py") == []


class TestMatchFiles:
    def test_preserves_order_and_deduplicates(self) -> None:
        plugin = Matcher(
            [
                Watcher(re.compile(r"\.py$")),
                Watcher(re.compile(r"^src/(.+)\.py$"), lambda m: f"tests/test_{m[1]}.py"),
            ]
        )

        matched = match_files(plugin, ["src/app.py", "tests/test_app.py", "README.md"])

        assert matched == ["src/app.py", "tests/test_app.py"]

    def test_no_watchers(self) -> None:
        assert match_files(Matcher(), ["a.py"]) == []

"""Shared test fixtures for vigil.

Provides fixtures for isolating configuration directories, recording
diagnostics, keeping the plugin registration table clean, and running CLI
commands. These fixtures are discovered by pytest and available to all
test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import pytest

from vigil.output import OutputFormat, OutputManager, reset_output, set_output
from vigil.plugins import resolver as resolver_module


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager binds sys.stdout/sys.stderr when it is created. When
    CliRunner or capsys swap those streams, a manager created during one
    test must not leak into the next.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _restore_plugin_types() -> None:
    """Undo plugin class registrations made by a test.

    Defining a ``Plugin`` subclass registers it for resolution. Classes
    defined inside a test body would otherwise stay resolvable for every
    later test.
    """
    saved = dict(resolver_module._plugin_types)
    yield
    resolver_module._plugin_types.clear()
    resolver_module._plugin_types.update(saved)


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


class RecordingOutput(OutputManager):
    """OutputManager that records diagnostics instead of printing them."""

    def __init__(self) -> None:
        super().__init__(format=OutputFormat.PLAIN, no_color=True)
        self.infos: list[str] = []
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.debugs: list[str] = []

    def info(self, message: str) -> None:
        self.infos.append(message)

    def success(self, message: str) -> None:
        self.infos.append(message)

    def suggest(self, message: str) -> None:
        self.infos.append(message)

    def warning(self, message: str) -> None:
        self.warnings.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    def debug(self, message: str) -> None:
        self.debugs.append(message)


@pytest.fixture
def recorder() -> RecordingOutput:
    """Install a :class:`RecordingOutput` as the global output."""
    output = RecordingOutput()
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet PLAIN OutputManager for tests that ignore output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME and HOME at subdirectories of
    tmp_path, clears the VIGIL_* environment variables and changes the
    working directory to ``tmp_path / "project"``.

    Returns:
        The project directory.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    (tmp_path / "home").mkdir()
    monkeypatch.setattr("vigil.config._is_xdg_platform", lambda: True)

    for var in ["VIGIL_NOTIFY", "VIGIL_WATCHDIR", "VIGIL_VIGILFILE"]:
        monkeypatch.delenv(var, raising=False)

    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project


# ---------------------------------------------------------------------------
# Lifecycle fakes
# ---------------------------------------------------------------------------


class FakeListener:
    """Stands in for :class:`vigil.listener.Listener`."""

    def __init__(self, directory: Any, callback: Any = None) -> None:
        self.directory = Path(directory)
        self.callback = callback
        self._paused = False
        self.started = 0
        self.stopped = 0
        self.cleared = 0
        self.batches: list[tuple[list[str], list[str]]] = []

    def start(self) -> None:
        self.started += 1
        for modified, removed in self.batches:
            self.callback(modified, removed)

    def stop(self) -> None:
        self.stopped += 1

    def paused(self) -> bool:
        return self._paused

    def set_paused(self, value: bool) -> bool:
        if self._paused == value:
            return False
        self._paused = value
        return True

    def clear_changed_files(self) -> None:
        self.cleared += 1


class FakeInteractor:
    """Stands in for :class:`vigil.interactor.Interactor`."""

    def __init__(self) -> None:
        self.running = False
        self.events: list[str] = []

    def start(self) -> None:
        self.running = True
        self.events.append("start")

    def stop(self) -> None:
        self.running = False
        self.events.append("stop")


class FakeNotifier:
    def __init__(self) -> None:
        self.enabled: Optional[bool] = None
        self.notifications: list[str] = []

    def turn_on(self) -> None:
        self.enabled = True

    def turn_off(self) -> None:
        self.enabled = False

    def notify(self, message: str, title: str = "vigil", image: Optional[str] = None) -> None:
        self.notifications.append(message)


@pytest.fixture
def make_controller(recorder: RecordingOutput, tmp_path: Path):
    """Factory for a LifecycleController wired to fakes.

    ``evaluator`` defaults to one that registers nothing. ``batches`` are
    replayed through the listener callback when ``start`` runs. The returned
    controller exposes its fakes as ``fake_interactor`` and ``notifier``;
    the listener is a :class:`FakeListener` once ``setup`` has run.
    """
    from vigil.lifecycle import LifecycleController

    def _make(
        evaluator: Any = None,
        interactions: bool = True,
        signals: bool = False,
        batches: Any = (),
    ):
        interactor = FakeInteractor()

        def _listener_factory(directory: Any, callback: Any) -> FakeListener:
            listener = FakeListener(directory, callback)
            listener.batches.extend(batches)
            return listener

        def _interactor_factory(controller: Any, options: Any) -> Any:
            return None if options.no_interactions or not interactions else interactor

        def _no_bridge(controller: Any, **kwargs: Any) -> Any:
            class _Bridge:
                def install(self) -> None:
                    pass

                def uninstall(self) -> None:
                    pass

            return _Bridge()

        controller = LifecycleController(
            listener_factory=_listener_factory,
            interactor_factory=_interactor_factory,
            notifier=FakeNotifier(),
            evaluator=evaluator or (lambda registry, options: None),
            **({} if signals else {"signal_bridge_factory": _no_bridge}),
        )
        controller.fake_interactor = interactor
        return controller

    return _make


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()

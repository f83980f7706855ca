"""Lifecycle controller: setup, start, pause/resume and protected mutation.

:class:`LifecycleController` owns the process-wide pieces: the
:class:`~vigil.registry.Registry`, the frozen
:class:`~vigil.models.Options`, the file listener, the interactive console,
the notifier, the signal bridge and the lock that serialises every
registry mutation after setup.

State machine::

    STOPPED --start()--> RUNNING <--pause()/resume()--> PAUSED
       ^                    |                              |
       +------stop()--------+------------------------------+

``pause()`` and ``resume()`` are idempotent. They are a compare-and-set on
the listener's paused flag, so they are safe to call from the signal
consumer thread while a protected block runs.

Everything that reacts to changes or reconfigures the registry at runtime
goes through :meth:`LifecycleController.within_preserved_state`. It holds
the lock, stops the console for the duration of the block, and restarts
the console and releases the lock even if the block raises.
"""

from __future__ import annotations

import contextlib
import enum
import logging
import threading
import warnings
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Union

from vigil.config import resolve_notify
from vigil.dsl import evaluate_vigilfile
from vigil.exceptions import ConfigurationEmptyWarning, VigilError
from vigil.interactor import Interactor
from vigil.listener import Listener
from vigil.models import Options
from vigil.notifier import Notifier
from vigil.output import error, info
from vigil.plugins.base import Plugin
from vigil.registry import Registry
from vigil.runner import Runner
from vigil.signals import SignalBridge, can_install_handlers

logger = logging.getLogger(__name__)

EMPTY_CONFIGURATION_MESSAGE = "No plugins found in Vigilfile, please add at least one."
PAUSED_MESSAGE = "Paused, file modification listening is now disabled"
RESUMED_MESSAGE = "Un-paused, file modification listening is now enabled"


class LifecycleState(enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


class LifecycleController:
    """Drives vigil from setup to shutdown.

    Collaborators are injected so tests can substitute fakes:

    Args:
        registry: Registry to populate. A fresh one is created if omitted.
        listener_factory: ``(directory, callback) -> listener``.
        interactor_factory: ``(controller, options) -> interactor | None``.
        notifier: Notifier to switch on or off during setup.
        evaluator: ``(registry, options) -> None``; populates the registry
            from the Vigilfile.
        signal_bridge_factory: ``(controller, debug_signals=...) -> bridge``.
    """

    def __init__(
        self,
        registry: Optional[Registry] = None,
        *,
        listener_factory: Callable[..., Any] = Listener,
        interactor_factory: Callable[..., Any] = Interactor.fabricate,
        notifier: Optional[Notifier] = None,
        evaluator: Callable[[Registry, Options], None] = evaluate_vigilfile,
        signal_bridge_factory: Callable[..., Any] = SignalBridge,
    ) -> None:
        self.registry = registry if registry is not None else Registry()
        self.notifier = notifier if notifier is not None else Notifier()
        self.lock = threading.Lock()
        self.options = Options()
        self.listener: Any = None
        self.interactor: Any = None
        self.signal_bridge: Any = None
        self.runner = Runner(self.registry)
        self._listener_factory = listener_factory
        self._interactor_factory = interactor_factory
        self._evaluator = evaluator
        self._signal_bridge_factory = signal_bridge_factory
        self._running = False

    def __repr__(self) -> str:
        return f"<LifecycleController state={self.state.value}>"

    @property
    def state(self) -> LifecycleState:
        if not self._running:
            return LifecycleState.STOPPED
        if self.listener is not None and self.listener.paused():
            return LifecycleState.PAUSED
        return LifecycleState.RUNNING

    # ------------------------------------------------------------------
    # Setup and teardown
    # ------------------------------------------------------------------

    def setup(self, options: Union[Options, dict[str, Any], None] = None) -> LifecycleController:
        """(Re)initialise all process-wide state from *options*.

        Resolution errors raised while evaluating the Vigilfile propagate
        and abort setup. An evaluation that registers no plugins is
        reported but not fatal.
        """
        self._teardown_collaborators()

        if isinstance(options, Options):
            self.options = options
        else:
            self.options = Options.model_validate(options or {})

        self.registry.reset()
        self.runner = Runner(self.registry, self.options.group)

        directory = Path(self.options.watchdir) if self.options.watchdir else Path.cwd()
        self.listener = self._listener_factory(directory, self._on_changes)

        self._evaluate()

        if resolve_notify(self.options.notify):
            self.notifier.turn_on()
        else:
            self.notifier.turn_off()

        self.interactor = self._interactor_factory(self, self.options)
        if self.interactor is not None:
            self.interactor.start()

        if can_install_handlers():
            self.signal_bridge = self._signal_bridge_factory(
                self, debug_signals=self.options.debug_signals
            )
            self.signal_bridge.install()

        logger.debug("Setup complete: %s", self.options)
        return self

    def start(self, options: Union[Options, dict[str, Any], None] = None) -> None:
        """Set up, start every plugin and block on the listener until it stops."""
        self.setup(options)
        info(f"vigil is now watching at '{self.listener.directory}'")
        self._running = True
        try:
            self.within_preserved_state(self.runner.run, "start")
            self.listener.start()
        finally:
            self.stop()

    def stop(self) -> None:
        """Stop plugins and every collaborator. Safe to call more than once.

        The console is stopped first, then the plugins' ``stop`` task runs
        under the lock so it never overlaps a protected block.
        """
        if self.interactor is not None:
            self.interactor.stop()
        if self._running:
            self._running = False
            with self.lock:
                self.runner.run("stop")
        self._teardown_collaborators()

    def request_exit(self) -> None:
        """Ask the listener loop to return, which makes :meth:`start` shut down."""
        if self.listener is not None:
            self.listener.stop()

    def _teardown_collaborators(self) -> None:
        if self.interactor is not None:
            self.interactor.stop()
        if self.listener is not None:
            self.listener.stop()
        if self.signal_bridge is not None:
            self.signal_bridge.uninstall()
            self.signal_bridge = None

    def _evaluate(self) -> None:
        self._evaluator(self.registry, self.options)
        if not self.registry.plugins():
            error(EMPTY_CONFIGURATION_MESSAGE)
            warnings.warn(EMPTY_CONFIGURATION_MESSAGE, ConfigurationEmptyWarning, stacklevel=3)

    # ------------------------------------------------------------------
    # Pause / resume
    # ------------------------------------------------------------------

    def pause(self) -> None:
        """Stop reacting to file changes. No-op when already paused."""
        if self.listener is not None and self.listener.set_paused(True):
            info(PAUSED_MESSAGE)
            self.notifier.notify(PAUSED_MESSAGE, title="Paused", image="pending")

    def resume(self) -> None:
        """React to file changes again. No-op when already running."""
        if self.listener is not None and self.listener.set_paused(False):
            self.listener.clear_changed_files()
            info(RESUMED_MESSAGE)
            self.notifier.notify(RESUMED_MESSAGE, title="Un-paused", image="success")

    def toggle_pause(self) -> None:
        if self.listener is None:
            return
        if self.listener.paused():
            self.resume()
        else:
            self.pause()

    # ------------------------------------------------------------------
    # Protected mutation
    # ------------------------------------------------------------------

    def within_preserved_state(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run ``func(*args, **kwargs)`` under the lock with the console stopped."""
        with self.preserved_state():
            return func(*args, **kwargs)

    @contextlib.contextmanager
    def preserved_state(self) -> Iterator[None]:
        """Context-manager form of :meth:`within_preserved_state`."""
        with self.lock:
            if self.interactor is not None:
                self.interactor.stop()
            try:
                yield
            finally:
                if self.interactor is not None:
                    self.interactor.start()

    def run_all(self, *, group: Optional[str] = None, plugin: Optional[Plugin] = None) -> None:
        self.within_preserved_state(self.runner.run, "run_all", group=group, plugin=plugin)

    def reload(self, *, group: Optional[str] = None, plugin: Optional[Plugin] = None) -> None:
        self.within_preserved_state(self.runner.run, "reload", group=group, plugin=plugin)

    def reevaluate_vigilfile(self) -> None:
        """Stop the plugins, re-read the Vigilfile and start the new plugins."""
        with self.preserved_state():
            self.runner.run("stop")
            self.registry.reset()
            try:
                self._evaluate()
            except VigilError as exc:
                error(str(exc))
                return
            self.runner.run("start")
        info("Vigilfile has been re-evaluated.")
        self.notifier.notify("Vigilfile has been re-evaluated.", title="Vigilfile")

    def _on_changes(self, modified: list[str], removed: list[str]) -> None:
        self.within_preserved_state(self.runner.run_on_changes, modified, removed)

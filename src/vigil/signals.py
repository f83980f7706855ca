"""POSIX signal bridge: SIGUSR1 pauses, SIGUSR2 resumes.

Signal handlers run on the main thread between bytecodes, possibly while
the main thread holds locks. The handlers installed here therefore do
nothing but push a :class:`ControlMessage` onto a
:class:`queue.SimpleQueue` (safe to call from a signal handler). A daemon
consumer thread drains the queue and applies each message through
:meth:`SignalBridge.dispatch`, which is the single decision point.

Both transitions are idempotent: pausing a paused listener or resuming a
running one does nothing.

Usage from a shell::

    kill -USR1 <pid>   # pause
    kill -USR2 <pid>   # resume
"""

from __future__ import annotations

import enum
import logging
import queue
import signal
import threading
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from vigil.lifecycle import LifecycleController

logger = logging.getLogger(__name__)


class ControlMessage(enum.Enum):
    """Requests a signal handler can make of the controller."""

    PAUSE = "pause"
    RESUME = "resume"


_STOP = object()


def signals_supported() -> bool:
    """Return True if the platform has ``SIGUSR1`` and ``SIGUSR2``."""
    return hasattr(signal, "SIGUSR1") and hasattr(signal, "SIGUSR2")


def can_install_handlers() -> bool:
    """Return True if handlers can be installed from the current thread."""
    return signals_supported() and threading.current_thread() is threading.main_thread()


class SignalBridge:
    """Translates SIGUSR1/SIGUSR2 into pause/resume on a controller.

    Args:
        controller: The controller whose listener is paused and resumed.
        debug_signals: Log every message as it is dispatched.
    """

    def __init__(self, controller: LifecycleController, *, debug_signals: bool = False) -> None:
        self.controller = controller
        self.debug_signals = debug_signals
        self._queue: queue.SimpleQueue[Any] = queue.SimpleQueue()
        self._consumer: Optional[threading.Thread] = None
        self._previous: dict[int, Any] = {}

    @property
    def installed(self) -> bool:
        return bool(self._previous)

    def install(self) -> None:
        """Install the handlers and start the consumer thread.

        Does nothing when signals are unsupported or when called off the
        main thread.
        """
        if self.installed:
            return
        if not can_install_handlers():
            logger.debug("Signal handlers not installed (unsupported here)")
            return

        self._consumer = threading.Thread(
            target=self._consume, name="vigil-signals", daemon=True
        )
        self._consumer.start()
        for signum, message in (
            (signal.SIGUSR1, ControlMessage.PAUSE),
            (signal.SIGUSR2, ControlMessage.RESUME),
        ):
            self._previous[signum] = signal.signal(signum, self._handler_for(message))
        logger.debug("Installed SIGUSR1/SIGUSR2 handlers")

    def uninstall(self) -> None:
        """Restore the previous handlers and stop the consumer thread."""
        if not self.installed:
            return
        if threading.current_thread() is threading.main_thread():
            for signum, previous in self._previous.items():
                signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        self._previous.clear()

        self._queue.put(_STOP)
        if self._consumer is not None and self._consumer is not threading.current_thread():
            self._consumer.join(timeout=1.0)
        self._consumer = None
        logger.debug("Removed SIGUSR1/SIGUSR2 handlers")

    def post(self, message: ControlMessage) -> None:
        """Enqueue *message* for the consumer thread."""
        self._queue.put(message)

    def dispatch(self, message: ControlMessage) -> None:
        """Apply *message* to the controller."""
        if self.debug_signals:
            logger.debug("Received control message %s", message.name)

        listener = self.controller.listener
        if listener is None:
            return
        if message is ControlMessage.PAUSE:
            if not listener.paused():
                self.controller.pause()
        elif message is ControlMessage.RESUME:
            if listener.paused():
                self.controller.resume()

    def _handler_for(self, message: ControlMessage):
        def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
            self._queue.put(message)

        return _handler

    def _consume(self) -> None:
        while True:
            message = self._queue.get()
            if message is _STOP:
                return
            try:
                self.dispatch(message)
            except Exception:
                logger.exception("Failed to apply control message %s", message)

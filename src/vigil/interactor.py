"""Line-oriented interactive console.

The interactor reads commands from stdin on a daemon thread and forwards
them to the :class:`~vigil.lifecycle.LifecycleController`:

==============  ==================================================
``<empty>``     run every plugin (same as ``all``)
``all``         run every plugin, or one group / plugin
``reload``      reload every plugin, or one group / plugin
``reevaluate``  re-read the Vigilfile
``pause``       toggle file modification listening
``exit``        stop vigil (``quit`` is an alias)
``help``        list these commands
==============  ==================================================

``all`` and ``reload`` take an optional scope: a group name or a plugin
name, e.g. ``all backend`` or ``reload shell``.

Each :meth:`Interactor.start` spawns a new thread with its own stop
event. Commands run on the interactor thread and usually go through
:meth:`~vigil.lifecycle.LifecycleController.within_preserved_state`,
which stops and restarts the interactor around them; the old thread sees
its own event set and exits once the command returns.
"""

from __future__ import annotations

import logging
import select
import sys
import threading
from typing import IO, TYPE_CHECKING, Any, Callable, Optional

from vigil.models import Options
from vigil.output import error, info

if TYPE_CHECKING:
    from vigil.lifecycle import LifecycleController

logger = logging.getLogger(__name__)

HELP_TEXT = """\
Commands:
  all [scope]      run all plugins (an empty line does the same)
  reload [scope]   reload plugins
  reevaluate       re-read the Vigilfile
  pause            toggle file modification listening
  exit | quit      stop vigil
  help             show this message
A scope is a group name or a plugin name."""

_POLL_INTERVAL = 0.1


class Interactor:
    """Reads commands from *stream* and drives *controller*."""

    def __init__(
        self,
        controller: LifecycleController,
        options: Optional[Options] = None,
        *,
        stream: Optional[IO[str]] = None,
    ) -> None:
        self.controller = controller
        self.options = options or Options()
        self.stream = stream if stream is not None else sys.stdin
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._commands: dict[str, Callable[[list[str]], None]] = {
            "all": self._run_all,
            "reload": self._reload,
            "reevaluate": self._reevaluate,
            "pause": self._pause,
            "exit": self._exit,
            "quit": self._exit,
            "help": self._help,
        }

    @classmethod
    def fabricate(cls, controller: LifecycleController, options: Options) -> Optional[Interactor]:
        """Return an interactor for *controller*, or ``None`` if interactions are off."""
        if options.no_interactions:
            return None
        return cls(controller, options)

    @property
    def running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._stop_event.is_set()
        )

    def start(self) -> None:
        """Start reading commands on a fresh daemon thread."""
        if self.running:
            return
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._loop,
            args=(self._stop_event,),
            name="vigil-interactor",
            daemon=True,
        )
        self._thread.start()
        logger.debug("Interactor started")

    def stop(self) -> None:
        """Stop the current reader thread.

        When called from the reader thread itself (a command stopping its
        own interactor) the thread is only flagged; it exits after the
        command returns.
        """
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)
        logger.debug("Interactor stopped")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def process_input(self, line: str) -> None:
        """Execute one console line."""
        words = line.split()
        if not words:
            self._run_all([])
            return
        command, args = words[0].lower(), words[1:]
        handler = self._commands.get(command)
        if handler is None:
            error(f"Unknown command '{command}', type 'help' for a list")
            return
        handler(args)

    def _scope(self, args: list[str]) -> Optional[dict[str, Any]]:
        if not args:
            return {}
        name = args[0]
        registry = self.controller.registry
        if registry.groups(name) is not None:
            return {"group": name}
        plugin = registry.plugins(name)
        if plugin is not None:
            return {"plugin": plugin}
        error(f"No group or plugin named '{name}'")
        return None

    def _run_all(self, args: list[str]) -> None:
        scope = self._scope(args)
        if scope is not None:
            self.controller.run_all(**scope)

    def _reload(self, args: list[str]) -> None:
        scope = self._scope(args)
        if scope is not None:
            self.controller.reload(**scope)

    def _reevaluate(self, args: list[str]) -> None:
        self.controller.reevaluate_vigilfile()

    def _pause(self, args: list[str]) -> None:
        self.controller.toggle_pause()

    def _exit(self, args: list[str]) -> None:
        info("Bye bye...")
        self._stop_event.set()
        self.controller.request_exit()

    def _help(self, args: list[str]) -> None:
        info(HELP_TEXT)

    # ------------------------------------------------------------------
    # Reader thread
    # ------------------------------------------------------------------

    def _loop(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            line = self._read_line(stop_event)
            if line is None:
                return
            try:
                self.process_input(line)
            except Exception:
                logger.exception("Console command failed: %r", line)

    def _read_line(self, stop_event: threading.Event) -> Optional[str]:
        """Wait for a line, returning ``None`` on EOF or when stopped."""
        try:
            fileno = self.stream.fileno()
        except (AttributeError, OSError, ValueError):
            fileno = None

        if fileno is not None:
            while not stop_event.is_set():
                try:
                    ready, _, _ = select.select([fileno], [], [], _POLL_INTERVAL)
                except OSError:
                    # select() only handles sockets on Windows
                    break
                if ready:
                    break
            else:
                return None

        line = self.stream.readline()
        if not line or stop_event.is_set():
            return None
        return line.rstrip("\n")

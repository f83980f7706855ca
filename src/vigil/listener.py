"""File-system listener built on :mod:`watchdog`.

The :class:`Listener` is the watcher collaborator of the lifecycle
controller. A ``watchdog`` observer thread records raw events into a queue;
:meth:`Listener.start` runs the event loop on the calling thread, batching
queued events every ``latency`` seconds and handing them to the callback as
two lists of paths relative to the watched directory:
``callback(modified, removed)``.

Pausing is a flag guarded by its own lock. While paused, events are
dropped as they arrive, so nothing queued while paused is replayed on
resume. :meth:`Listener.stop` is cooperative: the loop notices the stop
flag between batches.

Paths are filtered through gitignore-style rules (:mod:`pathspec`): a set
of defaults, the watched directory's ``.gitignore``, and any extra
patterns passed in.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from pathlib import Path
from typing import Callable, Iterable, Optional

import pathspec
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[list[str], list[str]], None]

DEFAULT_IGNORE = (
    ".git/",
    ".hg/",
    ".svn/",
    "__pycache__/",
    "*.py[cod]",
    ".*.swp",
    "*~",
    ".DS_Store",
)

_MODIFIED = "modified"
_REMOVED = "removed"


def _load_ignore_spec(root: Path, extra: Iterable[str]) -> pathspec.GitIgnoreSpec:
    """Compile the default rules, ``root/.gitignore`` and *extra* into one matcher."""
    lines = list(DEFAULT_IGNORE)
    gitignore = root / ".gitignore"
    if gitignore.is_file():
        lines.extend(gitignore.read_text(encoding="utf-8", errors="replace").splitlines())
    lines.extend(extra)
    return pathspec.GitIgnoreSpec.from_lines(lines)


class _EventHandler(FileSystemEventHandler):
    """Forwards watchdog events to the owning :class:`Listener`."""

    def __init__(self, listener: Listener) -> None:
        super().__init__()
        self._listener = listener

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if event.event_type in ("created", "modified"):
            self._listener.record(_MODIFIED, event.src_path)
        elif event.event_type == "deleted":
            self._listener.record(_REMOVED, event.src_path)
        elif event.event_type == "moved":
            self._listener.record(_REMOVED, event.src_path)
            self._listener.record(_MODIFIED, event.dest_path)


class Listener:
    """Watches a directory tree and reports batched changes.

    Args:
        directory: Root of the watched tree.
        callback: Called with ``(modified, removed)`` relative paths for
            each non-empty batch.
        ignore: Extra gitignore-style patterns to skip.
        latency: Seconds to wait for the first event of a batch; this is
            also how quickly :meth:`stop` takes effect.
        observer_factory: Builds the watchdog observer (tests substitute a
            fake).
    """

    def __init__(
        self,
        directory: str | os.PathLike[str],
        callback: Optional[ChangeCallback] = None,
        *,
        ignore: Iterable[str] = (),
        latency: float = 0.1,
        observer_factory: Callable[[], object] = Observer,
    ) -> None:
        self.directory = Path(directory).resolve()
        self.callback = callback
        self.latency = latency
        self._ignore = _load_ignore_spec(self.directory, ignore)
        self._observer_factory = observer_factory
        self._events: queue.Queue[tuple[str, str]] = queue.Queue()
        self._paused = False
        self._pause_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._running = False

    def __repr__(self) -> str:
        return f"<Listener {str(self.directory)!r} paused={self._paused}>"

    # ------------------------------------------------------------------
    # Event loop
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        """Whether :meth:`start` is currently looping."""
        return self._running

    def start(self) -> None:
        """Watch the directory until :meth:`stop` is called (blocking).

        A :meth:`stop` requested before the loop starts is honoured: the loop
        exits after setting up and tearing down the observer.
        """
        observer = self._observer_factory()
        observer.schedule(_EventHandler(self), str(self.directory), recursive=True)
        observer.start()
        self._running = True
        logger.debug("Listening to %s", self.directory)
        try:
            while not self._stop_event.is_set():
                self.process_batch()
        finally:
            self._running = False
            observer.stop()
            observer.join()
            logger.debug("Stopped listening to %s", self.directory)

    def stop(self) -> None:
        """Ask the event loop to exit after the current batch."""
        self._stop_event.set()

    def process_batch(self) -> None:
        """Wait up to ``latency`` seconds for events and dispatch one batch."""
        try:
            first = self._events.get(timeout=self.latency)
        except queue.Empty:
            return

        latest: dict[str, str] = {}
        kind, path = first
        latest[path] = kind
        while True:
            try:
                kind, path = self._events.get_nowait()
            except queue.Empty:
                break
            latest.pop(path, None)
            latest[path] = kind

        if self.paused() or self.callback is None:
            return
        modified = [p for p, k in latest.items() if k == _MODIFIED]
        removed = [p for p, k in latest.items() if k == _REMOVED]
        self.callback(modified, removed)

    def record(self, kind: str, path: str | bytes) -> None:
        """Queue one raw event unless it is ignored or the listener is paused."""
        if self.paused():
            return
        relative = self._relative(path)
        if relative is None or self._ignore.match_file(relative):
            return
        self._events.put((kind, relative))

    def clear_changed_files(self) -> None:
        """Discard every queued event."""
        while True:
            try:
                self._events.get_nowait()
            except queue.Empty:
                return

    def _relative(self, path: str | bytes) -> Optional[str]:
        if isinstance(path, bytes):
            path = os.fsdecode(path)
        try:
            return Path(path).resolve().relative_to(self.directory).as_posix()
        except ValueError:
            return None

    # ------------------------------------------------------------------
    # Pause flag
    # ------------------------------------------------------------------

    def paused(self) -> bool:
        """Whether change events are currently being dropped."""
        with self._pause_lock:
            return self._paused

    def set_paused(self, value: bool) -> bool:
        """Set the paused flag; return ``True`` if it actually changed."""
        with self._pause_lock:
            if self._paused == value:
                return False
            self._paused = value
            return True

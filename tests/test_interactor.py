"""Tests for vigil.interactor -- console commands and the reader thread."""

from __future__ import annotations

import io
import os
import threading
import time
from unittest.mock import MagicMock

import pytest

from vigil.interactor import HELP_TEXT, Interactor
from vigil.models import Options
from vigil.plugins.base import Plugin
from vigil.registry import Registry


class Console(Plugin):
    pass


@pytest.fixture
def controller() -> MagicMock:
    controller = MagicMock()
    registry = Registry()
    registry.add_group("backend")
    registry.add_plugin("console", options={"group": "backend"})
    controller.registry = registry
    return controller


# ---------------------------------------------------------------------------
# fabricate
# ---------------------------------------------------------------------------


class TestFabricate:
    def test_returns_interactor(self, controller: MagicMock) -> None:
        interactor = Interactor.fabricate(controller, Options())

        assert isinstance(interactor, Interactor)
        assert interactor.controller is controller

    def test_no_interactions(self, controller: MagicMock) -> None:
        assert Interactor.fabricate(controller, Options(no_interactions=True)) is None


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class TestProcessInput:
    def test_empty_line_runs_all(self, controller: MagicMock) -> None:
        Interactor(controller).process_input("")

        controller.run_all.assert_called_once_with()

    def test_all_with_group_scope(self, controller: MagicMock) -> None:
        Interactor(controller).process_input("all Backend")

        controller.run_all.assert_called_once_with(group="Backend")

    def test_reload_with_plugin_scope(self, controller: MagicMock) -> None:
        plugin = controller.registry.plugins()[0]

        Interactor(controller).process_input("reload console")

        controller.reload.assert_called_once_with(plugin=plugin)

    def test_unknown_scope(self, controller: MagicMock, recorder) -> None:
        Interactor(controller).process_input("reload nothing")

        controller.reload.assert_not_called()
        assert recorder.errors == ["No group or plugin named 'nothing'"]

    def test_reevaluate(self, controller: MagicMock) -> None:
        Interactor(controller).process_input("reevaluate")

        controller.reevaluate_vigilfile.assert_called_once_with()

    def test_pause_toggles(self, controller: MagicMock) -> None:
        Interactor(controller).process_input("pause")

        controller.toggle_pause.assert_called_once_with()

    @pytest.mark.parametrize("command", ["exit", "quit", "EXIT"])
    def test_exit(self, controller: MagicMock, command: str, recorder) -> None:
        Interactor(controller).process_input(command)

        controller.request_exit.assert_called_once_with()

    def test_help(self, controller: MagicMock, recorder) -> None:
        Interactor(controller).process_input("help")

        assert recorder.infos == [HELP_TEXT]

    def test_unknown_command(self, controller: MagicMock, recorder) -> None:
        Interactor(controller).process_input("dance")

        assert recorder.errors == ["Unknown command 'dance', type 'help' for a list"]


# ---------------------------------------------------------------------------
# Reader thread
# ---------------------------------------------------------------------------


def _wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TestReaderThread:
    def test_reads_lines_until_eof(self, controller: MagicMock) -> None:
        interactor = Interactor(controller, stream=io.StringIO("pause\nreevaluate\n"))

        interactor.start()
        assert _wait_for(lambda: not interactor.running)

        controller.toggle_pause.assert_called_once_with()
        controller.reevaluate_vigilfile.assert_called_once_with()

    @pytest.mark.skipif(os.name == "nt", reason="select() needs sockets on Windows")
    def test_stop_interrupts_blocking_read(self, controller: MagicMock) -> None:
        read_fd, write_fd = os.pipe()
        stream = os.fdopen(read_fd, "r")
        try:
            interactor = Interactor(controller, stream=stream)
            interactor.start()
            assert interactor.running

            interactor.stop()

            assert not interactor.running
            assert not interactor._thread.is_alive()
        finally:
            stream.close()
            os.close(write_fd)

    def test_restart_from_own_thread(self, controller: MagicMock) -> None:
        interactor = Interactor(controller, stream=io.StringIO("all\n"))
        threads: list[threading.Thread] = []

        def _run_all(**scope) -> None:
            # Mirrors within_preserved_state: stop, work, start.
            interactor.stop()
            threads.append(threading.current_thread())
            interactor.start()

        controller.run_all.side_effect = _run_all

        interactor.start()
        assert _wait_for(lambda: threads and not interactor.running)

        assert len(threads) == 1
        assert interactor._thread is not threads[0]

    @pytest.mark.skipif(os.name == "nt", reason="select() needs sockets on Windows")
    def test_start_is_idempotent(self, controller: MagicMock) -> None:
        read_fd, write_fd = os.pipe()
        stream = os.fdopen(read_fd, "r")
        try:
            interactor = Interactor(controller, stream=stream)
            interactor.start()
            first = interactor._thread
            interactor.start()

            assert interactor._thread is first
            interactor.stop()
        finally:
            stream.close()
            os.close(write_fd)

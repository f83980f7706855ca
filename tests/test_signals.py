"""Tests for vigil.signals -- SIGUSR1/SIGUSR2 pause/resume bridge."""

from __future__ import annotations

import os
import signal
import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from vigil.plugins.base import Plugin
from vigil.signals import (
    _STOP,
    ControlMessage,
    SignalBridge,
    can_install_handlers,
    signals_supported,
)


class Signalled(Plugin):
    pass


def _fake_controller(paused: bool = False) -> MagicMock:
    controller = MagicMock()
    controller.listener.paused.return_value = paused
    return controller


# ---------------------------------------------------------------------------
# dispatch
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_pause_when_running(self) -> None:
        controller = _fake_controller(paused=False)

        SignalBridge(controller).dispatch(ControlMessage.PAUSE)

        controller.pause.assert_called_once_with()

    def test_pause_when_paused_is_noop(self) -> None:
        controller = _fake_controller(paused=True)

        SignalBridge(controller).dispatch(ControlMessage.PAUSE)

        controller.pause.assert_not_called()
        controller.resume.assert_not_called()

    def test_resume_when_paused(self) -> None:
        controller = _fake_controller(paused=True)

        SignalBridge(controller).dispatch(ControlMessage.RESUME)

        controller.resume.assert_called_once_with()

    def test_resume_when_running_is_noop(self) -> None:
        controller = _fake_controller(paused=False)

        SignalBridge(controller).dispatch(ControlMessage.RESUME)

        controller.resume.assert_not_called()
        controller.pause.assert_not_called()

    def test_no_listener(self) -> None:
        controller = MagicMock()
        controller.listener = None

        SignalBridge(controller).dispatch(ControlMessage.PAUSE)

        controller.pause.assert_not_called()

    def test_idempotent_against_real_controller(self, make_controller) -> None:
        controller = make_controller(lambda registry, options: registry.add_plugin("signalled"))
        controller.setup()
        bridge = SignalBridge(controller)

        bridge.dispatch(ControlMessage.PAUSE)
        bridge.dispatch(ControlMessage.PAUSE)
        assert controller.listener.paused()

        bridge.dispatch(ControlMessage.RESUME)
        bridge.dispatch(ControlMessage.RESUME)
        assert not controller.listener.paused()
        assert controller.listener.cleared == 1


# ---------------------------------------------------------------------------
# install / uninstall
# ---------------------------------------------------------------------------


class TestInstall:
    def test_unsupported_platform_installs_nothing(self) -> None:
        with patch("vigil.signals.can_install_handlers", return_value=False):
            bridge = SignalBridge(_fake_controller())
            bridge.install()

        assert not bridge.installed

    def test_not_on_main_thread(self) -> None:
        results: list[bool] = []
        thread = threading.Thread(target=lambda: results.append(can_install_handlers()))
        thread.start()
        thread.join()

        assert results == [False]

    def test_supported_matches_platform(self) -> None:
        assert signals_supported() == hasattr(signal, "SIGUSR1")

    @pytest.mark.skipif(not signals_supported(), reason="SIGUSR1/SIGUSR2 unavailable")
    def test_real_signals_pause_and_resume(self) -> None:
        controller = _fake_controller(paused=False)
        previous = signal.getsignal(signal.SIGUSR1)
        bridge = SignalBridge(controller)
        bridge.install()
        try:
            os.kill(os.getpid(), signal.SIGUSR1)
            deadline = time.monotonic() + 2.0
            while not controller.pause.called and time.monotonic() < deadline:
                time.sleep(0.01)
            controller.pause.assert_called_once_with()

            controller.listener.paused.return_value = True
            os.kill(os.getpid(), signal.SIGUSR2)
            deadline = time.monotonic() + 2.0
            while not controller.resume.called and time.monotonic() < deadline:
                time.sleep(0.01)
            controller.resume.assert_called_once_with()
        finally:
            bridge.uninstall()

        assert signal.getsignal(signal.SIGUSR1) == previous
        assert not bridge.installed

    @pytest.mark.skipif(not signals_supported(), reason="SIGUSR1/SIGUSR2 unavailable")
    def test_install_twice_is_noop(self) -> None:
        bridge = SignalBridge(_fake_controller())
        bridge.install()
        try:
            handler = signal.getsignal(signal.SIGUSR1)
            bridge.install()
            assert signal.getsignal(signal.SIGUSR1) is handler
        finally:
            bridge.uninstall()

    def test_consumer_survives_dispatch_errors(self) -> None:
        controller = _fake_controller(paused=False)
        controller.pause.side_effect = [RuntimeError("boom"), None]
        bridge = SignalBridge(controller)
        bridge._consumer = threading.Thread(target=bridge._consume, daemon=True)
        bridge._consumer.start()

        bridge.post(ControlMessage.PAUSE)
        bridge.post(ControlMessage.PAUSE)
        deadline = time.monotonic() + 2.0
        while controller.pause.call_count < 2 and time.monotonic() < deadline:
            time.sleep(0.01)

        assert controller.pause.call_count == 2
        bridge._queue.put(_STOP)
        bridge._consumer.join(timeout=1.0)
        assert not bridge._consumer.is_alive()

"""Tests for vigil.notifier."""

from __future__ import annotations

import io

from rich.console import Console

from vigil.notifier import Notifier


def _notifier() -> tuple[Notifier, io.StringIO]:
    buffer = io.StringIO()
    return Notifier(Console(file=buffer, no_color=True, width=200)), buffer


def test_starts_disabled() -> None:
    notifier, buffer = _notifier()

    notifier.notify("Paused")

    assert not notifier.enabled
    assert buffer.getvalue() == ""


def test_prints_when_enabled() -> None:
    notifier, buffer = _notifier()
    notifier.turn_on()

    notifier.notify("3 tests failed", title="pytest", image="failed")

    assert buffer.getvalue() == "pytest: 3 tests failed\n"


def test_turn_off() -> None:
    notifier, buffer = _notifier()
    notifier.turn_on()
    notifier.turn_off()

    notifier.notify("hidden")

    assert buffer.getvalue() == ""


def test_markup_in_message_is_escaped() -> None:
    notifier, buffer = _notifier()
    notifier.turn_on()

    notifier.notify("changed [bold]x[/bold].py", image="unknown")

    assert "[bold]x[/bold].py" in buffer.getvalue()


def test_default_console_is_stderr_console(quiet_output) -> None:
    assert Notifier().console is quiet_output.stderr_console

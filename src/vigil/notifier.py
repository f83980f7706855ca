"""Terminal notifier.

Notifications are short status lines ("Paused", "3 tests failed", ...)
printed to stderr through a Rich console. The notifier starts disabled;
:meth:`~vigil.lifecycle.LifecycleController.setup` turns it on or off
from the ``notify`` option and the ``VIGIL_NOTIFY`` environment variable.
"""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)

_IMAGE_STYLES = {
    "success": "green",
    "failed": "bold red",
    "pending": "yellow",
}


class Notifier:
    """Prints notifications when enabled, drops them otherwise."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self._console = console
        self._enabled = False

    @property
    def console(self) -> Console:
        if self._console is None:
            from vigil.output import get_output

            self._console = get_output().stderr_console
        return self._console

    @property
    def enabled(self) -> bool:
        return self._enabled

    def turn_on(self) -> None:
        self._enabled = True
        logger.debug("Notifications enabled")

    def turn_off(self) -> None:
        self._enabled = False
        logger.debug("Notifications disabled")

    def notify(self, message: str, title: str = "vigil", image: Optional[str] = None) -> None:
        """Show *message* under *title*.

        Args:
            message: Notification body.
            title: Short heading printed before the message.
            image: ``"success"``, ``"failed"`` or ``"pending"`` picks the
                colour; anything else prints unstyled.
        """
        if not self._enabled:
            return
        style = _IMAGE_STYLES.get(image or "", "")
        heading = f"[{style}]{escape(title)}[/{style}]" if style else escape(title)
        self.console.print(f"{heading}: {escape(message)}")

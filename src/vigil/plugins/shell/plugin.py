"""Shell plugin -- run a shell command when watched files change.

Options:

* ``command`` -- command run on change, on removal and by ``run_all``.
  The matched paths are exported in ``VIGIL_PATHS`` (newline separated),
  and ``{paths}`` in the command is replaced by the shell-quoted paths.
* ``all_on_start`` -- run the command once when vigil starts.
* ``timeout`` -- seconds before the command is killed (default: none).

A non-zero exit status raises :class:`~vigil.exceptions.TaskFailed` so
groups with ``halt_on_failure`` stop at this plugin.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from typing import Optional

from vigil.exceptions import TaskFailed
from vigil.output import error, info
from vigil.plugins.base import Plugin


class Shell(Plugin):
    """Runs ``options["command"]`` in a shell for the matched paths."""

    @property
    def command(self) -> Optional[str]:
        return self.options.get("command")

    def start(self) -> None:
        if self.options.get("all_on_start"):
            self.run_all()

    def run_all(self) -> None:
        self._run([])

    def run_on_change(self, paths: list[str]) -> None:
        self._run(paths)

    def run_on_removal(self, paths: list[str]) -> None:
        self._run(paths)

    def _run(self, paths: list[str]) -> None:
        if not self.command:
            return

        command = self.command.replace(
            "{paths}", " ".join(shlex.quote(p) for p in paths)
        )
        env = os.environ.copy()
        env["VIGIL_PATHS"] = "\n".join(paths)

        info(f"Running: {command}")
        try:
            result = subprocess.run(
                command,
                shell=True,
                env=env,
                timeout=self.options.get("timeout"),
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            error(f"Command timed out after {exc.timeout} seconds: {command}")
            raise TaskFailed(command) from exc

        if result.returncode != 0:
            error(f"Command exited with status {result.returncode}: {command}")
            raise TaskFailed(command)

"""Tests for the bundled shell plugin."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from vigil.exceptions import TaskFailed
from vigil.plugins.shell import Shell

pytestmark = pytest.mark.skipif(os.name == "nt", reason="commands use POSIX sh")


def test_paths_are_substituted_and_exported(tmp_path: Path, recorder) -> None:
    out = tmp_path / "out.txt"
    shell = Shell(
        options={"command": f'echo {{paths}} > {out}; printf "%s" "$VIGIL_PATHS" >> {out}'}
    )

    shell.run_on_change(["a.py", "dir/with space.py"])

    assert out.read_text() == "a.py dir/with space.py\na.py\ndir/with space.py"
    assert recorder.infos[0].startswith("Running: echo a.py 'dir/with space.py'")


def test_removal_runs_the_same_command(tmp_path: Path, recorder) -> None:
    out = tmp_path / "out.txt"
    Shell(options={"command": f"echo {{paths}} > {out}"}).run_on_removal(["gone.py"])

    assert out.read_text() == "gone.py\n"


def test_nonzero_exit_raises_task_failed(recorder) -> None:
    with pytest.raises(TaskFailed):
        Shell(options={"command": "exit 3"}).run_all()

    assert recorder.errors == ["Command exited with status 3: exit 3"]


def test_timeout_raises_task_failed(recorder) -> None:
    with pytest.raises(TaskFailed):
        Shell(options={"command": "sleep 5", "timeout": 0.2}).run_all()

    assert recorder.errors[0].startswith("Command timed out after 0.2 seconds")


def test_no_command_is_a_noop(recorder) -> None:
    Shell().run_all()

    assert recorder.infos == []


def test_all_on_start(tmp_path: Path, recorder) -> None:
    out = tmp_path / "started"
    Shell(options={"command": f"touch {out}"}).start()
    assert not out.exists()

    Shell(options={"command": f"touch {out}", "all_on_start": True}).start()
    assert out.exists()


def test_group_option_is_not_kept_in_options() -> None:
    shell = Shell(options={"command": "true", "group": "Backend"})

    assert shell.group == "backend"
    assert "group" not in shell.options


def test_ships_a_template() -> None:
    assert 'plugin("shell"' in Shell.template_path().read_text()

"""vigil -- run reaction plugins whenever files in a project change.

vigil watches a directory tree and hands every change to the *plugins*
declared in a project's ``Vigilfile``. Plugins are grouped, can be paused
and resumed at runtime (interactively or with ``SIGUSR1``/``SIGUSR2``),
and the whole configuration can be re-evaluated without restarting the
process.

Typical workflow::

    vigil init shell     # write a Vigilfile with the shell plugin template
    vigil start          # watch the project and react to changes

Modules:
    app: Typer application and CLI entry point.
    lifecycle: The lifecycle controller (setup, start, pause/resume, locking).
    registry: Plugin and group registry with filtered queries.
    plugins: Plugin base class, resolver and bundled plugins.
    listener: File-system listener built on ``watchdog``.
    signals: Signal bridge translating ``SIGUSR1``/``SIGUSR2`` to pause/resume.
    dsl: Vigilfile evaluation.
    scaffold: Vigilfile and template scaffolding.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stderr diagnostics with Rich support.
"""

__version__ = "0.3.0"

"""Canonical Pydantic models shared across vigil modules.

* :class:`Options` -- the process-wide options bag captured by
  :meth:`~vigil.lifecycle.LifecycleController.setup`. It is frozen: once
  setup completes nobody can change it for the rest of the process.
* :class:`Group` -- a named partition of plugins with its own options
  (``halt_on_failure`` is the one key vigil itself understands).

Both models use Pydantic v2. ``Options`` uses ``extra="allow"`` so that
collaborator-specific settings pass through untouched and stay accessible
via ``model_extra``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_GROUP = "default"
"""Name of the implicit group every registry starts with."""


def normalize_group_name(name: Any) -> str:
    """Return the canonical form of a group name (stripped, lowercase)."""
    return str(name).strip().lower()


class Options(BaseModel):
    """Process-wide options recognised by
    :meth:`~vigil.lifecycle.LifecycleController.setup`.

    Unknown keys are kept (``extra="allow"``) and handed to collaborators
    such as the interactor.

    Example::

        Options(notify=False, watchdir="/srv/app", group=["backend"])
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    verbose: bool = Field(default=False, description="Enable debug output")
    notify: bool = Field(
        default=True,
        description="Enable notifications (VIGIL_NOTIFY=false overrides to off)",
    )
    no_interactions: bool = Field(
        default=False, description="Do not start the interactive console"
    )
    watchdir: Optional[str] = Field(
        default=None, description="Directory to watch (defaults to the cwd)"
    )
    vigilfile: Optional[str] = Field(
        default=None, description="Path to the Vigilfile to evaluate"
    )
    group: tuple[str, ...] = Field(
        default=(),
        description="Only run plugins from these groups (all when empty)",
    )
    debug_signals: bool = Field(
        default=False, description="Log every control message received"
    )

    @field_validator("group", mode="before")
    @classmethod
    def _coerce_groups(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        return tuple(normalize_group_name(v) for v in value)


class Group(BaseModel):
    """A named group of plugins.

    The name is normalised on construction so that ``"Backend"``,
    ``" backend "`` and ``"backend"`` all denote the same group.
    """

    name: str
    options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("name", mode="before")
    @classmethod
    def _normalize_name(cls, value: Any) -> str:
        return normalize_group_name(value)

    @property
    def halt_on_failure(self) -> bool:
        """Whether a failed task stops the rest of this group's plugins."""
        return bool(self.options.get("halt_on_failure", False))

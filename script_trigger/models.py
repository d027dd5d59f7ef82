"""Data models for one polling cycle.

Key classes
-----------
TriggerConfig       — what to run and which exit code means "changed" (immutable)
Workload            — the job whose trigger is being polled (name, storage root, env)
ExecutionTarget     — where the script runs: the controller or a remote node agent
ExecutionOutcome    — exit code of one script source
TriggerCause        — why a downstream run was requested
PollResult          — tagged result of one cycle (changed / no change / failure)

``EnvironmentSnapshot`` is a plain ``dict[str, str]`` built fresh every cycle.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from script_trigger.exceptions import ScriptTriggerError

EnvironmentSnapshot = dict[str, str]

LOCAL_TARGET_NAME = "controller"


class TriggerConfig(BaseModel):
    """Trigger parameters supplied by the scheduler's configuration store.

    Empty strings are treated as "not set".  ``expected_exit_code`` is kept as
    text: a non-numeric value is only reported when a cycle resolves it, as a
    ``ConfigurationError``.
    """

    model_config = ConfigDict(frozen=True)

    inline_script: str | None = Field(
        default=None, description="Script text executed on the target."
    )
    script_file_path: str | None = Field(
        default=None, description="Path of a script file on the target."
    )
    expected_exit_code: str | None = Field(
        default=None, description="Exit code that means the condition is met. Default 0."
    )
    cron_tab_spec: str | None = Field(
        default=None, description="Polling schedule, owned and parsed by the scheduler."
    )

    @field_validator("expected_exit_code", mode="before")
    @classmethod
    def exit_code_as_text(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("*", mode="after")
    @classmethod
    def fix_empty(cls, v: str | None) -> str | None:
        if v == "":
            return None
        return v

    @property
    def has_script_source(self) -> bool:
        return self.inline_script is not None or self.script_file_path is not None


@dataclass
class Workload:
    """The job owning the trigger."""

    name: str
    root_dir: Path
    env: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.root_dir = Path(self.root_dir)


@dataclass
class ExecutionTarget:
    """Machine on which the script of a cycle runs.

    ``node_url`` set  → a remote node agent is called over HTTP.
    ``node_url`` None → the script runs on the controller itself.
    """

    name: str = LOCAL_TARGET_NAME
    root_path: str | None = None
    node_url: str | None = None
    env: dict[str, str] = field(default_factory=dict)

    @property
    def is_local(self) -> bool:
        return self.node_url is None

    @classmethod
    def local(cls, root_path: str | os.PathLike[str] | None = None) -> "ExecutionTarget":
        return cls(
            name=LOCAL_TARGET_NAME,
            root_path=str(root_path) if root_path is not None else None,
        )


@dataclass(frozen=True)
class ExecutionOutcome:
    exit_code: int


@dataclass(frozen=True)
class TriggerCause:
    """Handed to the downstream action when a cycle reports a change."""

    short_description: str = "[ScriptTrigger] - Poll with a shell or batch script"
    reason: str = "The script returns the expected code."


@dataclass
class PollResult:
    """Outcome of one polling cycle.

    Exactly one of three shapes:
      - changed:   ``changed=True``,  ``error=None``, ``cause`` set
      - no change: ``changed=False``, ``error=None``
      - failure:   ``changed=False``, ``error`` set
    """

    changed: bool
    lines: list[str] = field(default_factory=list)
    error: ScriptTriggerError | None = None
    cause: TriggerCause | None = None
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "changed": self.changed,
            "ok": self.ok,
            "error": self.error.message if self.error is not None else None,
            "cause": self.cause.short_description if self.cause is not None else None,
            "lines": list(self.lines),
            "duration_ms": self.duration_ms,
        }

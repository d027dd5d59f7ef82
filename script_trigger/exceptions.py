"""script-trigger — Exception hierarchy.

All exceptions raised by the engine inherit from ScriptTriggerError so that
the scheduler can catch the full family with a single except clause.

Hierarchy:
    ScriptTriggerError
    ├── ConfigurationError
    ├── InvalidArgumentError
    ├── ScriptNotFoundError
    └── RunnerError
        ├── ExecutionCancelledError
        ├── ExecutionTimeoutError
        └── RemoteNodeError

An exit code that differs from the expected one is *not* an error: it is
the normal "no change" outcome of a polling cycle.
"""

from __future__ import annotations

from typing import Any


class ScriptTriggerError(Exception):
    """Base exception for all script-trigger errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context})"

    def describe(self) -> str:
        """Human-readable description for the poll log."""
        return self.message


class ConfigurationError(ScriptTriggerError):
    """The trigger configuration is malformed (e.g. non-numeric exit code)."""


class InvalidArgumentError(ScriptTriggerError):
    """A required script body or path was not supplied by the caller."""


class ScriptNotFoundError(ScriptTriggerError):
    """The configured script file does not exist on the execution target."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"The script file path '{path}' doesn't exist.",
            context={"path": path},
        )
        self.path = path


class RunnerError(ScriptTriggerError):
    """Running the script failed (I/O, process spawn, transport, interruption)."""

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if cause is not None:
            ctx.setdefault("cause", str(cause))
        super().__init__(message, context=ctx)
        self.cause = cause

    def describe(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"


class ExecutionCancelledError(RunnerError):
    """The polling cycle was cancelled while waiting for the script."""


class ExecutionTimeoutError(RunnerError):
    """The script exceeded the configured runner timeout."""

    def __init__(self, command: list[str], timeout_seconds: float) -> None:
        super().__init__(
            f"Script timed out after {timeout_seconds}s",
            context={"command": command, "timeout_seconds": timeout_seconds},
        )
        self.timeout_seconds = timeout_seconds


class RemoteNodeError(RunnerError):
    """The remote node agent could not be reached or rejected a request."""

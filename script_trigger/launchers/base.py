"""Launcher — the command-execution capability of an execution target.

A launcher is created for one target and one polling cycle.  Every method
acts *on the target*: ``exists`` and ``read_lines`` look at the target's
filesystem, ``write_script`` creates the artifact there and ``launch`` runs
the command there.

Contract
--------
- ``is_unix``       — True when the target's path separator is ``:``
- ``root``          — working directory used for launched scripts
- ``exists(path)``  — does *path* exist on the target
- ``read_lines(path)`` — file content, line by line, without terminators
- ``write_script(content, extension)`` — create a temporary script, return its path
- ``launch(command, cwd, output, ...)`` — run and block until exit, return the status
- ``delete(path)``  — remove a script artifact (never raises)
- ``close()``       — release connections

Implementations raise ``RunnerError`` (or a subclass) for every I/O,
spawn, transport, timeout or cancellation failure.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from types import TracebackType

OutputListener = Callable[[str], None]
"""Receives the script's output, one line at a time, without terminator."""


class Launcher(ABC):
    """Abstract base for local and remote launchers."""

    @property
    @abstractmethod
    def is_unix(self) -> bool: ...

    @property
    @abstractmethod
    def root(self) -> str: ...

    @abstractmethod
    def exists(self, path: str) -> bool: ...

    @abstractmethod
    def read_lines(self, path: str) -> list[str]: ...

    @abstractmethod
    def write_script(self, content: str, extension: str) -> str: ...

    @abstractmethod
    def launch(
        self,
        command: list[str],
        cwd: str,
        output: OutputListener,
        cancel_event: threading.Event | None = None,
        timeout: float | None = None,
    ) -> int: ...

    @abstractmethod
    def delete(self, path: str) -> None: ...

    def close(self) -> None:
        """Release resources.  Default implementation does nothing."""

    def __enter__(self) -> "Launcher":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

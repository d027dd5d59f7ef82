"""ManagedProcess — a child process with buffered output and tree kill.

Shared by ``LocalLauncher`` (controller side) and the node agent (remote
side).  stdout and stderr are merged; a reader thread drains them into a
line buffer so that callers can poll output incrementally by offset while
waiting for exit.
"""

from __future__ import annotations

import subprocess
import threading
from collections.abc import Mapping

import psutil

from script_trigger.logging import get_logger

log = get_logger(__name__)


class ManagedProcess:
    """Start *command* in *cwd* and track it until exit.

    Raises ``OSError`` if the executable cannot be started.
    """

    def __init__(
        self,
        command: list[str],
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.command = list(command)
        self._lines: list[str] = []
        self._lock = threading.Lock()
        self._proc = subprocess.Popen(
            self.command,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
        self._reader = threading.Thread(
            target=self._pump, name=f"output_{self._proc.pid}", daemon=True
        )
        self._reader.start()
        log.debug("process_started", pid=self._proc.pid, command=self.command)

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def returncode(self) -> int | None:
        return self._proc.returncode

    def _pump(self) -> None:
        assert self._proc.stdout is not None
        with self._proc.stdout:
            for line in self._proc.stdout:
                with self._lock:
                    self._lines.append(line.rstrip("\r\n"))

    def read_output(self, offset: int = 0) -> tuple[list[str], int]:
        """Return the lines produced since *offset* and the new offset."""
        with self._lock:
            new = self._lines[offset:]
        return new, offset + len(new)

    def poll(self) -> int | None:
        """Exit code if the process has finished (output fully drained), else None."""
        code = self._proc.poll()
        if code is not None:
            self._reader.join()
        return code

    def wait(self, timeout: float | None = None) -> int | None:
        """Wait up to *timeout* seconds; return the exit code or None if still running."""
        try:
            code = self._proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            return None
        self._reader.join()
        return code

    def kill(self) -> None:
        """Kill the process and all of its descendants."""
        if self._proc.poll() is not None:
            return
        try:
            children = psutil.Process(self._proc.pid).children(recursive=True)
        except psutil.NoSuchProcess:
            children = []
        for child in children:
            try:
                child.kill()
            except psutil.NoSuchProcess:
                continue
        self._proc.kill()
        self._proc.wait()
        self._reader.join()
        log.debug("process_killed", pid=self._proc.pid, children=len(children))

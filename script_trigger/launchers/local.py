"""LocalLauncher — runs scripts on the controller itself."""

from __future__ import annotations

import os
import tempfile
import threading
import time
from pathlib import Path

from script_trigger.exceptions import (
    ExecutionCancelledError,
    ExecutionTimeoutError,
    RunnerError,
)
from script_trigger.launchers.base import Launcher, OutputListener
from script_trigger.launchers.process import ManagedProcess
from script_trigger.logging import get_logger

log = get_logger(__name__)


class LocalLauncher(Launcher):
    """Launcher for the controller machine.

    Args:
        root:          Working directory for scripts (created if missing).
                       Defaults to the current directory.
        poll_interval: Seconds between output / cancellation checks.
        temp_prefix:   File name prefix of script artifacts.
    """

    def __init__(
        self,
        root: str | os.PathLike[str] | None = None,
        poll_interval: float = 0.1,
        temp_prefix: str = "script_trigger",
    ) -> None:
        self._root = Path(root) if root is not None else Path.cwd()
        self._poll_interval = poll_interval
        self._temp_prefix = temp_prefix

    @property
    def is_unix(self) -> bool:
        return os.pathsep == ":"

    @property
    def root(self) -> str:
        return str(self._root)

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def read_lines(self, path: str) -> list[str]:
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                return [line.rstrip("\r\n") for line in f]
        except OSError as exc:
            raise RunnerError(f"Cannot read the script file '{path}'", cause=exc) from exc

    def write_script(self, content: str, extension: str) -> str:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            fd, path = tempfile.mkstemp(
                suffix=extension, prefix=self._temp_prefix, dir=self._root
            )
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as exc:
            raise RunnerError("Cannot write the script file", cause=exc) from exc
        return path

    def launch(
        self,
        command: list[str],
        cwd: str,
        output: OutputListener,
        cancel_event: threading.Event | None = None,
        timeout: float | None = None,
    ) -> int:
        try:
            process = ManagedProcess(command, cwd=cwd)
        except OSError as exc:
            raise RunnerError(f"Cannot start '{command[0]}'", cause=exc) from exc

        log.info("script_launched", pid=process.pid, command=command, cwd=cwd)
        deadline = time.monotonic() + timeout if timeout is not None else None
        offset = 0
        try:
            while True:
                code = process.wait(self._poll_interval)
                lines, offset = process.read_output(offset)
                for line in lines:
                    output(line)
                if code is not None:
                    log.info("script_exited", pid=process.pid, exit_code=code)
                    return code
                if cancel_event is not None and cancel_event.is_set():
                    raise ExecutionCancelledError(
                        "Script execution was interrupted",
                        context={"command": command},
                    )
                if deadline is not None and time.monotonic() > deadline:
                    raise ExecutionTimeoutError(command, timeout)  # type: ignore[arg-type]
        finally:
            if process.returncode is None:
                process.kill()

    def delete(self, path: str) -> None:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as exc:
            log.warning("script_cleanup_failed", path=path, error=str(exc))

"""ProcessTable — the scripts started through an agent, by process id."""

from __future__ import annotations

import threading
import time
import uuid
from collections.abc import Callable, Mapping

from script_trigger.launchers.process import ManagedProcess
from script_trigger.logging import get_logger

log = get_logger(__name__)


class ProcessTable:
    """Thread-safe registry of ManagedProcess instances.

    Entries live until the controller releases them (``remove``), the agent
    shuts down (``kill_all``) or, for a controller that never came back,
    until ``retention_seconds`` after the process was first seen finished.
    """

    def __init__(
        self,
        retention_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._processes: dict[str, ManagedProcess] = {}
        self._finished_at: dict[str, float] = {}
        self._retention = retention_seconds
        self._clock = clock
        self._lock = threading.Lock()

    def start(
        self,
        command: list[str],
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> tuple[str, ManagedProcess]:
        """Start *command*; raises ``OSError`` if it cannot be spawned."""
        self.evict_finished()
        process = ManagedProcess(command, cwd=cwd, env=env)
        process_id = uuid.uuid4().hex
        with self._lock:
            self._processes[process_id] = process
        log.info("agent_process_started", process_id=process_id, pid=process.pid)
        return process_id, process

    def get(self, process_id: str) -> ManagedProcess | None:
        with self._lock:
            return self._processes.get(process_id)

    def remove(self, process_id: str) -> bool:
        """Kill the process if it still runs and forget it."""
        with self._lock:
            process = self._processes.pop(process_id, None)
            self._finished_at.pop(process_id, None)
        if process is None:
            return False
        process.kill()
        log.info("agent_process_released", process_id=process_id, exit_code=process.returncode)
        return True

    def evict_finished(self) -> int:
        """Forget finished processes nobody released within the retention period."""
        now = self._clock()
        with self._lock:
            entries = list(self._processes.items())

        expired: list[str] = []
        for process_id, process in entries:
            if process.poll() is None:
                continue
            with self._lock:
                finished_at = self._finished_at.setdefault(process_id, now)
            if now - finished_at >= self._retention:
                expired.append(process_id)

        with self._lock:
            for process_id in expired:
                process = self._processes.pop(process_id, None)
                self._finished_at.pop(process_id, None)
                if process is not None:
                    log.info(
                        "agent_process_evicted",
                        process_id=process_id,
                        exit_code=process.returncode,
                    )
        return len(expired)

    def kill_all(self) -> None:
        with self._lock:
            process_ids = list(self._processes)
        for process_id in process_ids:
            self.remove(process_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._processes)

    def running(self) -> int:
        self.evict_finished()
        with self._lock:
            processes = list(self._processes.values())
        return sum(1 for p in processes if p.returncode is None)

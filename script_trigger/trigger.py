"""ScriptTrigger — the scheduler-facing polling entry point.

``poll()`` runs one cycle and always returns a ``PollResult``: engine errors
are captured as a failed result rather than raised, so that the scheduler
can record them and try again on its next tick.  Every cycle leaves a trace
in the persisted poll log, including failed ones.  A poll log that cannot
be written is reported on the operator log and does not change the result.
"""

from __future__ import annotations

import threading
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path

from script_trigger.config import Settings
from script_trigger.evaluator import ConditionEvaluator
from script_trigger.exceptions import ScriptTriggerError
from script_trigger.launchers.base import OutputListener
from script_trigger.logging import bind_poll_context, clear_poll_context, get_logger
from script_trigger.models import (
    ExecutionTarget,
    PollResult,
    TriggerCause,
    TriggerConfig,
    Workload,
)
from script_trigger.polllog import PollLog, PollLogFile

log = get_logger(__name__)


class ScriptTrigger:
    """A script trigger attached to one workload."""

    def __init__(
        self,
        config: TriggerConfig,
        workload: Workload,
        settings: Settings | None = None,
        evaluator: ConditionEvaluator | None = None,
        listener: OutputListener | None = None,
        trigger_id: str | None = None,
    ) -> None:
        self.config = config
        self.workload = workload
        self.trigger_id = trigger_id or str(uuid.uuid4())
        self._settings = settings or Settings()
        self._evaluator = evaluator or ConditionEvaluator(
            workload, settings=self._settings, listener=listener
        )

    @property
    def log_file(self) -> Path:
        return self.workload.root_dir / self._settings.polling.log_file_name

    def poll(
        self,
        target: ExecutionTarget,
        cancel_event: threading.Event | None = None,
    ) -> PollResult:
        """Run one polling cycle on *target*."""
        started_at = datetime.now(timezone.utc)
        start = time.monotonic()
        poll_log = PollLog()

        bind_poll_context(
            trigger_id=self.trigger_id, workload=self.workload.name, target=target.name
        )
        log.info("poll_started")
        poll_log.info(f"Polling for the job {self.workload.name}")
        poll_log.info(f"Polling on {target.name}")

        try:
            changed = self._evaluator.evaluate(
                target, self.config, poll_log, cancel_event=cancel_event
            )
        except ScriptTriggerError as exc:
            description = exc.describe()
            poll_log.info(f"Polling error: {description}")
            log.warning("poll_failed", error_type=type(exc).__name__, error=description)
            result = PollResult(changed=False, error=exc)
        else:
            if changed:
                poll_log.info("The script returns the expected code. Scheduling a build.")
                result = PollResult(changed=True, cause=TriggerCause())
            else:
                poll_log.info(
                    "No changes. The script doesn't return the expected code "
                    "or it can't be evaluated."
                )
                result = PollResult(changed=False)
        finally:
            clear_poll_context()

        poll_log.info("Polling complete.")
        result.lines = poll_log.lines
        result.duration_ms = round((time.monotonic() - start) * 1000, 2)
        log.info(
            "poll_complete",
            trigger_id=self.trigger_id,
            changed=result.changed,
            ok=result.ok,
            duration_ms=result.duration_ms,
        )

        if self._settings.polling.persist_log:
            self._persist(result, started_at)
        return result

    def _persist(self, result: PollResult, started_at: datetime) -> None:
        # The decision stands even when its trace cannot be written.
        try:
            PollLogFile(self.log_file).append(result.lines, started_at=started_at)
        except OSError as exc:
            log.error(
                "poll_log_persist_failed",
                trigger_id=self.trigger_id,
                path=str(self.log_file),
                changed=result.changed,
                error=str(exc),
            )

"""Poll log — the user-facing decision trace of a polling cycle.

``PollLog`` collects the human-readable lines of one cycle in memory; the
caller persists them with ``PollLogFile`` (append-only, one file per
workload, never truncated here).
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone
from pathlib import Path

from script_trigger.logging import get_logger

log = get_logger(__name__)


class PollLog:
    """Append-only sequence of decision lines for one cycle.

    Lines carry no timestamp so that identical inputs yield identical logs.
    """

    def __init__(self) -> None:
        self._lines: list[str] = []

    def info(self, message: str) -> None:
        self._lines.append(message)
        log.debug("poll_log_line", line=message)

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._lines))


class PollLogFile:
    """Appends poll logs to ``<workload-root>/<file name>``."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def append(self, lines: list[str], started_at: datetime | None = None) -> None:
        """Append one cycle, preceded by a header line with its start time."""
        started_at = started_at or datetime.now(timezone.utc)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as f:
            f.write(f"Polling started on {started_at.isoformat(timespec='seconds')}\n")
            for line in lines:
                f.write(line)
                f.write("\n")

    def read(self) -> str:
        """Return the persisted log, or an empty string if nothing was written yet."""
        if not self._path.exists():
            return ""
        return self._path.read_text(encoding="utf-8", errors="replace")

"""Shared pytest fixtures for the script-trigger test suite."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from script_trigger.config import Settings
from script_trigger.environment import DefaultEnvironmentProvider
from script_trigger.evaluator import ConditionEvaluator
from script_trigger.exceptions import ScriptNotFoundError
from script_trigger.launchers.base import Launcher, OutputListener
from script_trigger.models import ExecutionTarget, Workload

# ---------------------------------------------------------------------------
# In-memory launcher
# ---------------------------------------------------------------------------


class FakeLauncher(Launcher):
    """Launcher that records every call and returns scripted exit codes.

    ``exit_codes`` are consumed one per ``launch``; once exhausted, 0 is
    returned.  ``files`` maps a target path to its lines.  ``launch_error``
    is raised by ``launch`` when set.
    """

    def __init__(
        self,
        exit_codes: list[int] | None = None,
        files: dict[str, list[str]] | None = None,
        is_unix: bool = True,
        root: str = "/work",
        launch_error: Exception | None = None,
    ) -> None:
        self.exit_codes = list(exit_codes or [])
        self.files = dict(files or {})
        self.launch_error = launch_error
        self.calls: list[tuple[str, str]] = []
        self.scripts: dict[str, str] = {}
        self.launched: list[tuple[list[str], str]] = []
        self.deleted: list[str] = []
        self.closed = False
        self._is_unix = is_unix
        self._root = root

    @property
    def is_unix(self) -> bool:
        return self._is_unix

    @property
    def root(self) -> str:
        return self._root

    def exists(self, path: str) -> bool:
        self.calls.append(("exists", path))
        return path in self.files

    def read_lines(self, path: str) -> list[str]:
        self.calls.append(("read_lines", path))
        if path not in self.files:
            raise ScriptNotFoundError(path)
        return list(self.files[path])

    def write_script(self, content: str, extension: str) -> str:
        path = f"{self._root}/script{len(self.scripts)}{extension}"
        self.scripts[path] = content
        self.calls.append(("write_script", path))
        return path

    def launch(
        self,
        command: list[str],
        cwd: str,
        output: OutputListener,
        cancel_event: threading.Event | None = None,
        timeout: float | None = None,
    ) -> int:
        self.launched.append((command, cwd))
        self.calls.append(("launch", command[-1]))
        if self.launch_error is not None:
            raise self.launch_error
        output(f"running {command[-1]}")
        return self.exit_codes.pop(0) if self.exit_codes else 0

    def delete(self, path: str) -> None:
        self.deleted.append(path)

    def close(self) -> None:
        self.closed = True

    @property
    def executed_scripts(self) -> list[str]:
        """Content of every launched script, in launch order."""
        return [self.scripts[command[-1]] for command, _ in self.launched]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        logging={"level": "debug", "format": "console"},
        runner={"poll_interval_seconds": 0.02},
        remote={"poll_interval_seconds": 0.02},
        agent={"root": str(tmp_path / "agent"), "node_name": "test-node"},
    )


@pytest.fixture
def workload(tmp_path: Path) -> Workload:
    return Workload(name="nightly", root_dir=tmp_path / "jobs" / "nightly", env={"FOO": "bar"})


@pytest.fixture
def target() -> ExecutionTarget:
    return ExecutionTarget(name="node-1", root_path="/work", env={"NODE_VAR": "n1"})


@pytest.fixture
def make_launcher():  # type: ignore[no-untyped-def]
    """Return the FakeLauncher class, to be called with per-test exit codes and files."""
    return FakeLauncher


@pytest.fixture
def make_evaluator(workload: Workload, settings: Settings):  # type: ignore[no-untyped-def]
    """Build a ConditionEvaluator wired to a given FakeLauncher."""

    def _make(launcher: Launcher) -> ConditionEvaluator:
        return ConditionEvaluator(
            workload,
            settings=settings,
            environment_provider=DefaultEnvironmentProvider(include_process_env=False),
            launcher_factory=lambda _target: launcher,
        )

    return _make

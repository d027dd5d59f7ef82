"""Integration tests — LocalLauncher."""

from __future__ import annotations

import os
import threading
import time
from pathlib import Path

import pytest

from script_trigger.exceptions import (
    ExecutionCancelledError,
    ExecutionTimeoutError,
    RunnerError,
)
from script_trigger.launchers.local import LocalLauncher

posix_only = pytest.mark.skipif(os.name != "posix", reason="uses sh")


@pytest.fixture
def launcher(tmp_path: Path) -> LocalLauncher:
    return LocalLauncher(root=tmp_path / "work", poll_interval=0.02)


@pytest.mark.unit
class TestFilesystem:
    def test_root(self, launcher: LocalLauncher, tmp_path: Path) -> None:
        assert launcher.root == str(tmp_path / "work")
        assert launcher.is_unix is (os.pathsep == ":")

    def test_exists(self, launcher: LocalLauncher, tmp_path: Path) -> None:
        existing = tmp_path / "check.sh"
        existing.write_text("exit 0")
        assert launcher.exists(str(existing)) is True
        assert launcher.exists(str(tmp_path / "missing.sh")) is False

    def test_read_lines_strips_terminators(self, launcher: LocalLauncher, tmp_path: Path) -> None:
        script = tmp_path / "crlf.sh"
        script.write_bytes(b"echo a\r\necho b\nexit 0")
        assert launcher.read_lines(str(script)) == ["echo a", "echo b", "exit 0"]

    def test_read_lines_error(self, launcher: LocalLauncher, tmp_path: Path) -> None:
        with pytest.raises(RunnerError, match="Cannot read the script file"):
            launcher.read_lines(str(tmp_path))

    def test_write_script_in_root(self, launcher: LocalLauncher, tmp_path: Path) -> None:
        path = Path(launcher.write_script("exit 0\r\n", ".bat"))
        assert path.parent == tmp_path / "work"
        assert path.name.startswith("script_trigger")
        assert path.suffix == ".bat"
        assert path.read_bytes() == b"exit 0\r\n"

    def test_delete(self, launcher: LocalLauncher) -> None:
        path = launcher.write_script("x", ".sh")
        launcher.delete(path)
        assert not Path(path).exists()
        launcher.delete(path)

    def test_context_manager(self, tmp_path: Path) -> None:
        with LocalLauncher(root=tmp_path) as launcher:
            assert launcher.root == str(tmp_path)


@pytest.mark.integration
@posix_only
class TestLaunch:
    def test_exit_code_and_output(self, launcher: LocalLauncher, tmp_path: Path) -> None:
        lines: list[str] = []
        code = launcher.launch(
            ["sh", "-c", "echo hello; exit 3"], cwd=str(tmp_path), output=lines.append
        )
        assert code == 3
        assert lines == ["hello"]

    def test_runs_written_script(self, launcher: LocalLauncher, tmp_path: Path) -> None:
        path = launcher.write_script("echo from-file\nexit 5", ".sh")
        lines: list[str] = []
        assert launcher.launch(["sh", path], cwd=str(tmp_path), output=lines.append) == 5
        assert lines == ["from-file"]

    def test_missing_executable(self, launcher: LocalLauncher, tmp_path: Path) -> None:
        with pytest.raises(RunnerError, match="Cannot start '/nonexistent/sh-xyz'"):
            launcher.launch(["/nonexistent/sh-xyz"], cwd=str(tmp_path), output=lambda _l: None)

    def test_cancel(self, launcher: LocalLauncher, tmp_path: Path) -> None:
        cancel = threading.Event()
        timer = threading.Timer(0.2, cancel.set)
        timer.start()
        start = time.monotonic()
        try:
            with pytest.raises(ExecutionCancelledError):
                launcher.launch(
                    ["sh", "-c", "sleep 30"],
                    cwd=str(tmp_path),
                    output=lambda _l: None,
                    cancel_event=cancel,
                )
        finally:
            timer.cancel()
        assert time.monotonic() - start < 10

    def test_timeout(self, launcher: LocalLauncher, tmp_path: Path) -> None:
        with pytest.raises(ExecutionTimeoutError) as exc_info:
            launcher.launch(
                ["sh", "-c", "sleep 30"], cwd=str(tmp_path), output=lambda _l: None, timeout=0.2
            )
        assert exc_info.value.timeout_seconds == 0.2

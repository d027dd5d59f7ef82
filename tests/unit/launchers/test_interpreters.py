"""Unit tests — Shell / BatchFile interpreters."""

from __future__ import annotations

import pytest

from script_trigger.config import RunnerConfig
from script_trigger.launchers.interpreters import BatchFile, Shell, interpreter_for


@pytest.mark.unit
class TestShell:
    def test_default_command_line(self) -> None:
        shell = Shell("exit 0")
        assert shell.extension == ".sh"
        assert shell.script_content() == "exit 0"
        assert shell.build_command_line("/tmp/a.sh") == ["sh", "-xe", "/tmp/a.sh"]

    def test_configured_shell(self) -> None:
        shell = Shell("exit 0", RunnerConfig(shell="bash", shell_flags=[]))
        assert shell.build_command_line("/tmp/a.sh") == ["bash", "/tmp/a.sh"]

    def test_shebang_interpreter(self) -> None:
        shell = Shell("#!/usr/bin/env python3 -u\nprint('x')")
        assert shell.build_command_line("/tmp/a.sh") == [
            "/usr/bin/env",
            "python3",
            "-u",
            "/tmp/a.sh",
        ]

    def test_empty_shebang_falls_back_to_shell(self) -> None:
        assert Shell("#!\necho").build_command_line("/a.sh") == ["sh", "-xe", "/a.sh"]


@pytest.mark.unit
class TestBatchFile:
    def test_exit_errorlevel_appended(self) -> None:
        batch = BatchFile("dir")
        assert batch.extension == ".bat"
        assert batch.script_content() == "dir\r\nexit %ERRORLEVEL%"

    def test_command_line(self) -> None:
        assert BatchFile("dir").build_command_line("C:\\w\\a.bat") == [
            "cmd",
            "/c",
            "call",
            "C:\\w\\a.bat",
        ]


@pytest.mark.unit
class TestInterpreterFor:
    def test_unix(self) -> None:
        assert isinstance(interpreter_for(True, "x"), Shell)

    def test_windows(self) -> None:
        assert isinstance(interpreter_for(False, "x"), BatchFile)

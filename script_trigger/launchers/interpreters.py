"""Command interpreters — how a script artifact is written and invoked.

``Shell`` is used on targets whose path separator is ``:`` (POSIX), and
``BatchFile`` everywhere else.
"""

from __future__ import annotations

import shlex
from abc import ABC, abstractmethod

from script_trigger.config import RunnerConfig


class CommandInterpreter(ABC):
    extension: str = ""

    def __init__(self, content: str, config: RunnerConfig | None = None) -> None:
        self.content = content
        self._config = config or RunnerConfig()

    @abstractmethod
    def script_content(self) -> str:
        """Text written to the script artifact."""

    @abstractmethod
    def build_command_line(self, script_path: str) -> list[str]:
        """Argv that runs the artifact stored at *script_path* on the target."""


class Shell(CommandInterpreter):
    extension = ".sh"

    def script_content(self) -> str:
        return self.content

    def build_command_line(self, script_path: str) -> list[str]:
        if self.content.startswith("#!"):
            first_line = self.content.splitlines()[0]
            interpreter = shlex.split(first_line[2:].strip())
            if interpreter:
                return [*interpreter, script_path]
        return [self._config.shell, *self._config.shell_flags, script_path]


class BatchFile(CommandInterpreter):
    extension = ".bat"

    def script_content(self) -> str:
        return self.content + "\r\nexit %ERRORLEVEL%"

    def build_command_line(self, script_path: str) -> list[str]:
        return [*self._config.batch_command, script_path]


def interpreter_for(
    is_unix: bool, content: str, config: RunnerConfig | None = None
) -> CommandInterpreter:
    if is_unix:
        return Shell(content, config)
    return BatchFile(content, config)

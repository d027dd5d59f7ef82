"""Remote Script Runner — executes one script source on a target.

The runner is bound to one target (through its launcher) for one polling
cycle.  Its logic is identical for local and remote targets: only where the
file lookup and the process spawn happen differs, and that is the
launcher's business.
"""

from __future__ import annotations

import threading

from script_trigger.config import RunnerConfig
from script_trigger.exceptions import InvalidArgumentError, ScriptNotFoundError
from script_trigger.launchers.base import Launcher, OutputListener
from script_trigger.launchers.interpreters import interpreter_for
from script_trigger.logging import get_logger
from script_trigger.macros import replace_macro
from script_trigger.models import EnvironmentSnapshot, ExecutionTarget
from script_trigger.polllog import PollLog

log = get_logger(__name__)


def _log_output(line: str) -> None:
    log.debug("script_output", line=line)


class RemoteScriptRunner:
    """Run inline scripts or script files and return their exit code.

    Args:
        target:       The execution target of the cycle.
        launcher:     Command-execution capability for *target*.
        poll_log:     Decision log of the cycle.
        listener:     Receives script output lines.  Defaults to debug logging.
        config:       Runner settings (interpreters, timeout, flattening).
        cancel_event: Set by the scheduler to interrupt a running script.
    """

    def __init__(
        self,
        target: ExecutionTarget,
        launcher: Launcher,
        poll_log: PollLog,
        listener: OutputListener | None = None,
        config: RunnerConfig | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._target = target
        self._launcher = launcher
        self._poll_log = poll_log
        self._listener = listener or _log_output
        self._config = config or RunnerConfig()
        self._cancel_event = cancel_event

    def run_inline(self, script_body: str | None, env: EnvironmentSnapshot) -> int:
        """Resolve ``${VAR}`` macros in *script_body*, run it, return the exit code.

        Raises:
            InvalidArgumentError: *script_body* is None or empty.
            RunnerError: The script could not be written, started or awaited.
        """
        if not script_body:
            raise InvalidArgumentError("A script content must be set.")
        return self._run_content(script_body, env)

    def run_path(self, path: str | None, env: EnvironmentSnapshot) -> int:
        """Read the script file at *path* on the target and run its content.

        Raises:
            InvalidArgumentError: *path* is None or empty.
            ScriptNotFoundError: *path* does not exist on the target.
            RunnerError: The file could not be read or the script failed to run.
        """
        if not path:
            raise InvalidArgumentError("The script file path must be set.")

        if not self._launcher.exists(path):
            self._poll_log.info(f"Can't load the file '{path}'. It doesn't exist.")
            raise ScriptNotFoundError(path)

        lines = self._launcher.read_lines(path)
        separator = "" if self._config.flatten_script_files else "\n"
        return self._run_content(separator.join(lines), env)

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _run_content(self, content: str, env: EnvironmentSnapshot) -> int:
        self._poll_log.info("Resolving environment variables for the script content.")
        resolved = replace_macro(content, env)

        self._poll_log.info(f"Evaluating the script: \n {resolved}")
        interpreter = interpreter_for(self._launcher.is_unix, resolved, self._config)
        script_path = self._launcher.write_script(
            interpreter.script_content(), interpreter.extension
        )
        try:
            command = interpreter.build_command_line(script_path)
            cwd = self._target.root_path or self._launcher.root
            return self._launcher.launch(
                command,
                cwd=cwd,
                output=self._listener,
                cancel_event=self._cancel_event,
                timeout=self._config.timeout_seconds,
            )
        finally:
            self._launcher.delete(script_path)

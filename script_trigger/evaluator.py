"""Condition Evaluator — one polling cycle of a script trigger.

Order of evaluation::

    expected code → environment snapshot → inline script → script file

The first source whose exit code equals the expected code wins; later
sources are not run.  Nothing configured, or nothing matching, is the normal
"no change" outcome and returns False.  Configuration and execution problems
are raised as ``ScriptTriggerError`` subclasses and never reported as False.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Callable

from script_trigger.config import Settings
from script_trigger.environment import DefaultEnvironmentProvider, EnvironmentProvider
from script_trigger.exceptions import ConfigurationError
from script_trigger.launchers.base import Launcher, OutputListener
from script_trigger.launchers.factory import LauncherFactory
from script_trigger.logging import get_logger
from script_trigger.models import ExecutionOutcome, ExecutionTarget, TriggerConfig, Workload
from script_trigger.polllog import PollLog
from script_trigger.runner import RemoteScriptRunner

log = get_logger(__name__)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

DEFAULT_EXPECTED_EXIT_CODE = 0


def resolve_expected_exit_code(value: str | None) -> int:
    """Parse the configured exit code; unset means 0.

    Raises:
        ConfigurationError: *value* is not a base-10 integer.
    """
    if value is None:
        return DEFAULT_EXPECTED_EXIT_CODE
    if not _INTEGER_RE.fullmatch(value):
        raise ConfigurationError(
            f"The given exit code must be a numeric value. The given value is '{value}'.",
            context={"expected_exit_code": value},
        )
    return int(value)


class ConditionEvaluator:
    """Decides whether the trigger condition of *workload* is met.

    Args:
        workload:             The job owning the trigger.
        settings:             Runner / remote settings.  Defaults to built-ins.
        environment_provider: Builds the per-cycle environment snapshot.
        launcher_factory:     Maps a target to its Launcher.
        listener:             Receives script output lines.
    """

    def __init__(
        self,
        workload: Workload,
        settings: Settings | None = None,
        environment_provider: EnvironmentProvider | None = None,
        launcher_factory: Callable[[ExecutionTarget], Launcher] | None = None,
        listener: OutputListener | None = None,
    ) -> None:
        self._workload = workload
        self._settings = settings or Settings()
        self._environment_provider = environment_provider or DefaultEnvironmentProvider()
        self._launcher_factory = launcher_factory or LauncherFactory(self._settings)
        self._listener = listener

    def evaluate(
        self,
        target: ExecutionTarget,
        config: TriggerConfig,
        poll_log: PollLog,
        cancel_event: threading.Event | None = None,
    ) -> bool:
        """Run the configured scripts on *target*; True if one returns the expected code.

        Raises:
            ConfigurationError: The expected exit code is not numeric.
            ScriptNotFoundError: The script file does not exist on the target.
            RunnerError: A script could not be executed.
        """
        expected = resolve_expected_exit_code(config.expected_exit_code)
        poll_log.info(f"The expected script execution code is {expected}")

        env = self._environment_provider.get_env_vars(self._workload, target, poll_log)

        if not config.has_script_source:
            log.info("no_script_configured", workload=self._workload.name)
            return False

        with self._launcher_factory(target) as launcher:
            runner = RemoteScriptRunner(
                target,
                launcher,
                poll_log,
                listener=self._listener,
                config=self._settings.runner,
                cancel_event=cancel_event,
            )

            if config.inline_script is not None:
                outcome = ExecutionOutcome(runner.run_inline(config.inline_script, env))
                if self._test_expected_exit_code(outcome, expected, poll_log):
                    return True

            if config.script_file_path is not None:
                outcome = ExecutionOutcome(runner.run_path(config.script_file_path, env))
                if self._test_expected_exit_code(outcome, expected, poll_log):
                    return True

        return False

    @staticmethod
    def _test_expected_exit_code(
        outcome: ExecutionOutcome, expected: int, poll_log: PollLog
    ) -> bool:
        poll_log.info(f"The exit code is '{outcome.exit_code}'.")
        poll_log.info(f"Testing if the script execution code returns '{expected}'.")
        return outcome.exit_code == expected

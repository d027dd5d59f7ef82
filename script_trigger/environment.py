"""Environment providers — build the per-cycle ``EnvironmentSnapshot``.

The snapshot only feeds ``${VAR}`` substitution in script text; the script
process itself inherits the environment of wherever it runs.
"""

from __future__ import annotations

import os
from typing import Protocol, runtime_checkable

from script_trigger.logging import get_logger
from script_trigger.models import EnvironmentSnapshot, ExecutionTarget, Workload
from script_trigger.polllog import PollLog

log = get_logger(__name__)


@runtime_checkable
class EnvironmentProvider(Protocol):
    def get_env_vars(
        self, workload: Workload, target: ExecutionTarget, poll_log: PollLog
    ) -> EnvironmentSnapshot:
        ...


class DefaultEnvironmentProvider:
    """Merge environment layers, later ones winning.

    1. The controller process environment, for local targets only
       (``include_process_env``).
    2. The target's node-level variables.
    3. The workload's variables.
    4. ``JOB_NAME``, ``NODE_NAME`` and, when the target has one, ``WORKSPACE``.
    """

    def __init__(self, include_process_env: bool = True) -> None:
        self._include_process_env = include_process_env

    def get_env_vars(
        self, workload: Workload, target: ExecutionTarget, poll_log: PollLog
    ) -> EnvironmentSnapshot:
        env: EnvironmentSnapshot = {}
        if self._include_process_env and target.is_local:
            env.update(os.environ)
        env.update(target.env)
        env.update(workload.env)
        env["JOB_NAME"] = workload.name
        env["NODE_NAME"] = target.name
        if target.root_path:
            env["WORKSPACE"] = target.root_path

        log.debug("environment_built", variables=len(env), target_local=target.is_local)
        return env

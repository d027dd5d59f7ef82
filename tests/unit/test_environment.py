"""Unit tests — DefaultEnvironmentProvider."""

from __future__ import annotations

import pytest

from script_trigger.environment import DefaultEnvironmentProvider, EnvironmentProvider
from script_trigger.models import ExecutionTarget, Workload
from script_trigger.polllog import PollLog


@pytest.mark.unit
class TestDefaultEnvironmentProvider:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(DefaultEnvironmentProvider(), EnvironmentProvider)

    def test_layers_and_builtins(self, workload: Workload, target: ExecutionTarget) -> None:
        env = DefaultEnvironmentProvider(include_process_env=False).get_env_vars(
            workload, target, PollLog()
        )
        assert env == {
            "NODE_VAR": "n1",
            "FOO": "bar",
            "JOB_NAME": "nightly",
            "NODE_NAME": "node-1",
            "WORKSPACE": "/work",
        }

    def test_workload_overrides_target(self, workload: Workload) -> None:
        target = ExecutionTarget(name="n", env={"FOO": "from-node"})
        env = DefaultEnvironmentProvider(include_process_env=False).get_env_vars(
            workload, target, PollLog()
        )
        assert env["FOO"] == "bar"
        assert "WORKSPACE" not in env

    def test_process_env_for_local_target(
        self, workload: Workload, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ST_TEST_PROCESS_VAR", "yes")
        env = DefaultEnvironmentProvider().get_env_vars(
            workload, ExecutionTarget.local(), PollLog()
        )
        assert env["ST_TEST_PROCESS_VAR"] == "yes"

    def test_process_env_not_leaked_to_remote_target(
        self, workload: Workload, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ST_TEST_PROCESS_VAR", "yes")
        target = ExecutionTarget(name="remote", node_url="http://node:40100")
        env = DefaultEnvironmentProvider().get_env_vars(workload, target, PollLog())
        assert "ST_TEST_PROCESS_VAR" not in env

    def test_snapshot_is_fresh_each_call(self, workload: Workload, target: ExecutionTarget) -> None:
        provider = DefaultEnvironmentProvider(include_process_env=False)
        first = provider.get_env_vars(workload, target, PollLog())
        first["FOO"] = "mutated"
        second = provider.get_env_vars(workload, target, PollLog())
        assert second["FOO"] == "bar"

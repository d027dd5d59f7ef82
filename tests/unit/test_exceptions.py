"""Unit tests — exception hierarchy."""

from __future__ import annotations

import pytest

from script_trigger.exceptions import (
    ConfigurationError,
    ExecutionCancelledError,
    ExecutionTimeoutError,
    InvalidArgumentError,
    RemoteNodeError,
    RunnerError,
    ScriptNotFoundError,
    ScriptTriggerError,
)


@pytest.mark.unit
class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_cls",
        [ConfigurationError, InvalidArgumentError, ScriptNotFoundError, RunnerError],
    )
    def test_family(self, exc_cls: type) -> None:
        assert issubclass(exc_cls, ScriptTriggerError)

    @pytest.mark.parametrize(
        "exc_cls", [ExecutionCancelledError, ExecutionTimeoutError, RemoteNodeError]
    )
    def test_runner_family(self, exc_cls: type) -> None:
        assert issubclass(exc_cls, RunnerError)


@pytest.mark.unit
class TestMessages:
    def test_script_not_found(self) -> None:
        exc = ScriptNotFoundError("/opt/check.sh")
        assert str(exc) == "The script file path '/opt/check.sh' doesn't exist."
        assert exc.context == {"path": "/opt/check.sh"}

    def test_runner_error_describe_includes_cause(self) -> None:
        exc = RunnerError("Cannot start 'sh'", cause=FileNotFoundError("no such file"))
        assert exc.describe() == "Cannot start 'sh': no such file"
        assert exc.context["cause"] == "no such file"

    def test_runner_error_without_cause(self) -> None:
        assert RunnerError("boom").describe() == "boom"

    def test_timeout(self) -> None:
        exc = ExecutionTimeoutError(["sh", "x.sh"], 1.5)
        assert exc.timeout_seconds == 1.5
        assert "1.5s" in exc.message

    def test_repr(self) -> None:
        exc = ConfigurationError("bad", context={"k": "v"})
        assert repr(exc) == "ConfigurationError('bad', context={'k': 'v'})"

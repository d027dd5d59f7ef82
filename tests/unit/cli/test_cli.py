"""Unit tests — CLI commands via typer CliRunner."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest
from typer.testing import CliRunner

from script_trigger.cli.main import app

runner = CliRunner()

posix_only = pytest.mark.skipif(os.name != "posix", reason="uses sh")


@pytest.fixture(autouse=True)
def _no_logging_setup():  # type: ignore[no-untyped-def]
    # CliRunner swaps the std streams; keep stdlib handlers off them.
    with patch("script_trigger.logging.configure_logging"), patch(
        "script_trigger.agent.server.configure_logging"
    ):
        yield


@pytest.mark.unit
class TestHelp:
    def test_root_help(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "poll" in result.output
        assert "agent" in result.output

    def test_poll_help(self) -> None:
        result = runner.invoke(app, ["poll", "--help"])
        assert result.exit_code == 0
        assert "--script-file" in result.output


@pytest.mark.unit
class TestPoll:
    def test_nothing_configured_is_no_change(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["poll", "--workload-root", str(tmp_path), "--root", str(tmp_path)])
        assert result.exit_code == 1
        assert "The expected script execution code is 0" in result.output
        assert "no change" in result.output

    def test_bad_exit_code_is_failure(self, tmp_path: Path) -> None:
        result = runner.invoke(
            app,
            ["poll", "-s", "true", "-e", "abc", "--workload-root", str(tmp_path), "--root", str(tmp_path)],
        )
        assert result.exit_code == 2
        assert "Polling failed:" in result.output
        assert "must be a numeric value" in result.output

    def test_missing_script_file_is_failure(self, tmp_path: Path) -> None:
        missing = tmp_path / "missing.sh"
        result = runner.invoke(
            app,
            ["poll", "-f", str(missing), "--workload-root", str(tmp_path), "--root", str(tmp_path)],
        )
        assert result.exit_code == 2
        assert "doesn't exist" in result.output

    def test_bad_env_pair(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["poll", "--env", "NOEQUALS", "--workload-root", str(tmp_path)])
        assert result.exit_code == 2
        assert not (tmp_path / "scriptTrigger-polling.log").exists()

    @posix_only
    def test_changed(self, tmp_path: Path) -> None:
        result = runner.invoke(
            app,
            [
                "poll",
                "-s",
                "echo ${GREETING}",
                "--env",
                "GREETING=hello",
                "--workload-name",
                "nightly",
                "--workload-root",
                str(tmp_path),
                "--root",
                str(tmp_path),
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Polling for the job nightly" in result.output
        assert "hello" in result.output
        assert "changed" in result.output
        assert "Polling complete." in (tmp_path / "scriptTrigger-polling.log").read_text()

    @posix_only
    def test_expected_code_mismatch(self, tmp_path: Path) -> None:
        script = tmp_path / "check.sh"
        script.write_text("exit 3\n")
        result = runner.invoke(
            app,
            ["poll", "-f", str(script), "-e", "4", "-q", "--workload-root", str(tmp_path), "--root", str(tmp_path)],
        )
        assert result.exit_code == 1
        assert "The exit code is '3'." in result.output


@pytest.mark.unit
class TestLogShow:
    def test_show(self, tmp_path: Path) -> None:
        (tmp_path / "scriptTrigger-polling.log").write_text("Polling started on x\nPolling complete.\n")
        result = runner.invoke(app, ["log", "show", "--workload-root", str(tmp_path)])
        assert result.exit_code == 0
        assert "Polling complete." in result.output

    def test_missing_log(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["log", "show", "--workload-root", str(tmp_path)])
        assert result.exit_code == 1
        assert "No poll log" in result.output


@pytest.mark.unit
class TestAgentCommands:
    def test_status(self) -> None:
        response = MagicMock()
        response.json.return_value = {"status": "ok", "node_name": "node-3"}
        with patch("httpx.get", return_value=response) as get:
            result = runner.invoke(app, ["agent", "status", "--url", "http://node-3:40100/"])

        assert result.exit_code == 0
        get.assert_called_once_with("http://node-3:40100/health", timeout=5.0)
        assert "node-3" in result.output

    def test_status_unreachable(self) -> None:
        with patch("httpx.get", side_effect=httpx.ConnectError("refused")):
            result = runner.invoke(app, ["agent", "status"])
        assert result.exit_code == 1
        assert "Agent unreachable" in result.output

    def test_start(self, tmp_path: Path) -> None:
        with patch("script_trigger.cli.commands.agent.uvicorn.run") as run:
            result = runner.invoke(
                app,
                ["agent", "start", "--port", "40123", "--root", str(tmp_path), "--node-name", "n7"],
            )

        assert result.exit_code == 0, result.output
        run.assert_called_once()
        kwargs = run.call_args.kwargs
        assert kwargs["port"] == 40123
        assert kwargs["host"] == "127.0.0.1"
        fastapi_app = run.call_args.args[0]
        assert fastapi_app.state.settings.agent.node_name == "n7"
        assert fastapi_app.state.settings.agent.root == tmp_path

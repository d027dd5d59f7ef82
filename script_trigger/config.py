"""script-trigger — Configuration.

Configuration is loaded from (in order of increasing priority):
    1. Built-in defaults (this file)
    2. Environment variables prefixed with SCRIPT_TRIGGER_
       (``SCRIPT_TRIGGER_RUNNER__TIMEOUT_SECONDS=60``)
    3. System config: /etc/script-trigger/config.yaml
    4. User config:   ~/.script-trigger/config.yaml
    5. An explicit ``--config`` file

A top-level block found in a YAML file replaces the same block coming from
the environment.

There is no module-level settings singleton: the CLI calls
``Settings.load()`` once and passes the instance down to the components
that need it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_POLLING_LOG_FILE_NAME = "scriptTrigger-polling.log"


# ---------------------------------------------------------------------------
# Sub-configuration blocks
# ---------------------------------------------------------------------------


class RunnerConfig(BaseModel):
    """How scripts are materialised and executed on a target."""

    shell: str = Field(
        default="sh",
        description="Shell used for scripts on POSIX targets (unless the script has a #! line).",
    )
    shell_flags: list[str] = Field(
        default_factory=lambda: ["-xe"],
        description="Flags passed to the shell before the script path.",
    )
    batch_command: list[str] = Field(
        default_factory=lambda: ["cmd", "/c", "call"],
        description="Command prefix used for batch scripts on non-POSIX targets.",
    )
    timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Kill the script after this many seconds. None = wait for exit.",
    )
    poll_interval_seconds: Annotated[float, Field(gt=0, le=10)] = Field(
        default=0.1,
        description="How often a running script is checked for output, exit and cancellation.",
    )
    flatten_script_files: bool = Field(
        default=True,
        description=(
            "Join the lines of file-based scripts without separators (historical "
            "behaviour). Set to false to keep line breaks."
        ),
    )
    temp_prefix: str = Field(
        default="script_trigger",
        description="File name prefix of the temporary script artifacts.",
    )


class PollingConfig(BaseModel):
    log_file_name: str = DEFAULT_POLLING_LOG_FILE_NAME
    persist_log: bool = Field(
        default=True,
        description="Append every cycle's poll log to <workload-root>/<log_file_name>.",
    )


class RemoteConfig(BaseModel):
    """Client side of the node agent RPC."""

    api_token: str | None = Field(
        default=None,
        description="Token sent in X-Script-Trigger-Token to node agents.",
    )
    timeout_seconds: Annotated[float, Field(gt=0, le=600)] = 30.0
    poll_interval_seconds: Annotated[float, Field(gt=0, le=60)] = 0.5


class AgentConfig(BaseModel):
    """Server side: the node agent that executes scripts for remote targets."""

    host: str = "127.0.0.1"
    port: int = Field(default=40100, ge=1024, le=65535)
    root: Path = Field(
        default=Path("~/.script-trigger/agent"),
        description="Working directory of the agent; temporary scripts are created here.",
    )
    node_name: str = "agent"
    api_token: str | None = Field(
        default=None,
        description="Token required on all agent requests. None = no auth (local only).",
    )
    process_retention_seconds: float = Field(
        default=300.0,
        gt=0,
        description="How long a finished process stays queryable when the controller never releases it.",
    )

    @field_validator("root", mode="after")
    @classmethod
    def expand_root(cls, v: Path) -> Path:
        return v.expanduser()


class LoggingConfig(BaseModel):
    level: Literal["debug", "info", "warning", "error", "critical"] = "info"
    format: Literal["json", "console"] = "console"
    file: Path | None = None


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SCRIPT_TRIGGER_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)

    @classmethod
    def load(cls, config_file: Path | None = None) -> "Settings":
        """Load settings from YAML files + environment variables."""
        data: dict[str, object] = {}

        candidates = [
            Path("/etc/script-trigger/config.yaml"),
            Path.home() / ".script-trigger" / "config.yaml",
        ]
        if config_file:
            candidates.append(config_file)

        for path in candidates:
            if path.exists():
                import yaml

                with path.open() as f:
                    loaded = yaml.safe_load(f) or {}
                    data.update(loaded)

        return cls(**data)

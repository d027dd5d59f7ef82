"""Node agent — request and response schemas.

These are the wire contract between ``RemoteLauncher`` and the agent.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

HEADER_API_TOKEN = "X-Script-Trigger-Token"


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PathRequest(BaseModel):
    """POST /files/exists, /files/read, /scripts/delete"""

    path: str = Field(min_length=1, description="Path on the node's filesystem.")


class WriteScriptRequest(BaseModel):
    """POST /scripts — create a temporary script artifact in the agent root."""

    content: str
    extension: str = Field(default=".sh", pattern=r"^\.[A-Za-z0-9]+$")
    prefix: str = Field(default="script_trigger", pattern=r"^[A-Za-z0-9_.-]*$")


class StartProcessRequest(BaseModel):
    """POST /processes — start a command and return immediately."""

    command: list[str] = Field(min_length=1)
    cwd: str | None = Field(default=None, description="Working directory. Defaults to the agent root.")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    node_name: str
    root: str
    path_separator: str
    running_processes: int = 0


class ExistsResponse(BaseModel):
    path: str
    exists: bool


class ReadFileResponse(BaseModel):
    path: str
    lines: list[str]


class WriteScriptResponse(BaseModel):
    path: str


class ProcessStartedResponse(BaseModel):
    process_id: str
    pid: int


class ProcessStateResponse(BaseModel):
    process_id: str
    lines: list[str] = Field(default_factory=list, description="Output lines after the requested offset.")
    offset: int = Field(description="Offset to request next.")
    exit_code: int | None = Field(default=None, description="Set once the process has exited.")


class ErrorResponse(BaseModel):
    error: str
    code: str
    detail: dict[str, Any] | None = None
    request_id: str | None = None

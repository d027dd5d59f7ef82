"""/files and /scripts — filesystem access on the node."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Request

from script_trigger.agent.dependencies import AuthDep, ConfigDep
from script_trigger.agent.schemas import (
    ExistsResponse,
    PathRequest,
    ReadFileResponse,
    WriteScriptRequest,
    WriteScriptResponse,
)
from script_trigger.exceptions import InvalidArgumentError, ScriptNotFoundError
from script_trigger.launchers.local import LocalLauncher

router = APIRouter(tags=["files"], dependencies=[AuthDep])


def _launcher(request: Request) -> LocalLauncher:
    return request.app.state.launcher  # type: ignore[no-any-return]


@router.post("/files/exists", response_model=ExistsResponse)
def file_exists(body: PathRequest, request: Request) -> ExistsResponse:
    return ExistsResponse(path=body.path, exists=_launcher(request).exists(body.path))


@router.post("/files/read", response_model=ReadFileResponse)
def read_file(body: PathRequest, request: Request) -> ReadFileResponse:
    launcher = _launcher(request)
    if not launcher.exists(body.path):
        raise ScriptNotFoundError(body.path)
    return ReadFileResponse(path=body.path, lines=launcher.read_lines(body.path))


@router.post("/scripts", response_model=WriteScriptResponse, status_code=201)
def write_script(body: WriteScriptRequest, config: ConfigDep) -> WriteScriptResponse:
    launcher = LocalLauncher(root=config.agent.root, temp_prefix=body.prefix)
    return WriteScriptResponse(path=launcher.write_script(body.content, body.extension))


@router.post("/scripts/delete")
def delete_script(body: PathRequest, config: ConfigDep, request: Request) -> dict[str, bool]:
    root = config.agent.root.resolve()
    path = Path(body.path).resolve()
    if root not in path.parents:
        raise InvalidArgumentError(
            f"Refusing to delete '{body.path}': not a script of this agent.",
            context={"path": body.path},
        )
    existed = path.exists()
    _launcher(request).delete(str(path))
    return {"deleted": existed}

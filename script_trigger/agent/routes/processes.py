"""/processes — start, observe and release scripts on the node."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from script_trigger.agent.dependencies import AuthDep, ConfigDep, ProcessTableDep
from script_trigger.agent.schemas import (
    ProcessStartedResponse,
    ProcessStateResponse,
    StartProcessRequest,
)
from script_trigger.exceptions import RunnerError
from script_trigger.launchers.process import ManagedProcess

router = APIRouter(prefix="/processes", tags=["processes"], dependencies=[AuthDep])


def _get_or_404(processes: ProcessTableDep, process_id: str) -> ManagedProcess:
    process = processes.get(process_id)
    if process is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Process '{process_id}' not found.",
        )
    return process


@router.post("", response_model=ProcessStartedResponse, status_code=201)
def start_process(
    body: StartProcessRequest, config: ConfigDep, processes: ProcessTableDep
) -> ProcessStartedResponse:
    cwd = body.cwd or str(config.agent.root)
    try:
        process_id, process = processes.start(body.command, cwd=cwd)
    except OSError as exc:
        raise RunnerError(
            f"Cannot start '{body.command[0]}'", cause=exc, context={"command": body.command}
        ) from exc
    return ProcessStartedResponse(process_id=process_id, pid=process.pid)


@router.get("/{process_id}", response_model=ProcessStateResponse)
def process_state(
    process_id: str,
    processes: ProcessTableDep,
    offset: int = Query(default=0, ge=0),
) -> ProcessStateResponse:
    process = _get_or_404(processes, process_id)
    # Exit code first: once it is known, the output buffer is complete.
    exit_code = process.poll()
    lines, next_offset = process.read_output(offset)
    return ProcessStateResponse(
        process_id=process_id, lines=lines, offset=next_offset, exit_code=exit_code
    )


@router.post("/{process_id}/kill", response_model=ProcessStateResponse)
def kill_process(process_id: str, processes: ProcessTableDep) -> ProcessStateResponse:
    process = _get_or_404(processes, process_id)
    process.kill()
    return ProcessStateResponse(
        process_id=process_id, offset=process.read_output()[1], exit_code=process.returncode
    )


@router.delete("/{process_id}")
def release_process(process_id: str, processes: ProcessTableDep) -> dict[str, bool]:
    if not processes.remove(process_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Process '{process_id}' not found.",
        )
    return {"released": True}

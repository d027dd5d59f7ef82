"""GET /health — node description used by RemoteLauncher."""

from __future__ import annotations

import os

from fastapi import APIRouter

from script_trigger import __version__
from script_trigger.agent.dependencies import ConfigDep, ProcessTableDep
from script_trigger.agent.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse, summary="Agent health check")
def health(config: ConfigDep, processes: ProcessTableDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        node_name=config.agent.node_name,
        root=str(config.agent.root),
        path_separator=os.pathsep,
        running_processes=processes.running(),
    )

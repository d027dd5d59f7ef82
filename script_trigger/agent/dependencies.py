"""Node agent — FastAPI dependency injection.

The settings and the process table are created once in ``create_app()`` and
stored on ``app.state``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from script_trigger.agent.processes import ProcessTable
from script_trigger.agent.schemas import HEADER_API_TOKEN
from script_trigger.config import Settings


def get_config(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[no-any-return]


def get_process_table(request: Request) -> ProcessTable:
    return request.app.state.process_table  # type: ignore[no-any-return]


async def verify_api_token(
    request: Request,
    x_script_trigger_token: Annotated[str | None, Header(alias=HEADER_API_TOKEN)] = None,
) -> None:
    """Verify the API token if one is configured."""
    settings: Settings = request.app.state.settings
    expected = settings.agent.api_token

    if expected is None:
        return

    if x_script_trigger_token != expected:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API token.",
        )


ConfigDep = Annotated[Settings, Depends(get_config)]
ProcessTableDep = Annotated[ProcessTable, Depends(get_process_table)]
AuthDep = Depends(verify_api_token)

"""Node agent — FastAPI application factory.

``create_app()`` is the single entry point for building the agent.  All
state is wired here so that tests can build an app with custom settings and
drive it through ``TestClient`` (which is also an ``httpx.Client`` and can
therefore be handed to ``RemoteLauncher`` directly).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from script_trigger import __version__
from script_trigger.agent.middleware import (
    AccessLogMiddleware,
    RequestIDMiddleware,
    build_error_handler,
)
from script_trigger.agent.processes import ProcessTable
from script_trigger.agent.routes import files, health, processes
from script_trigger.config import Settings
from script_trigger.exceptions import (
    InvalidArgumentError,
    RunnerError,
    ScriptNotFoundError,
    ScriptTriggerError,
)
from script_trigger.launchers.local import LocalLauncher
from script_trigger.logging import configure_logging, get_logger

log = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the node agent application.

    Args:
        settings: Optional settings override (used in tests).
    """
    if settings is None:
        settings = Settings.load()

    configure_logging(
        level=settings.logging.level,
        format=settings.logging.format,
        log_file=str(settings.logging.file) if settings.logging.file else None,
    )

    process_table = ProcessTable(retention_seconds=settings.agent.process_retention_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info(
            "agent_starting",
            version=__version__,
            node_name=settings.agent.node_name,
            root=str(settings.agent.root),
        )
        yield
        process_table.kill_all()
        log.info("agent_stopped", node_name=settings.agent.node_name)

    app = FastAPI(
        title="script-trigger node agent",
        description="Runs trigger scripts on this machine for a remote controller.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)

    handler = build_error_handler()
    for exc_cls in (ScriptTriggerError, InvalidArgumentError, ScriptNotFoundError, RunnerError):
        app.add_exception_handler(exc_cls, handler)  # type: ignore[arg-type]

    app.include_router(health.router)
    app.include_router(files.router)
    app.include_router(processes.router)

    settings.agent.root.mkdir(parents=True, exist_ok=True)
    app.state.settings = settings
    app.state.process_table = process_table
    app.state.launcher = LocalLauncher(root=settings.agent.root)

    return app

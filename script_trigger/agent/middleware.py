"""Node agent — Request middleware.

- Request ID injection (X-Request-ID header, bound into the log context)
- Structured access logging (process polling is logged at debug level)
- ScriptTriggerError handler → clean ErrorResponse
"""

from __future__ import annotations

import time
import uuid
from typing import Any

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from script_trigger.agent.schemas import ErrorResponse
from script_trigger.exceptions import (
    InvalidArgumentError,
    RunnerError,
    ScriptNotFoundError,
    ScriptTriggerError,
)
from script_trigger.logging import get_logger

log = get_logger(__name__)

# First match wins, so subclasses come before their bases.
_ERROR_STATUS: list[tuple[type[ScriptTriggerError], int, str]] = [
    (ScriptNotFoundError, 404, "not_found"),
    (InvalidArgumentError, 400, "invalid_argument"),
    (RunnerError, 500, "runner_error"),
]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a unique X-Request-ID to every request, response and log event."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Log each request with timing information.

    ``GET /processes/{id}`` is what a controller sends in a loop while a
    script runs; those requests are logged at debug level.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 2)

        polling = request.method == "GET" and request.url.path.startswith("/processes/")
        emit = log.debug if polling else log.info
        emit(
            "http_request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=duration_ms,
        )
        return response


def build_error_handler() -> Any:
    """Return a FastAPI exception handler for ScriptTriggerError subclasses."""

    async def handler(request: Request, exc: ScriptTriggerError) -> JSONResponse:
        status_code, code = 500, "internal_error"
        for exc_cls, mapped_status, mapped_code in _ERROR_STATUS:
            if isinstance(exc, exc_cls):
                status_code, code = mapped_status, mapped_code
                break

        log.warning(
            "agent_request_failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=exc.describe(),
        )
        body = ErrorResponse(
            error=exc.describe(),
            code=code,
            detail=exc.context or None,
            request_id=getattr(request.state, "request_id", None),
        )
        return JSONResponse(status_code=status_code, content=body.model_dump())

    return handler

"""script-trigger — Structured logging configuration.

Uses structlog for structured, levelled logging with consistent key names
across the evaluator, the runner, the launchers and the node agent.  All log
entries include:
    - timestamp (ISO-8601)
    - level
    - logger (Python logger name)
    - trigger_id / workload / target (bound via context variables when available)

This is the operator-facing log.  The user-facing decision log of a cycle is
``script_trigger.polllog.PollLog``.
"""

from __future__ import annotations

import logging
import shlex
import sys
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger

_POLL_CONTEXT_KEYS = ("trigger_id", "workload", "target")


def bind_poll_context(
    trigger_id: str | None = None,
    workload: str | None = None,
    target: str | None = None,
) -> None:
    """Bind polling-cycle context to the current thread."""
    values = {"trigger_id": trigger_id, "workload": workload, "target": target}
    structlog.contextvars.bind_contextvars(
        **{key: value for key, value in values.items() if value is not None}
    )


def clear_poll_context() -> None:
    structlog.contextvars.unbind_contextvars(*_POLL_CONTEXT_KEYS)


# ---------------------------------------------------------------------------
# Custom processors
# ---------------------------------------------------------------------------


def _render_command(
    _logger: WrappedLogger, _method: str, event_dict: EventDict
) -> EventDict:
    """Show argv lists as a single shell-quoted string."""
    command = event_dict.get("command")
    if isinstance(command, list):
        event_dict["command"] = shlex.join(str(arg) for arg in command)
    return event_dict


def _drop_color_message(
    _logger: WrappedLogger, _method: str, event_dict: EventDict
) -> EventDict:
    """Remove uvicorn's ``color_message`` duplicate field."""
    event_dict.pop("color_message", None)
    return event_dict


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


def _processor_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        _render_command,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _drop_color_message,
    ]


def _build_handlers(
    formatter: logging.Formatter, log_file: str | None
) -> list[logging.Handler]:
    # stderr only: `script-trigger poll` writes the poll log to stdout.
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(
    level: str = "info",
    format: str = "console",
    log_file: str | None = None,
) -> None:
    """Route structlog events and stdlib records (uvicorn, httpx) through one
    renderer.

    The root logger's handlers are replaced, so the CLI and the node agent
    both end up with the same output whichever configured it last.

    Args:
        level:    One of debug, info, warning, error, critical.
        format:   ``"console"`` for human-readable output, ``"json"`` for
                  one JSON object per line.
        log_file: Optional path that receives a copy of the stderr output.
    """
    chain = _processor_chain()
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if format == "json"
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[*chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=chain,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )

    root_logger = logging.getLogger()
    root_logger.handlers = _build_handlers(formatter, log_file)
    root_logger.setLevel(level.upper())
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger for *name*, e.g. ``log = get_logger(__name__)``."""
    return structlog.get_logger(name)

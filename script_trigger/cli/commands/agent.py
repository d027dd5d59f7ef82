"""CLI — Node agent commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

app = typer.Typer(help="Run or inspect a node agent (remote execution target).")
console = Console()


@app.command("start")
def start(
    host: Annotated[str | None, typer.Option(help="Host to bind to.")] = None,
    port: Annotated[int | None, typer.Option(help="Port to listen on.")] = None,
    root: Annotated[
        Path | None, typer.Option(help="Agent working directory for scripts.")
    ] = None,
    node_name: Annotated[str | None, typer.Option(help="Name reported to controllers.")] = None,
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to config.yaml.")
    ] = None,
    log_level: str = typer.Option("info", help="Log level."),
) -> None:
    """Start the node agent."""
    from script_trigger.agent.server import create_app
    from script_trigger.config import Settings

    settings = Settings.load(config_file=config)
    if host is not None:
        settings.agent.host = host
    if port is not None:
        settings.agent.port = port
    if root is not None:
        settings.agent.root = root.expanduser()
    if node_name is not None:
        settings.agent.node_name = node_name

    console.print(
        f"[bold green]Starting node agent '{settings.agent.node_name}' "
        f"on {settings.agent.host}:{settings.agent.port}[/bold green]"
    )

    uvicorn.run(
        create_app(settings=settings),
        host=settings.agent.host,
        port=settings.agent.port,
        log_level=log_level,
    )


@app.command("status")
def status(
    url: str = typer.Option("http://127.0.0.1:40100", help="Agent URL."),
) -> None:
    """Check a node agent's health."""
    import httpx

    try:
        resp = httpx.get(f"{url.rstrip('/')}/health", timeout=5.0)
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPError as exc:
        console.print(f"[red]Agent unreachable: {exc}[/red]")
        raise typer.Exit(1)

    table = Table(title="Node agent status")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for k, v in data.items():
        table.add_row(str(k), str(v))
    console.print(table)

"""CLI — Inspect persisted poll logs."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from script_trigger.config import DEFAULT_POLLING_LOG_FILE_NAME
from script_trigger.polllog import PollLogFile

app = typer.Typer(help="Inspect the persisted poll log of a workload.")
console = Console(highlight=False, soft_wrap=True)


@app.command("show")
def show(
    workload_root: Path = typer.Option(Path("."), help="Storage root of the job."),
    file_name: str = typer.Option(DEFAULT_POLLING_LOG_FILE_NAME, help="Poll log file name."),
) -> None:
    """Print the poll log of a workload."""
    log_file = PollLogFile(workload_root / file_name)
    content = log_file.read()
    if not content:
        console.print(f"[yellow]No poll log at {log_file.path}[/yellow]")
        raise typer.Exit(1)
    console.print(content, markup=False, end="")

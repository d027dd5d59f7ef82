"""CLI — Run one polling cycle."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

# Exit status of `script-trigger poll`.
EXIT_CHANGED = 0
EXIT_NO_CHANGE = 1
EXIT_FAILURE = 2

console = Console(highlight=False, soft_wrap=True)


def _parse_env(pairs: list[str]) -> dict[str, str]:
    env: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"Expected NAME=VALUE, got '{pair}'.", param_hint="--env")
        env[name] = value
    return env


def poll(
    script: Annotated[
        str | None, typer.Option("--script", "-s", help="Inline script to run.")
    ] = None,
    script_file: Annotated[
        str | None,
        typer.Option("--script-file", "-f", help="Path of a script file on the target."),
    ] = None,
    exit_code: Annotated[
        str | None,
        typer.Option("--exit-code", "-e", help="Exit code meaning 'changed'. Default 0."),
    ] = None,
    workload_name: str = typer.Option("default", help="Name of the polled job."),
    workload_root: Path = typer.Option(
        Path("."), help="Storage root of the job; the poll log is appended there."
    ),
    node_url: Annotated[
        str | None,
        typer.Option(help="Node agent URL. Runs on this machine when omitted."),
    ] = None,
    node_name: Annotated[str | None, typer.Option(help="Target name for the log.")] = None,
    root: Annotated[
        str | None, typer.Option(help="Working directory of the script on the target.")
    ] = None,
    env: Annotated[
        list[str] | None,
        typer.Option("--env", help="Workload variable NAME=VALUE (repeatable)."),
    ] = None,
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not echo script output."),
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to config.yaml.")
    ] = None,
) -> None:
    """Run one polling cycle; exit 0 if changed, 1 if not, 2 on failure."""
    from script_trigger.config import Settings
    from script_trigger.logging import configure_logging
    from script_trigger.models import ExecutionTarget, TriggerConfig, Workload
    from script_trigger.trigger import ScriptTrigger

    settings = Settings.load(config_file=config)
    configure_logging(level=settings.logging.level, format=settings.logging.format)

    trigger_config = TriggerConfig(
        inline_script=script, script_file_path=script_file, expected_exit_code=exit_code
    )
    workload = Workload(name=workload_name, root_dir=workload_root, env=_parse_env(env or []))
    if node_url:
        target = ExecutionTarget(name=node_name or node_url, root_path=root, node_url=node_url)
    else:
        target = ExecutionTarget.local(root)
        if node_name:
            target.name = node_name

    def _echo(line: str) -> None:
        console.print(line, markup=False)

    trigger = ScriptTrigger(
        trigger_config, workload, settings=settings, listener=None if quiet else _echo
    )
    result = trigger.poll(target)

    for line in result.lines:
        console.print(line, markup=False)

    if not result.ok:
        console.print(f"[red]Polling failed:[/red] {escape(result.error.describe())}")  # type: ignore[union-attr]
        raise typer.Exit(EXIT_FAILURE)
    if result.changed:
        console.print("[bold green]changed[/bold green]")
        raise typer.Exit(EXIT_CHANGED)
    console.print("[yellow]no change[/yellow]")
    raise typer.Exit(EXIT_NO_CHANGE)

"""script-trigger CLI — Entry point.

Usage:
    script-trigger poll --script 'test -f /tmp/ready' [--exit-code 0]
    script-trigger poll --script-file /opt/checks/ready.sh --node-url http://node-3:40100
    script-trigger log show --workload-root /var/lib/jobs/nightly
    script-trigger agent start [--port 40100]
    script-trigger agent status --url http://node-3:40100
"""

from __future__ import annotations

import typer

from script_trigger.cli.commands import agent, log, poll

app = typer.Typer(
    name="script-trigger",
    help="Poll a trigger condition with a shell or batch script.",
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)

app.command("poll")(poll.poll)
app.add_typer(log.app, name="log")
app.add_typer(agent.app, name="agent")


@app.callback()
def main_callback() -> None:
    pass


if __name__ == "__main__":
    app()

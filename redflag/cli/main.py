"""Main CLI application using Cyclopts."""

import cyclopts

from redflag.cli.commands import server, sweep, usage

app = cyclopts.App(
    name="redflag",
    help="Red-flag analysis backend",
)

app.command(server.app, name="serve")
app.command(sweep.app, name="sweep")
app.command(usage.app, name="usage")


def main() -> None:
    app()

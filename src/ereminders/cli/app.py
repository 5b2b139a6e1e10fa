"""Main CLI application."""

import typer

from ereminders.cli.commands import check, control, run

app = typer.Typer(
    name="ereminders",
    help="ereminders - email reminders from plain-text job files",
    no_args_is_help=True,
)

run.register(app)
control.register(app)
check.register(app)


if __name__ == "__main__":
    app()

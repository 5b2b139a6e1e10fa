"""Commands that talk to a running daemon over the control socket."""

from pathlib import Path
from typing import Annotated

import typer

from ereminders.cli.console import console, dim, error, success, warning

SocketOption = Annotated[
    Path | None,
    typer.Option(
        "--socket",
        "-s",
        help="Control socket path (defaults to the standard location)",
    ),
]


def _send(command: str, socket_path: Path | None) -> str:
    from ereminders.config.paths import get_socket_path
    from ereminders.control import transmit_command
    from ereminders.errors import ControlChannelError

    try:
        return transmit_command(command, socket_path or get_socket_path())
    except ControlChannelError as e:
        error(str(e))
        raise typer.Exit(1) from None


def register(app: typer.Typer) -> None:
    """Register list, stop and status commands."""

    @app.command("list")
    def list_jobs(socket: SocketOption = None) -> None:
        """List all currently scheduled jobs."""
        console.print(_send("list", socket), markup=False, highlight=False)

    @app.command()
    def stop(socket: SocketOption = None) -> None:
        """Ask the daemon to exit."""
        _send("exit", socket)
        success("Daemon stopping")

    @app.command()
    def status() -> None:
        """Show whether the daemon is running."""
        from datetime import datetime

        from ereminders.config.paths import get_pid_path
        from ereminders.pid import read_pid_file

        info = read_pid_file(get_pid_path())
        if info is None:
            warning("ereminders is not running")
            raise typer.Exit(1)
        if not info.alive:
            warning(f"ereminders is not running (stale pid file for {info.pid})")
            raise typer.Exit(1)

        started = datetime.fromtimestamp(info.start_time).strftime("%Y-%m-%d %H:%M:%S")
        success(f"ereminders is running (pid {info.pid})")
        dim(f"Started {started}")

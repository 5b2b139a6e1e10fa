"""Run command for the reminder daemon."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer

from ereminders.cli.console import error, load_config_or_exit, warning

logger = logging.getLogger(__name__)


def register(app: typer.Typer) -> None:
    """Register the run command."""

    @app.command()
    def run(
        jobs_dir: Annotated[
            Path | None,
            typer.Option(
                "--dir",
                "-d",
                help="Directory of job files to watch (defaults to jobs_dir in config)",
            ),
        ] = None,
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
        log_level: Annotated[
            str | None,
            typer.Option(
                "--log-level",
                help="DEBUG, INFO, WARNING or ERROR",
            ),
        ] = None,
        log_to_file: Annotated[
            bool,
            typer.Option(
                "--log-file/--no-log-file",
                help="Also write JSONL logs to the logs directory",
            ),
        ] = True,
    ) -> None:
        """Run the reminder daemon and watch a jobs directory."""
        from ereminders.config.paths import get_pid_path
        from ereminders.daemon import Daemon
        from ereminders.errors import TransportError, WatchSourceError
        from ereminders.logging import configure_logging
        from ereminders.pid import read_pid_file, remove_pid_file, write_pid_file

        configure_logging(level=log_level, use_rich=True, log_to_file=log_to_file)
        cfg = load_config_or_exit(config)

        directory = jobs_dir or cfg.jobs_dir
        if directory is None:
            error("No jobs directory given. Pass --dir or set jobs_dir in config.")
            raise typer.Exit(1)

        pid_path = get_pid_path()
        existing = read_pid_file(pid_path)
        if existing is not None and existing.alive:
            error(f"ereminders is already running (pid {existing.pid})")
            raise typer.Exit(1)

        daemon = Daemon(cfg, directory)
        write_pid_file(pid_path)
        try:
            asyncio.run(daemon.run())
        except WatchSourceError as e:
            error(str(e))
            raise typer.Exit(1) from None
        except TransportError as e:
            logger.error("daemon_aborted", extra={"error.message": str(e)})
            error(f"Stopping: could not send reminder: {e}")
            raise typer.Exit(1) from None
        except KeyboardInterrupt:
            warning("Interrupted")
        finally:
            remove_pid_file(pid_path)

"""Dry-run parsing of a job descriptor file."""

from pathlib import Path
from typing import Annotated

import typer

from ereminders.cli.console import console, error, load_config_or_exit


def register(app: typer.Typer) -> None:
    """Register the check command."""

    @app.command()
    def check(
        path: Annotated[Path, typer.Argument(help="Job descriptor file to parse")],
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file (for the timezone)",
            ),
        ] = None,
        timezone: Annotated[
            str | None,
            typer.Option("--timezone", "-t", help="IANA timezone for date resolution"),
        ] = None,
    ) -> None:
        """Parse a job file and show when it would fire, without scheduling it."""
        from ereminders.errors import ParseError
        from ereminders.jobs.parser import DateparserResolver, JobParser

        if timezone is None:
            if config is not None:
                timezone = load_config_or_exit(config).timezone
            else:
                from ereminders.config.paths import get_system_timezone

                timezone = get_system_timezone()

        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            error(f"Cannot read {path}: {e}")
            raise typer.Exit(1) from None

        parser = JobParser(DateparserResolver(timezone))
        try:
            job = parser.parse(content, str(path))
        except ParseError as e:
            error(f"{e.kind}: {e}")
            raise typer.Exit(1) from None

        console.print(job.render(), markup=False, highlight=False)

"""Shared console utilities for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console

if TYPE_CHECKING:
    from ereminders.config.models import EremindersConfig

# Shared console instance for all CLI commands
console = Console()


def error(msg: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]{msg}[/red]")


def warning(msg: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]{msg}[/yellow]")


def success(msg: str) -> None:
    """Print a success message in green."""
    console.print(f"[green]{msg}[/green]")


def dim(msg: str) -> None:
    """Print a dimmed message."""
    console.print(f"[dim]{msg}[/dim]")


def load_config_or_exit(path: Path | None) -> EremindersConfig:
    """Load configuration, printing a readable error and exiting on failure."""
    import tomllib

    from pydantic import ValidationError

    from ereminders.config import load_config

    try:
        return load_config(path)
    except FileNotFoundError as e:
        error(str(e))
        raise typer.Exit(1) from None
    except tomllib.TOMLDecodeError as e:
        error(f"Invalid TOML in config file: {e}")
        raise typer.Exit(1) from None
    except ValidationError as e:
        error(f"Config validation failed:\n{e}")
        raise typer.Exit(1) from None

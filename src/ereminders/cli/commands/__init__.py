"""CLI command modules."""

from ereminders.cli.commands import check, control, run

__all__ = ["check", "control", "run"]

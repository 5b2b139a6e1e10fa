"""Command-line interface."""

from ereminders.cli.app import app

__all__ = ["app"]

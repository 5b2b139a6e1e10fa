"""ereminders - email reminders scheduled from plain-text job files."""

__version__ = "0.1.0"

"""Repeat cadence arithmetic."""

from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from ereminders.jobs.types import RepeatKind

_PERIODS: dict[RepeatKind, timedelta | relativedelta] = {
    RepeatKind.DAILY: timedelta(days=1),
    RepeatKind.WEEKLY: timedelta(days=7),
    # Clamps to the last day of shorter months (Jan 31 -> Feb 28/29)
    RepeatKind.MONTHLY: relativedelta(months=1),
}


def advance(kind: RepeatKind, when: datetime) -> datetime:
    """Return the next occurrence after ``when`` for a repeating job.

    Args:
        kind: Repeat cadence. Must not be ``RepeatKind.NONE``.
        when: The current occurrence.

    Raises:
        ValueError: If called for a non-repeating job.
    """
    period = _PERIODS.get(kind)
    if period is None:
        raise ValueError(f"Cannot advance a job with repeat kind {kind.name}")
    return when + period


def advance_past(kind: RepeatKind, when: datetime, now: datetime) -> datetime:
    """Advance ``when`` until it lies strictly after ``now``."""
    while when <= now:
        when = advance(kind, when)
    return when

"""Job types.

Public types:
- RepeatKind: How often a job fires again after it has been sent
- Job: A single reminder loaded from a job descriptor file
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class RepeatKind(Enum):
    """Repeat cadence of a job. Defaults to NONE (one-shot)."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def is_repeating(self) -> bool:
        return self is not RepeatKind.NONE

    @classmethod
    def from_directive(cls, word: str) -> "RepeatKind | None":
        """Look up a cadence word from a ``repeat`` line (case-insensitive)."""
        try:
            kind = cls(word.lower())
        except ValueError:
            return None
        return kind if kind.is_repeating else None


@dataclass
class Job:
    """A reminder scheduled from one job descriptor file."""

    source_key: str  # Path of the descriptor file, unique in the registry
    scheduled_time: datetime
    message: str
    repeat: RepeatKind = RepeatKind.NONE

    @property
    def sort_key(self) -> tuple[datetime, str]:
        return (self.scheduled_time, self.source_key)

    def render(self) -> str:
        """Render the job as a multi-line block for ``list`` reports."""
        return "\n".join(
            [
                "{",
                f"\t At: {self.scheduled_time.isoformat()}",
                f"\t Msg: {self.message}",
                f"\t File: {self.source_key}",
                f"\t Repeats: {self.repeat.name.capitalize()}",
                "}",
            ]
        )


def render_descriptor(job: Job) -> str:
    """Render a job back into descriptor file syntax.

    The date line is written as an ISO timestamp so it resolves to the same
    instant when parsed again.
    """
    lines = []
    if job.repeat.is_repeating:
        lines.append(f"repeat {job.repeat.value}")
    lines.append(job.scheduled_time.isoformat())
    lines.append("")
    lines.append(job.message)
    return "\n".join(lines) + "\n"

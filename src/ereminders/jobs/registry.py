"""In-memory job registry."""

from collections.abc import Iterator
from datetime import datetime

from ereminders.jobs.types import Job


class JobRegistry:
    """Jobs keyed by source path.

    Owned by the scheduler loop; it is the only reader and writer, so no
    locking is done here. Orderings break ties on ``scheduled_time`` by the
    lexicographically smallest ``source_key``.
    """

    def __init__(self, jobs: list[Job] | None = None) -> None:
        self._jobs: dict[str, Job] = {}
        for job in jobs or []:
            self.upsert(job)

    def upsert(self, job: Job) -> None:
        """Insert the job, replacing any entry with the same source key."""
        self._jobs[job.source_key] = job

    def remove(self, source_key: str) -> bool:
        """Remove a job. Returns False if it was not present."""
        return self._jobs.pop(source_key, None) is not None

    def get(self, source_key: str) -> Job | None:
        return self._jobs.get(source_key)

    def earliest_due(self) -> Job | None:
        """Return the job that fires next, or None if the registry is empty."""
        if not self._jobs:
            return None
        return min(self._jobs.values(), key=lambda job: job.sort_key)

    def due_jobs(self, now: datetime) -> list[Job]:
        """Return all jobs scheduled at or before ``now`` in firing order."""
        due = [job for job in self._jobs.values() if job.scheduled_time <= now]
        return sorted(due, key=lambda job: job.sort_key)

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, source_key: object) -> bool:
        return source_key in self._jobs

    def __iter__(self) -> Iterator[Job]:
        return iter(sorted(self._jobs.values(), key=lambda job: job.sort_key))

"""Events delivered to the scheduler loop by its producers."""

import asyncio
from dataclasses import dataclass, field

from ereminders.jobs.types import Job


@dataclass(frozen=True)
class JobUpserted:
    """A descriptor was created or changed and parsed successfully."""

    job: Job


@dataclass(frozen=True)
class JobRemoved:
    """A descriptor disappeared from the jobs directory."""

    source_key: str


JobEvent = JobUpserted | JobRemoved


@dataclass
class ControlCommand:
    """An operator command awaiting a text response."""

    text: str
    response: asyncio.Future[str] = field(
        default_factory=lambda: asyncio.get_running_loop().create_future()
    )

    def respond(self, text: str) -> None:
        if not self.response.done():
            self.response.set_result(text)

"""Scheduler loop - fires due jobs and reconciles watcher and control events.

The loop is the only writer of the JobRegistry. Producers (the directory
watcher and the control server) talk to it exclusively through two queues:

- ``job_events``: JobUpserted / JobRemoved from the directory watcher
- ``commands``: ControlCommand from the control server

Each iteration fires every due job, then sleeps until the next job is due or
an event arrives, whichever comes first. Sends are awaited to completion
before the next event is looked at.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from enum import Enum
from pathlib import Path

from ereminders.config.models import EmailConfig, RetryConfig
from ereminders.errors import TransportError
from ereminders.events import ControlCommand, JobEvent, JobRemoved, JobUpserted
from ereminders.jobs.files import self_destruct
from ereminders.jobs.registry import JobRegistry
from ereminders.jobs.repeat import advance
from ereminders.jobs.types import Job
from ereminders.mail import MailTransport, build_message
from ereminders.retry import with_retry

logger = logging.getLogger(__name__)

COMMAND_LIST = "list"
COMMAND_EXIT = "exit"
RESPONSE_UNRECOGNIZED = "unrecognized"
RESPONSE_STOPPING = "stopping"


class LoopState(Enum):
    WAITING = "waiting"
    RECONCILING = "reconciling"
    STOPPED = "stopped"


def format_duration(delta: timedelta | None) -> str:
    """Format a wait duration like ``1d 2h 3m 4s``."""
    if delta is None:
        return "no jobs scheduled"

    total_seconds = int(delta.total_seconds())
    if total_seconds <= 0:
        return "now"

    days, rest = divmod(total_seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds or not parts:
        parts.append(f"{seconds}s")
    return " ".join(parts)


class SchedulerLoop:
    """Owns the job registry and decides when each job fires.

    Example:
        scheduler = SchedulerLoop(registry, SMTPTransport(config.smtp), config.email)
        await scheduler.run()  # returns after an "exit" command
    """

    def __init__(
        self,
        registry: JobRegistry,
        transport: MailTransport,
        email: EmailConfig,
        retry: RetryConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._registry = registry
        self._transport = transport
        self._email = email
        self._retry = retry or RetryConfig()
        self._clock = clock or (lambda: datetime.now(UTC))
        self._state = LoopState.RECONCILING

        self.job_events: asyncio.Queue[JobEvent] = asyncio.Queue()
        self.commands: asyncio.Queue[ControlCommand] = asyncio.Queue()

        self._job_get: asyncio.Task[JobEvent] | None = None
        self._command_get: asyncio.Task[ControlCommand] | None = None

    @property
    def registry(self) -> JobRegistry:
        return self._registry

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def stopped(self) -> bool:
        return self._state is LoopState.STOPPED

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Run until an ``exit`` command arrives.

        Raises:
            TransportError: If a due job could not be sent. The loop stops.
        """
        logger.info("scheduler_started", extra={"jobs.count": len(self._registry)})
        try:
            while not self.stopped:
                await self.run_iteration()
        finally:
            self._state = LoopState.STOPPED
            self._shutdown()
        logger.info("scheduler_stopped")

    async def run_iteration(self) -> None:
        """Fire due jobs, wait for the next wakeup and handle its cause."""
        self._state = LoopState.RECONCILING
        await self.execute_due_jobs()

        wait = self.time_until_next()
        timeout = None if wait is None else max(wait.total_seconds(), 0.0)
        logger.debug(f"Time until next job: {format_duration(wait)}. Zzzzzzz...")

        self._state = LoopState.WAITING
        event = await self._wait_for_event(timeout)
        self._state = LoopState.RECONCILING

        if event is None:
            return
        if isinstance(event, ControlCommand):
            self.handle_command(event)
        else:
            self.handle_job_event(event)

    async def execute_due_jobs(self) -> int:
        """Send every due job in firing order. Returns the number sent."""
        now = self._clock()
        fired = 0
        for job in self._registry.due_jobs(now):
            await self._execute(job)
            fired += 1
        return fired

    async def _execute(self, job: Job) -> None:
        logger.info(
            "job_triggered",
            extra={
                "job.source_key": job.source_key,
                "job.scheduled_time": job.scheduled_time.isoformat(),
                "job.repeat": job.repeat.value,
            },
        )
        message = build_message(job, self._email)
        try:
            await with_retry(lambda: self._transport.send(message), self._retry)
        except TransportError as e:
            logger.error(
                "job_send_failed",
                extra={"job.source_key": job.source_key, "error.message": str(e)},
            )
            raise

        if job.repeat.is_repeating:
            job.scheduled_time = advance(job.repeat, job.scheduled_time)
            logger.info(
                "job_rescheduled",
                extra={
                    "job.source_key": job.source_key,
                    "job.scheduled_time": job.scheduled_time.isoformat(),
                },
            )
        else:
            self._registry.remove(job.source_key)
            self_destruct(job)
            logger.info("job_completed", extra={"job.source_key": job.source_key})

    def time_until_next(self) -> timedelta | None:
        """Time until the earliest job is due, or None when nothing is scheduled."""
        job = self._registry.earliest_due()
        if job is None:
            return None
        return job.scheduled_time - self._clock()

    async def _wait_for_event(
        self, timeout: float | None
    ) -> JobEvent | ControlCommand | None:
        """Block until a queue yields an item or ``timeout`` elapses.

        Getter tasks survive across calls so an item taken off a queue is never
        dropped. Returns None on timeout.
        """
        if self._job_get is None:
            self._job_get = asyncio.ensure_future(self.job_events.get())
        if self._command_get is None:
            self._command_get = asyncio.ensure_future(self.commands.get())

        done, _ = await asyncio.wait(
            {self._job_get, self._command_get},
            timeout=timeout,
            return_when=asyncio.FIRST_COMPLETED,
        )

        if self._job_get in done:
            task, self._job_get = self._job_get, None
            return task.result()
        if self._command_get in done:
            task, self._command_get = self._command_get, None
            return task.result()
        return None

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def submit(self, command: ControlCommand) -> None:
        """Queue a command for the loop, or refuse it once the loop has stopped."""
        if self.stopped:
            command.respond(RESPONSE_STOPPING)
        else:
            self.commands.put_nowait(command)

    def handle_job_event(self, event: JobEvent) -> None:
        if isinstance(event, JobUpserted):
            if not Path(event.job.source_key).exists():
                # Parsed before the file was fired and deleted
                logger.debug(f"Dropping upsert for vanished {event.job.source_key}")
                return
            replaced = event.job.source_key in self._registry
            self._registry.upsert(event.job)
            logger.info(
                "job_updated" if replaced else "job_added",
                extra={
                    "job.source_key": event.job.source_key,
                    "job.scheduled_time": event.job.scheduled_time.isoformat(),
                },
            )
        elif isinstance(event, JobRemoved):
            if self._registry.remove(event.source_key):
                logger.info("job_removed", extra={"job.source_key": event.source_key})

    def handle_command(self, command: ControlCommand) -> None:
        text = command.text.strip()
        logger.debug(f"Got command: {text!r}")

        if text == COMMAND_EXIT:
            logger.info("exit_requested")
            self._state = LoopState.STOPPED
            command.respond(RESPONSE_STOPPING)
        elif text == COMMAND_LIST:
            command.respond(self.report())
        else:
            command.respond(RESPONSE_UNRECOGNIZED)

    def report(self) -> str:
        """Describe the schedule: time until the next job, then every job."""
        now = self._clock()
        lines = [f"Time until next job: {format_duration(self.time_until_next())}"]
        for job in self._registry:
            remaining = format_duration(job.scheduled_time - now)
            lines.append(f"in {remaining}: {job.render()}")
        return "\n".join(lines) + "\n"

    def _shutdown(self) -> None:
        """Cancel queue getters and answer commands nobody will handle."""
        if self._job_get is not None:
            self._job_get.cancel()
            self._job_get = None

        if self._command_get is not None:
            if self._command_get.done() and not self._command_get.cancelled():
                self._command_get.result().respond(RESPONSE_STOPPING)
            else:
                self._command_get.cancel()
            self._command_get = None

        while not self.commands.empty():
            self.commands.get_nowait().respond(RESPONSE_STOPPING)

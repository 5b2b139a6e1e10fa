"""Daemon wiring - startup scan, watcher, control server and scheduler loop."""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from ereminders.config.models import EremindersConfig
from ereminders.control.server import ControlServer
from ereminders.events import JobEvent
from ereminders.jobs.files import scan_directory
from ereminders.jobs.parser import DateparserResolver, DateResolver, JobParser
from ereminders.jobs.registry import JobRegistry
from ereminders.mail import MailTransport, SMTPTransport
from ereminders.scheduler import SchedulerLoop
from ereminders.watcher import JobDirectoryWatcher

logger = logging.getLogger(__name__)


class Daemon:
    """Runs the reminder scheduler for one jobs directory.

    The watcher starts before the startup scan so a file dropped in between
    is not missed; a file seen by both simply replaces itself in the registry.
    """

    def __init__(
        self,
        config: EremindersConfig,
        jobs_dir: Path,
        transport: MailTransport | None = None,
        resolver: DateResolver | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._config = config
        self._jobs_dir = jobs_dir.expanduser().resolve()
        self._parser = JobParser(resolver or DateparserResolver(config.timezone), clock)
        self._scheduler = SchedulerLoop(
            JobRegistry(),
            transport or SMTPTransport(config.smtp),
            config.email,
            config.retry,
            clock,
        )
        self._server = ControlServer(config.socket_path, self._scheduler.submit)
        self._watcher: JobDirectoryWatcher | None = None

    @property
    def scheduler(self) -> SchedulerLoop:
        return self._scheduler

    @property
    def jobs_dir(self) -> Path:
        return self._jobs_dir

    async def run(self) -> None:
        """Run until an ``exit`` command or a fatal error.

        Raises:
            WatchSourceError: If the jobs directory cannot be watched.
            TransportError: If a reminder could not be sent.
        """
        loop = asyncio.get_running_loop()

        def emit(event: JobEvent) -> None:
            loop.call_soon_threadsafe(self._scheduler.job_events.put_nowait, event)

        self._watcher = JobDirectoryWatcher(self._jobs_dir, self._parser, emit)
        self._watcher.start()
        try:
            for job in scan_directory(self._jobs_dir, self._parser):
                self._scheduler.registry.upsert(job)
            logger.info(
                "startup_scan_complete",
                extra={
                    "file.path": str(self._jobs_dir),
                    "jobs.count": len(self._scheduler.registry),
                },
            )

            await self._server.start()
            try:
                await self._scheduler.run()
            finally:
                await self._server.stop()
        finally:
            self._watcher.stop()
            self._watcher = None

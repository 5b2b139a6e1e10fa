"""Jobs directory watcher - turns filesystem changes into job events.

Runs watchdog's observer thread. Descriptors are parsed off the event loop
and the resulting events are handed to ``emit``, which must be safe to call
from a foreign thread (the daemon passes ``loop.call_soon_threadsafe`` around
the scheduler's queue).

A descriptor is only parsed once its writer is done with it, so a file that
is flushed in pieces is never judged on a partial snapshot:

- inotify reports close-after-write; the file is parsed on that close and
  plain modifications (writes, chmod, touch) are ignored.
- Other observers only report modifications; the file is parsed once no
  further event has arrived for ``settle_delay`` seconds.

A file that appears without being written in place (hard link, move from
another directory) is parsed after ``settle_delay`` unless a write follows.
Renames inside the directory are atomic and parsed immediately.
"""

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from ereminders.errors import WatchSourceError
from ereminders.events import JobEvent, JobRemoved, JobUpserted
from ereminders.jobs.files import is_valid_job_file, load_job_file
from ereminders.jobs.parser import JobParser

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY = 1.0


def _event_path(raw: bytes | str) -> Path:
    return Path(os.fsdecode(raw))


def _reports_close_events(observer: BaseObserver) -> bool:
    return type(observer).__module__ == "watchdog.observers.inotify"


class _JobFileHandler(FileSystemEventHandler):
    def __init__(self, watcher: "JobDirectoryWatcher"):
        self._watcher = watcher

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._watcher.settle(_event_path(event.src_path))

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = _event_path(event.src_path)
        if self._watcher.close_events:
            # The writer still has the file open; its close triggers the parse
            self._watcher.cancel(path)
        else:
            self._watcher.settle(path)

    def on_closed(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            path = _event_path(event.src_path)
            self._watcher.cancel(path)
            self._watcher.load(path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            path = _event_path(event.src_path)
            self._watcher.cancel(path)
            self._watcher.remove(path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        src = _event_path(event.src_path)
        self._watcher.cancel(src)
        self._watcher.remove(src)
        self._watcher.load(_event_path(event.dest_path))


class JobDirectoryWatcher:
    """Watches one directory (non-recursively) for job descriptor changes.

    Args:
        jobs_dir: Directory to watch.
        parser: Parser for descriptor content.
        emit: Thread-safe sink for job events.
        settle_delay: Quiet period before parsing a file whose writer cannot
            be observed closing it.
        close_events: Whether the observer reports close-after-write. Detected
            from the observer when None.
    """

    def __init__(
        self,
        jobs_dir: Path,
        parser: JobParser,
        emit: Callable[[JobEvent], object],
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        close_events: bool | None = None,
    ):
        self._jobs_dir = jobs_dir
        self._parser = parser
        self._emit = emit
        self._settle_delay = settle_delay
        self._close_events = close_events
        self._observer: BaseObserver | None = None
        self._pending: dict[Path, threading.Timer] = {}
        self._lock = threading.Lock()
        self.event_handler = _JobFileHandler(self)

    @property
    def jobs_dir(self) -> Path:
        return self._jobs_dir

    @property
    def close_events(self) -> bool:
        return bool(self._close_events)

    @property
    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def start(self) -> None:
        """Start watching.

        Raises:
            WatchSourceError: If the directory is missing or cannot be watched.
        """
        if not self._jobs_dir.is_dir():
            raise WatchSourceError(f"Jobs directory does not exist: {self._jobs_dir}")

        observer = Observer()
        if self._close_events is None:
            self._close_events = _reports_close_events(observer)
        try:
            observer.schedule(self.event_handler, str(self._jobs_dir), recursive=False)
            observer.start()
        except OSError as e:
            raise WatchSourceError(
                f"Cannot watch jobs directory {self._jobs_dir}: {e}"
            ) from e

        self._observer = observer
        logger.info(
            "watcher_started",
            extra={
                "file.path": str(self._jobs_dir),
                "watcher.close_events": self._close_events,
            },
        )

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        with self._lock:
            for timer in self._pending.values():
                timer.cancel()
            self._pending.clear()
        logger.info("watcher_stopped")

    def settle(self, path: Path) -> None:
        """(Re)start the quiet-period timer for a file."""
        if not self._is_watched(path):
            return
        timer = threading.Timer(self._settle_delay, self._settled, args=(path,))
        timer.daemon = True
        with self._lock:
            previous = self._pending.pop(path, None)
            self._pending[path] = timer
        if previous is not None:
            previous.cancel()
        timer.start()

    def cancel(self, path: Path) -> None:
        with self._lock:
            timer = self._pending.pop(path, None)
        if timer is not None:
            timer.cancel()

    def _settled(self, path: Path) -> None:
        with self._lock:
            timer = self._pending.get(path)
            if timer is None or timer is not threading.current_thread():
                return
            del self._pending[path]
        self.load(path)

    def load(self, path: Path) -> None:
        """Parse a finished descriptor and emit it."""
        if not self._is_watched(path):
            return
        try:
            if path.stat().st_size == 0:
                logger.debug(f"Skipping empty job file: {path}")
                return
        except FileNotFoundError:
            return

        logger.debug(f"FS event: loading job file {path}")
        job = load_job_file(path, self._parser)
        if job is not None:
            self._emit(JobUpserted(job))

    def remove(self, path: Path) -> None:
        if not self._is_watched(path):
            return
        logger.debug(f"FS event: removing job {path}")
        self._emit(JobRemoved(str(path)))

    def _is_watched(self, path: Path) -> bool:
        return path.parent == self._jobs_dir and is_valid_job_file(path)

"""Shared test fixtures and factories."""

import shutil
import tempfile
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from ereminders.config.models import EmailConfig, EremindersConfig, RetryConfig
from ereminders.errors import TransportError
from ereminders.jobs.parser import JobParser
from ereminders.jobs.types import Job, RepeatKind
from ereminders.mail import MailMessage

NOW = datetime(2026, 3, 10, 12, 0, 0, tzinfo=UTC)


# =============================================================================
# Clock / resolver / transport fakes
# =============================================================================


class MutableClock:
    """A clock that only moves when told to."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class FixedResolver:
    """Resolves only the date texts it was given."""

    def __init__(self, dates: dict[str, datetime] | None = None):
        self.dates = dict(dates or {})
        self.calls: list[tuple[str, datetime]] = []

    def __call__(self, text: str, now: datetime) -> datetime | None:
        self.calls.append((text, now))
        return self.dates.get(text)


class RecordingTransport:
    """Collects sent messages; optionally fails the first N sends."""

    def __init__(self, fail_times: int = 0, retryable: bool = True):
        self.sent: list[MailMessage] = []
        self.attempts = 0
        self._fail_times = fail_times
        self._retryable = retryable

    async def send(self, message: MailMessage) -> None:
        self.attempts += 1
        if self.attempts <= self._fail_times:
            raise TransportError("connection refused", retryable=self._retryable)
        self.sent.append(message)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def resolver() -> FixedResolver:
    return FixedResolver(
        {
            "tomorrow": NOW + timedelta(days=1),
            "yesterday": NOW - timedelta(days=1),
            "three days ago": NOW - timedelta(days=3),
            "now": NOW,
        }
    )


@pytest.fixture
def parser(resolver: FixedResolver, clock: MutableClock) -> JobParser:
    return JobParser(resolver, clock)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def email_config() -> EmailConfig:
    return EmailConfig(to="me@example.com", sender="E-Reminders <bot@example.com>")


@pytest.fixture
def no_retry() -> RetryConfig:
    return RetryConfig(max_attempts=1, base_delay=0)


@pytest.fixture
def config(email_config: EmailConfig, short_tmp: Path) -> EremindersConfig:
    return EremindersConfig(
        email=email_config,
        retry=RetryConfig(max_attempts=1, base_delay=0),
        timezone="UTC",
        socket_path=short_tmp / "ctl.sock",
    )


@pytest.fixture
def short_tmp() -> Iterator[Path]:
    """Temporary directory with a path short enough for a Unix socket."""
    path = Path(tempfile.mkdtemp(prefix="er-", dir="/tmp"))  # noqa: S108
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def jobs_dir(tmp_path: Path) -> Path:
    path = tmp_path / "jobs"
    path.mkdir()
    return path


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})


def make_job(
    key: str = "/jobs/a",
    when: datetime = NOW,
    message: str = "Hello",
    repeat: RepeatKind = RepeatKind.NONE,
) -> Job:
    return Job(source_key=key, scheduled_time=when, message=message, repeat=repeat)

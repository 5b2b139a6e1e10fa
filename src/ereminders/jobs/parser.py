"""Job descriptor parsing.

A descriptor file looks like::

    [repeat <daily|weekly|monthly>]
    <natural-language date expression>
    <blank line>
    <message line>
    [<message line> ...]

Parsing is pure: the caller supplies the file content and its path, and the
date resolver is injected so tests can pin "now".
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ereminders.errors import (
    InvalidRepeatDirectiveError,
    MalformedFileError,
    UnresolvableDateError,
)
from ereminders.jobs.repeat import advance_past
from ereminders.jobs.types import Job, RepeatKind

logger = logging.getLogger(__name__)

REPEAT_DIRECTIVE = "repeat"

# date line + blank line + at least one message line
MIN_BODY_LINES = 3


class DateResolver(Protocol):
    """Resolves free text to an absolute, timezone-aware timestamp."""

    def __call__(self, text: str, now: datetime) -> datetime | None: ...


class DateparserResolver:
    """Natural-language date resolution backed by ``dateparser``.

    Relative expressions ("in 2 hours", "tomorrow 9am") are resolved against
    ``now`` in the configured timezone, preferring future dates.
    """

    def __init__(self, timezone: str = "UTC"):
        self._timezone = timezone
        try:
            self._tz = ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("invalid_timezone", extra={"config.timezone": timezone})
            self._timezone = "UTC"
            self._tz = ZoneInfo("UTC")

    @property
    def timezone(self) -> str:
        return self._timezone

    def __call__(self, text: str, now: datetime) -> datetime | None:
        import dateparser

        settings: dict = {
            "TIMEZONE": self._timezone,
            "RETURN_AS_TIMEZONE_AWARE": True,
            "PREFER_DATES_FROM": "future",
            "RELATIVE_BASE": now.astimezone(self._tz).replace(tzinfo=None),
        }
        try:
            parsed = dateparser.parse(text, settings=settings)
        except (ValueError, OverflowError) as e:
            logger.debug(f"dateparser failed on {text!r}: {e}")
            return None
        if parsed is None:
            return None
        return parsed.astimezone(self._tz)


class JobParser:
    """Turns descriptor text into a Job."""

    def __init__(
        self,
        resolver: DateResolver,
        clock: Callable[[], datetime] | None = None,
    ):
        self._resolver = resolver
        self._clock = clock or (lambda: datetime.now(UTC))

    def parse(self, content: str, source_key: str, now: datetime | None = None) -> Job:
        """Parse descriptor content.

        Args:
            content: Full text of the descriptor file.
            source_key: Path of the file, used as the job's identity.
            now: Reference instant. Defaults to the parser's clock.

        Returns:
            The parsed Job. Repeating jobs are always scheduled after ``now``.

        Raises:
            InvalidRepeatDirectiveError: If the ``repeat`` line is malformed.
            MalformedFileError: If the date, blank or message lines are missing.
            UnresolvableDateError: If the date line cannot be resolved.
        """
        if now is None:
            now = self._clock()

        lines = content.splitlines()
        repeat = RepeatKind.NONE

        if lines and lines[0].strip().split(" ")[0] == REPEAT_DIRECTIVE:
            repeat = _parse_repeat_directive(lines[0], source_key)
            lines = lines[1:]

        if len(lines) < MIN_BODY_LINES:
            raise MalformedFileError(
                f"Expected a date line, a blank line and a message in {source_key}",
                source_key,
            )

        date_text = lines[0].strip()
        message = "".join(lines[2:])

        scheduled_time = self._resolver(date_text, now) if date_text else None
        if scheduled_time is None:
            raise UnresolvableDateError(
                f"Could not resolve date {date_text!r} in {source_key}", source_key
            )

        if repeat.is_repeating and scheduled_time <= now:
            scheduled_time = advance_past(repeat, scheduled_time, now)

        return Job(
            source_key=source_key,
            scheduled_time=scheduled_time,
            message=message,
            repeat=repeat,
        )


def _parse_repeat_directive(line: str, source_key: str) -> RepeatKind:
    tokens = line.strip().split(" ")
    if len(tokens) != 2:
        raise InvalidRepeatDirectiveError(
            f"Expected 'repeat <daily|weekly|monthly>', got {line!r}", source_key
        )
    kind = RepeatKind.from_directive(tokens[1])
    if kind is None:
        raise InvalidRepeatDirectiveError(
            f"Unknown repeat cadence {tokens[1]!r}", source_key
        )
    return kind

"""Tests for job descriptor parsing."""

from datetime import UTC, datetime, timedelta

import pytest

from ereminders.errors import (
    InvalidRepeatDirectiveError,
    MalformedFileError,
    ParseError,
    UnresolvableDateError,
)
from ereminders.jobs.parser import DateparserResolver, JobParser
from ereminders.jobs.types import RepeatKind, render_descriptor
from tests.conftest import NOW, FixedResolver


class TestJobParser:
    """Tests for JobParser.parse."""

    def test_one_shot(self, parser):
        job = parser.parse("tomorrow\n\nWater the plants\n", "/jobs/plants")

        assert job.source_key == "/jobs/plants"
        assert job.scheduled_time == NOW + timedelta(days=1)
        assert job.message == "Water the plants"
        assert job.repeat is RepeatKind.NONE

    def test_message_lines_are_concatenated(self, parser):
        job = parser.parse("tomorrow\n\nfirst\nsecond\nthird", "/jobs/x")
        assert job.message == "firstsecondthird"

    def test_blank_line_content_is_ignored(self, parser):
        job = parser.parse("tomorrow\nnot really blank\nbody", "/jobs/x")
        assert job.message == "body"

    def test_resolver_gets_reference_now(self, parser, resolver):
        parser.parse("tomorrow\n\nbody", "/jobs/x")
        assert resolver.calls == [("tomorrow", NOW)]

    def test_explicit_now_overrides_clock(self, resolver):
        parser = JobParser(resolver)
        reference = datetime(2020, 1, 1, tzinfo=UTC)
        parser.parse("tomorrow\n\nbody", "/jobs/x", now=reference)
        assert resolver.calls[-1] == ("tomorrow", reference)

    def test_one_shot_may_resolve_to_past(self, parser):
        job = parser.parse("yesterday\n\nlate", "/jobs/x")
        assert job.scheduled_time == NOW - timedelta(days=1)

    def test_windows_line_endings(self, parser):
        job = parser.parse("tomorrow\r\n\r\nbody\r\n", "/jobs/x")
        assert job.message == "body"
        assert job.scheduled_time == NOW + timedelta(days=1)

    @pytest.mark.parametrize(
        ("word", "kind"),
        [
            ("daily", RepeatKind.DAILY),
            ("Weekly", RepeatKind.WEEKLY),
            ("MONTHLY", RepeatKind.MONTHLY),
        ],
    )
    def test_repeat_directive(self, parser, word, kind):
        job = parser.parse(f"repeat {word}\ntomorrow\n\nbody", "/jobs/x")
        assert job.repeat is kind
        assert job.scheduled_time == NOW + timedelta(days=1)

    def test_repeating_job_in_past_moves_to_future(self, parser):
        job = parser.parse("repeat daily\nthree days ago\n\nstretch", "/jobs/x")

        assert job.repeat is RepeatKind.DAILY
        assert job.scheduled_time > NOW
        assert job.scheduled_time == NOW + timedelta(days=1)

    def test_repeating_job_due_exactly_now_moves_forward(self, parser):
        job = parser.parse("repeat weekly\nnow\n\nbody", "/jobs/x")
        assert job.scheduled_time == NOW + timedelta(days=7)

    def test_repeat_wrong_token_count(self, parser):
        with pytest.raises(InvalidRepeatDirectiveError) as exc_info:
            parser.parse("repeat every day\ntomorrow\n\nbody", "/jobs/x")
        assert exc_info.value.kind == "InvalidRepeatDirective"
        assert exc_info.value.source_key == "/jobs/x"

    def test_repeat_missing_cadence(self, parser):
        with pytest.raises(InvalidRepeatDirectiveError):
            parser.parse("repeat\ntomorrow\n\nbody", "/jobs/x")

    def test_repeat_unknown_cadence(self, parser):
        with pytest.raises(InvalidRepeatDirectiveError):
            parser.parse("repeat yearly\ntomorrow\n\nbody", "/jobs/x")

    def test_repeat_none_is_not_a_cadence(self, parser):
        with pytest.raises(InvalidRepeatDirectiveError):
            parser.parse("repeat none\ntomorrow\n\nbody", "/jobs/x")

    def test_date_line_only_is_malformed(self, parser, resolver):
        with pytest.raises(MalformedFileError) as exc_info:
            parser.parse("tomorrow\n", "/jobs/x")
        assert exc_info.value.kind == "MalformedFile"
        # Structure is checked before the date is resolved
        assert resolver.calls == []

    def test_missing_message_is_malformed(self, parser):
        with pytest.raises(MalformedFileError):
            parser.parse("tomorrow\n\n", "/jobs/x")

    def test_empty_file_is_malformed(self, parser):
        with pytest.raises(MalformedFileError):
            parser.parse("", "/jobs/x")

    def test_repeat_only_is_malformed(self, parser):
        with pytest.raises(MalformedFileError):
            parser.parse("repeat daily\ntomorrow\n\n", "/jobs/x")

    def test_unresolvable_date(self, parser):
        with pytest.raises(UnresolvableDateError) as exc_info:
            parser.parse("when pigs fly\n\nbody", "/jobs/x")
        assert exc_info.value.kind == "UnresolvableDate"

    def test_empty_date_line_is_unresolvable(self, parser, resolver):
        with pytest.raises(UnresolvableDateError):
            parser.parse("\n\nbody", "/jobs/x")
        assert resolver.calls == []

    def test_errors_share_base_class(self, parser):
        with pytest.raises(ParseError):
            parser.parse("nonsense\n\nbody", "/jobs/x")


class TestRenderDescriptor:
    """Rendering a job back to descriptor text and parsing it again."""

    @pytest.mark.parametrize(
        "content",
        [
            "tomorrow\n\nWater the plants",
            "repeat daily\nthree days ago\n\nStretch",
            "repeat monthly\ntomorrow\n\nPay rent",
        ],
    )
    def test_round_trip(self, parser, content):
        job = parser.parse(content, "/jobs/x")

        text = render_descriptor(job)
        resolver = FixedResolver({job.scheduled_time.isoformat(): job.scheduled_time})
        reparsed = JobParser(resolver, lambda: NOW).parse(text, "/jobs/x")

        assert reparsed.repeat is job.repeat
        assert reparsed.message == job.message
        assert reparsed.scheduled_time == job.scheduled_time


class TestDateparserResolver:
    """Tests against the real dateparser backend."""

    def test_relative_expression(self):
        resolver = DateparserResolver("UTC")
        result = resolver("in 2 hours", NOW)

        assert result is not None
        assert result.tzinfo is not None
        assert abs(result - (NOW + timedelta(hours=2))) < timedelta(minutes=1)

    def test_absolute_date_in_timezone(self):
        resolver = DateparserResolver("America/New_York")
        result = resolver("2026-12-24 08:00", NOW)

        assert result is not None
        assert (result.year, result.month, result.day, result.hour) == (2026, 12, 24, 8)
        assert result.utcoffset() == timedelta(hours=-5)

    def test_garbage_returns_none(self):
        resolver = DateparserResolver("UTC")
        assert resolver("qwertyuiop asdfgh", NOW) is None

    def test_invalid_timezone_falls_back_to_utc(self):
        resolver = DateparserResolver("Not/AZone")
        assert resolver.timezone == "UTC"

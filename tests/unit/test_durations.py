"""Unit tests for compact duration parsing and rendering."""

from datetime import timedelta

import pytest

from fieldconf.durations import format_duration, parse_duration
from fieldconf.errors import DurationError


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("0", timedelta(0)),
        ("15s", timedelta(seconds=15)),
        ("300ms", timedelta(milliseconds=300)),
        ("1.5h", timedelta(hours=1, minutes=30)),
        ("2h45m10s", timedelta(hours=2, minutes=45, seconds=10)),
        ("-1m", timedelta(minutes=-1)),
        ("10us", timedelta(microseconds=10)),
        ("10µs", timedelta(microseconds=10)),
    ],
)
def test_parse_duration_accepts_unit_suffixed_components(text: str, expected: timedelta) -> None:
    """Duration parsing should sum every number/unit component."""

    assert parse_duration(text) == expected


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("", 'invalid duration ""'),
        ("abc", 'invalid duration "abc"'),
        ("15", 'missing unit in duration "15"'),
        ("5d", 'unknown unit "d" in duration "5d"'),
    ],
)
def test_parse_duration_reports_malformed_text(text: str, message: str) -> None:
    """Malformed durations should fail with a message naming the input."""

    with pytest.raises(DurationError) as excinfo:
        parse_duration(text)
    assert str(excinfo.value) == message


def test_format_duration_renders_parseable_text() -> None:
    """Rendering should produce the compact form accepted by the parser."""

    assert format_duration(timedelta(0)) == "0s"
    assert format_duration(timedelta(hours=1, minutes=30)) == "1h30m"
    assert format_duration(timedelta(seconds=1, milliseconds=500)) == "1.5s"
    assert format_duration(timedelta(minutes=-2)) == "-2m"
    assert parse_duration(format_duration(timedelta(hours=3, seconds=7))) == timedelta(hours=3, seconds=7)

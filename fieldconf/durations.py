"""Compact duration text parsing (`300ms`, `1.5h`, `2h45m10s`).

A duration is an optional sign followed by one or more decimal numbers, each
with a unit suffix. Valid units are `ns`, `us` (or `µs`), `ms`, `s`, `m`, and
`h`. The single literal `0` needs no unit. Sub-microsecond precision is
rounded by `datetime.timedelta`.
"""

from __future__ import annotations

from datetime import timedelta
import re

from .errors import DurationError


_UNIT_MICROSECONDS = {
    "ns": 0.001,
    "us": 1.0,
    "µs": 1.0,
    "μs": 1.0,
    "ms": 1_000.0,
    "s": 1_000_000.0,
    "m": 60_000_000.0,
    "h": 3_600_000_000.0,
}

_COMPONENT = re.compile(r"([0-9]*(?:\.[0-9]*)?)([^0-9.]*)")


def parse_duration(text: str) -> timedelta:
    """Parse duration text into a `timedelta`.

    Raises:
        DurationError: On empty numbers, missing or unknown units.
    """

    body = text
    negative = False
    if body[:1] in {"+", "-"}:
        negative = body[0] == "-"
        body = body[1:]

    if body == "0":
        return timedelta(0)
    if not body:
        raise DurationError(f'invalid duration "{text}"')

    total = 0.0
    position = 0
    while position < len(body):
        match = _COMPONENT.match(body, position)
        number, unit = match.group(1), match.group(2)
        if match.end() == position or number in {"", "."}:
            raise DurationError(f'invalid duration "{text}"')
        if not unit:
            raise DurationError(f'missing unit in duration "{text}"')
        if unit not in _UNIT_MICROSECONDS:
            raise DurationError(f'unknown unit "{unit}" in duration "{text}"')
        total += float(number) * _UNIT_MICROSECONDS[unit]
        position = match.end()

    try:
        value = timedelta(microseconds=total)
    except OverflowError:
        raise DurationError(f'invalid duration "{text}"') from None
    return -value if negative else value


def format_duration(value: timedelta) -> str:
    """Render a `timedelta` in the compact form accepted by `parse_duration`."""

    micros = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
    if micros == 0:
        return "0s"

    sign = "-" if micros < 0 else ""
    micros = abs(micros)
    hours, micros = divmod(micros, 3_600_000_000)
    minutes, micros = divmod(micros, 60_000_000)
    seconds, micros = divmod(micros, 1_000_000)

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds or micros:
        fraction = f".{micros:06d}".rstrip("0") if micros else ""
        parts.append(f"{seconds}{fraction}s")
    return sign + "".join(parts)

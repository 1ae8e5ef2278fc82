"""Duration string parsing for timeouts and retry intervals.

Durations are written as a sequence of decimal numbers, each with an
optional fraction and a unit suffix, such as "300ms", "1.5s" or "1h30m".
Valid units are "ns", "us" (or "µs"), "ms", "s", "m" and "h".
"""

from __future__ import annotations

import re
from datetime import timedelta


_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # micro sign
    "μs": 1e-6,  # greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

# Largest duration Go can represent: 2**63 - 1 nanoseconds, about 292 years.
_MAX_SECONDS = (2**63 - 1) / 1e9

_COMPONENT = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> timedelta:
    """Parse a duration string into a timedelta.

    Args:
        text: Duration such as "5m", "10s" or "1h30m". "0" is accepted
            without a unit; every other component needs one.

    Returns:
        The parsed duration.

    Raises:
        ValueError: If the string is empty, malformed or longer than about
            292 years.

    Example:
        >>> parse_duration("1m30s")
        datetime.timedelta(seconds=90)
    """
    if not isinstance(text, str):
        raise ValueError(f"invalid duration {text!r}")

    body = text
    sign = 1.0
    if body[:1] in ("-", "+"):
        sign = -1.0 if body[0] == "-" else 1.0
        body = body[1:]

    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration {text!r}")

    total = 0.0
    pos = 0
    while pos < len(body):
        match = _COMPONENT.match(body, pos)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        number, unit = match.groups()
        total += float(number) * _UNIT_SECONDS[unit]
        pos = match.end()

    if total > _MAX_SECONDS:
        raise ValueError(f"duration {text!r} is out of range")
    return timedelta(seconds=sign * total)


def format_duration(value: timedelta) -> str:
    """Render a timedelta in the same notation parse_duration accepts."""
    seconds = value.total_seconds()
    if seconds == 0:
        return "0s"
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    parts = []
    if hours:
        parts.append(f"{int(hours)}h")
    if minutes:
        parts.append(f"{int(minutes)}m")
    if secs:
        parts.append(f"{secs:g}s")
    return sign + "".join(parts)

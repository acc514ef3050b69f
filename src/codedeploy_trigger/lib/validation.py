"""Validation utilities for codedeploy-trigger.

Provides parsing and formatting of duration strings in the style accepted
by the --max-wait-duration and --poll-interval options (e.g. "30m", "1h30m",
"1.5h", "90s").
"""

from __future__ import annotations

import re
from datetime import timedelta

# Duration units and their length in seconds
DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")

# Valid TCP/UDP port range
MIN_PORT = 0
MAX_PORT = 65535


def parse_duration(value: str) -> timedelta:
    """Parse a duration string into a timedelta.

    A duration is a sequence of decimal numbers, each with an optional
    fraction and a unit suffix, such as "300ms", "1.5h" or "2h45m". The
    string "0" is accepted without a unit.

    Args:
        value: Duration string to parse

    Returns:
        Parsed duration

    Raises:
        ValueError: If the string is not a valid duration
    """
    text = value.strip()
    if not text:
        raise ValueError("Duration cannot be empty")
    if text == "0":
        return timedelta(0)

    sign = 1
    if text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    position = 0
    total = 0.0
    while position < len(text):
        match = DURATION_PART_RE.match(text, position)
        if not match:
            raise ValueError(f"Invalid duration: {value!r}")
        number, unit = match.groups()
        total += float(number) * DURATION_UNITS[unit]
        position = match.end()

    if position == 0:
        raise ValueError(f"Invalid duration: {value!r}")

    try:
        return timedelta(seconds=sign * total)
    except OverflowError as exc:
        raise ValueError(f"Invalid duration: {value!r}") from exc


def format_duration(duration: timedelta) -> str:
    """Format a timedelta the way parse_duration reads it (e.g. "1h30m0s")."""
    total = duration.total_seconds()
    if total == 0:
        return "0s"

    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)

    if seconds == int(seconds):
        seconds_text = f"{int(seconds)}s"
    else:
        seconds_text = f"{seconds:g}s"

    if hours:
        return f"{sign}{int(hours)}h{int(minutes)}m{seconds_text}"
    if minutes:
        return f"{sign}{int(minutes)}m{seconds_text}"
    return f"{sign}{seconds_text}"

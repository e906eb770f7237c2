"""
Time-of-day helpers.

All boundary times are "HH:MM" 24-hour strings. Internally everything is
compared as integer minutes since midnight.
"""

import re
from datetime import date, time

_HHMM = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::[0-5]\d)?$")

# date.weekday() order; English names regardless of process locale
WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def parse_hhmm(value: str) -> int:
    """
    Parse "HH:MM" (seconds tolerated and ignored) into minutes since midnight.
    Raises ValueError on anything else.
    """
    match = _HHMM.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Time must be in HH:MM format, got {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def from_minutes(minutes: int) -> time:
    return time(hour=minutes // 60, minute=minutes % 60)


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def times_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open overlap: ranges that only touch at an endpoint do not overlap."""
    return start1 < end2 and end1 > start2

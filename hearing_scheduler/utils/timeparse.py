"""Parsing helpers for hearing dates and times of day.

Form payloads carry dates and times as loose strings ("10:30", "2:15 PM",
"2025-03-14T00:00:00"). These helpers normalise them to `date` / `time`
values and raise ValueError on anything they cannot read.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])?\s*$")


def parse_time_of_day(value: str | time) -> time:
    """Parse a time of day.

    Args:
        value: `time` instance, 24h "HH:MM[:SS]" or 12h "H:MM AM/PM"

    Returns:
        Parsed time (seconds dropped)

    Raises:
        ValueError: If the value is not a recognisable time
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str):
        raise ValueError(f"Invalid hearing time: {value!r}")

    match = _TIME_RE.match(value)
    if not match:
        raise ValueError(f"Invalid hearing time: {value!r}")

    hours, minutes = int(match.group(1)), int(match.group(2))
    meridiem = match.group(4)
    if meridiem:
        if not 1 <= hours <= 12:
            raise ValueError(f"Invalid hearing time: {value!r}")
        is_pm = meridiem.upper() == "PM"
        if is_pm and hours < 12:
            hours += 12
        elif not is_pm and hours == 12:
            hours = 0

    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid hearing time: {value!r}")
    return time(hours, minutes)


def parse_hearing_date(value: str | date | datetime) -> date:
    """Parse a calendar date from a date, datetime or ISO string.

    Raises:
        ValueError: If the value is not a recognisable date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid hearing date: {value!r}")

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError as e:
        raise ValueError(f"Invalid hearing date: {value!r}") from e


def minutes_of_day(t: time) -> int:
    return t.hour * 60 + t.minute


def minutes_between(a: time, b: time) -> int:
    """Absolute gap in minutes between two times of day, ignoring date."""
    return abs(minutes_of_day(a) - minutes_of_day(b))

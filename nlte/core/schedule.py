"""
Schedule Calculator

Turns the date/time pieces captured from a scheduled send into an
absolute ms-epoch timestamp in local time.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

RELATIVE_DAYS = {
    "today": 0,
    "tomorrow": 1,
}

_TIME_OF_DAY = re.compile(
    r"^(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<meridiem>[ap]\.?m\.?)?$",
    re.IGNORECASE,
)


class ScheduleError(ValueError):
    """Date/time pieces that don't form a real moment."""


def to_24_hour(hour: int, meridiem: Optional[str]) -> int:
    """Apply an am/pm marker. Without one, ``hour`` is already 24-hour."""

    if not meridiem:
        return hour
    marker = meridiem.lower()
    if marker == "pm" and hour != 12:
        return hour + 12
    if marker == "am" and hour == 12:
        return 0
    return hour


def parse_time_of_day(text: str) -> Tuple[int, Optional[int], Optional[str]]:
    """
    Read "3", "3pm", "3 p.m.", "15:30" into (hour, minute, meridiem).

    The meridiem comes back normalised to "am"/"pm". Range checks are left
    to compute_scheduled_time.

    Raises:
        ScheduleError: the text is not a time of day.
    """
    match = _TIME_OF_DAY.match(text.strip())
    if match is None:
        raise ScheduleError(f"Invalid time: {text!r}")
    minute = match.group("minute")
    meridiem = match.group("meridiem")
    if meridiem:
        meridiem = meridiem.replace(".", "").lower()
    return int(match.group("hour")), int(minute) if minute is not None else None, meridiem


def resolve_day(day: str, now: datetime) -> date:
    """``today``/``tomorrow`` relative to ``now``; otherwise a ``YYYY-MM-DD`` calendar date."""

    key = day.lower().strip()
    if key in RELATIVE_DAYS:
        return (now + timedelta(days=RELATIVE_DAYS[key])).date()
    try:
        return date.fromisoformat(key)
    except ValueError as exc:
        raise ScheduleError(f"Invalid date: {day!r}") from exc


def compute_scheduled_time(
    day: str,
    hour: int | str,
    minute: int | str | None = None,
    meridiem: Optional[str] = None,
    now_ms: Optional[int] = None,
) -> int:
    """
    Compute the ms-epoch timestamp for a scheduled transfer.

    Seconds and milliseconds are zeroed. No check that the result lies in the
    future; whoever persists the transfer decides that.

    Raises:
        ScheduleError: the date, hour or minute is out of range.
    """
    now = datetime.fromtimestamp(now_ms / 1000) if now_ms is not None else datetime.now()

    hour_24 = to_24_hour(int(hour), meridiem)
    minute_value = int(minute) if minute not in (None, "") else 0
    if not 0 <= hour_24 <= 23:
        raise ScheduleError(f"Invalid hour: {hour}{meridiem or ''}")
    if not 0 <= minute_value <= 59:
        raise ScheduleError(f"Invalid minute: {minute}")

    target_day = resolve_day(day, now)
    scheduled = datetime.combine(target_day, datetime.min.time()).replace(
        hour=hour_24,
        minute=minute_value,
        second=0,
        microsecond=0,
    )
    return int(scheduled.timestamp() * 1000)


__all__ = [
    "RELATIVE_DAYS",
    "ScheduleError",
    "compute_scheduled_time",
    "parse_time_of_day",
    "resolve_day",
    "to_24_hour",
]

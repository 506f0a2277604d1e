"""
Time Conversion Utilities

Working hours and appointment times travel as zero-padded ``HH:mm`` strings.
Inside the engine every time of day is an integer number of minutes since
midnight, which keeps comparisons and arithmetic free of format bugs.
"""

import re
from datetime import date
from typing import Union

MINUTES_PER_DAY = 24 * 60

WEEKDAY_NAMES = (
    "monday", "tuesday", "wednesday", "thursday",
    "friday", "saturday", "sunday",
)

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def time_to_minutes(value: str, allow_end_of_day: bool = False) -> int:
    """
    Convert a time string (HH:mm) to minutes since midnight.

    Args:
        value: Time in HH:mm format (e.g. "09:30")
        allow_end_of_day: Accept "24:00" (1440) as the end of the day;
            only meaningful for closing and end times

    Returns:
        Minutes since midnight (e.g. "09:30" -> 570)

    Raises:
        ValueError: If the string is not a valid 24h time
    """
    match = _TIME_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time format: {value!r} (expected HH:mm)")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if allow_end_of_day and hours == 24 and minutes == 0:
        return MINUTES_PER_DAY
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time of day: {value!r}")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight to a zero-padded HH:mm string."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def calculate_end_time(start_time: Union[str, int], duration_minutes: int) -> str:
    """
    Calculate the display end time for a start time and duration.

    Wraps around midnight ("23:30" + 45 -> "00:15"); only used for display,
    never for comparisons.
    """
    start = time_to_minutes(start_time) if isinstance(start_time, str) else start_time
    return minutes_to_time((start + duration_minutes) % MINUTES_PER_DAY)


def coerce_minutes(value):
    """Pydantic helper: accept HH:mm strings wherever minutes are expected."""
    if isinstance(value, str):
        return time_to_minutes(value)
    return value


def coerce_end_minutes(value):
    """Like coerce_minutes, but also accepts "24:00" for closing and end times."""
    if isinstance(value, str):
        return time_to_minutes(value, allow_end_of_day=True)
    return value


def weekday_name(on_date: date) -> str:
    """Lower-case English weekday name for a date ("monday" ... "sunday")."""
    return WEEKDAY_NAMES[on_date.weekday()]

"""
Pure helpers for calendar dates and HH:mm time-of-day windows.

Times are compared as minutes since midnight. Dates are compared at day
granularity, independently of any time-of-day.
"""

from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Union

from ..core.exceptions import InvalidDateRange, InvalidTimeFormat

MINUTES_PER_DAY = 24 * 60
DEFAULT_BUFFER_MINUTES = 30


def to_minutes_of_day(value: str) -> int:
    """Parse ``HH:mm`` into minutes since midnight."""
    if not isinstance(value, str):
        raise InvalidTimeFormat(value)
    parts = value.strip().split(":")
    if len(parts) != 2:
        raise InvalidTimeFormat(value)
    hours, minutes = parts
    if not (hours.isdigit() and minutes.isdigit()):
        raise InvalidTimeFormat(value)
    h, m = int(hours), int(minutes)
    if h > 23 or m > 59:
        raise InvalidTimeFormat(value)
    return h * 60 + m


def minutes_to_time_string(minutes: int) -> str:
    """Render minutes since midnight as ``HH:mm``."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value: str) -> str:
    """Return a validated, zero-padded ``HH:mm`` string."""
    return minutes_to_time_string(to_minutes_of_day(value))


def parse_iso_date(value: Union[str, date]) -> date:
    """Accept a ``date`` or a ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise InvalidDateRange(f"Invalid date {value!r}. Expected YYYY-MM-DD", value=str(value))


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open interval overlap: [start_a, end_a) meets [start_b, end_b)."""
    return start_a < end_b and end_a > start_b


def within_buffer(a_end: int, b_start: int, buffer_minutes: int = DEFAULT_BUFFER_MINUTES) -> bool:
    """True when ``b`` starts less than ``buffer_minutes`` after ``a`` ends."""
    gap = b_start - a_end
    return 0 <= gap < buffer_minutes


def date_ranges_intersect(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Inclusive day-granularity intersection."""
    return a_start <= b_end and a_end >= b_start


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def validate_window(
    start_date: date,
    end_date: date,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
) -> None:
    """
    Reject inverted windows.

    Raises:
        InvalidDateRange: start date after end date, or on a single day a
            start time that is not before the end time
        InvalidTimeFormat: a time that is not HH:mm
    """
    if start_date > end_date:
        raise InvalidDateRange(
            "Start date cannot be after end date.",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
        )

    if (start_time is None) != (end_time is None):
        raise InvalidDateRange(
            "Start time and end time must be provided together.",
            start_time=start_time,
            end_time=end_time,
        )

    if start_time is None or end_time is None:
        return

    start_minutes = to_minutes_of_day(start_time)
    end_minutes = to_minutes_of_day(end_time)
    if start_date == end_date and start_minutes >= end_minutes:
        raise InvalidDateRange(
            "Start time must be before end time on the same day.",
            start_time=start_time,
            end_time=end_time,
        )

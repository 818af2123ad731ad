"""Clock-time and calendar arithmetic for reservations.

Times of day are ``HH:MM`` strings on a single local clock; dates are
``datetime.date``. Midnight wraparound is decided here and nowhere else.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

MINUTES_PER_DAY = 24 * 60
MIN_BOOKING_MINUTES = 30
MAX_BOOKING_MINUTES = 12 * 60

CLOCK_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def time_to_minutes(value: str) -> int:
    """Convert ``HH:MM`` to minutes since midnight (0-1439)."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    """Render a minute offset as ``HH:MM``, rolling over past midnight."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def spans_midnight(start_time: str, end_time: str) -> bool:
    return time_to_minutes(end_time) <= time_to_minutes(start_time)


def duration_minutes(start_time: str, end_time: str) -> int:
    """Length of a booking in minutes.

    23:00 -> 02:00 is 180 minutes: when the end is not after the start the
    booking is read as crossing midnight.
    """
    start = time_to_minutes(start_time)
    end = time_to_minutes(end_time)
    if end > start:
        return end - start
    return (MINUTES_PER_DAY - start) + end


def shift_date(value: date, days: int) -> date:
    return value + timedelta(days=days)


def end_date_for(start_date: date, start_time: str, end_time: str) -> date:
    """Calendar date on which a booking ends."""
    if spans_midnight(start_time, end_time):
        return shift_date(start_date, 1)
    return start_date


def is_slot_in_past(start_date: date, start_time: str, now: datetime) -> bool:
    """True unless the slot starts strictly after *now*."""
    hours, minutes = divmod(time_to_minutes(start_time), 60)
    slot_start = datetime(start_date.year, start_date.month, start_date.day, hours, minutes)
    return slot_start <= now


def is_date_in_past(value: date, today: date) -> bool:
    return value < today

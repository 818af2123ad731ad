"""Service for detecting overlapping reservations on one absolute timeline."""

from __future__ import annotations

from datetime import date

from room_scheduler.domain.models import Reservation
from room_scheduler.domain.timemath import MINUTES_PER_DAY, time_to_minutes


def to_absolute_minutes(day: date, clock_time: str) -> int:
    """Minutes since the proleptic Gregorian epoch for *day* at *clock_time*."""
    return day.toordinal() * MINUTES_PER_DAY + time_to_minutes(clock_time)


def overlaps(
    a_start_date: date,
    a_start_time: str,
    a_end_date: date,
    a_end_time: str,
    b_start_date: date,
    b_start_time: str,
    b_end_date: date,
    b_end_time: str,
) -> bool:
    """Return True when the two bookings share at least one minute.

    Overlap rule: a_start < b_end AND a_end > b_start.
    Exact boundary touches (end == start) are NOT considered conflicts, also
    when the touch happens across midnight.
    """
    a_start = to_absolute_minutes(a_start_date, a_start_time)
    a_end = to_absolute_minutes(a_end_date, a_end_time)
    b_start = to_absolute_minutes(b_start_date, b_start_time)
    b_end = to_absolute_minutes(b_end_date, b_end_time)
    return a_start < b_end and a_end > b_start


def find_conflicts(
    start_date: date,
    start_time: str,
    end_date: date,
    end_time: str,
    existing: list[Reservation],
) -> list[Reservation]:
    """Return existing reservations that overlap with the requested span."""
    return [
        reservation
        for reservation in existing
        if overlaps(
            start_date,
            start_time,
            end_date,
            end_time,
            reservation.start_date,
            reservation.start_time,
            reservation.end_date,
            reservation.end_time,
        )
    ]


def blocking_conflict(conflicts: list[Reservation], user_id: str) -> Reservation | None:
    """First overlapping reservation held by someone other than *user_id*."""
    for reservation in conflicts:
        if reservation.user_id != user_id:
            return reservation
    return None

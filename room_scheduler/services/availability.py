"""Free-window calculation for a single room on a single date."""

from __future__ import annotations

from datetime import date

from room_scheduler.domain.models import AvailableWindow, BookedInterval, Reservation
from room_scheduler.domain.timemath import MINUTES_PER_DAY, time_to_minutes
from room_scheduler.repos.memory import ReservationRepository


def project_onto_date(reservation: Reservation, day: date) -> BookedInterval | None:
    """Clip a reservation to the minute-of-day axis of *day*.

    A booking that runs past midnight covers [start, 1440) on its first date
    and [0, end) on the next one.
    """
    starts_here = reservation.start_date == day
    ends_here = reservation.end_date == day
    if starts_here and ends_here:
        start, end = time_to_minutes(reservation.start_time), time_to_minutes(reservation.end_time)
    elif starts_here:
        start, end = time_to_minutes(reservation.start_time), MINUTES_PER_DAY
    elif ends_here:
        start, end = 0, time_to_minutes(reservation.end_time)
    else:
        return None
    if end <= start:
        return None
    return BookedInterval(start=start, end=end)


def merge_intervals(intervals: list[BookedInterval]) -> list[BookedInterval]:
    """Merge overlapping or touching intervals.

    Example: [09:00-10:00, 10:00-11:00, 10:30-12:00] -> [09:00-12:00]
    """
    merged: list[BookedInterval] = []
    for interval in sorted(intervals, key=lambda i: (i.start, i.end)):
        if merged and interval.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = BookedInterval(start=last.start, end=max(last.end, interval.end))
        else:
            merged.append(interval)
    return merged


def invert_intervals(
    merged: list[BookedInterval], min_duration: int = 0
) -> list[AvailableWindow]:
    """Turn sorted, merged busy blocks into the free gaps of the day."""
    windows: list[AvailableWindow] = []
    cursor = 0

    for block in merged:
        if block.start > cursor and block.start - cursor >= min_duration:
            windows.append(AvailableWindow(start=cursor, end=block.start))
        cursor = max(cursor, block.end)

    if cursor < MINUTES_PER_DAY and MINUTES_PER_DAY - cursor >= min_duration:
        windows.append(AvailableWindow(start=cursor, end=MINUTES_PER_DAY))

    return windows


class AvailabilityScanner:
    """
    Computes the open minute-windows of a room on one date.

    Algorithm:
    1. Fetch every reservation of the room whose date span includes the date
    2. Project each one onto that date
    3. Sort and merge overlapping or touching blocks
    4. Invert the blocks against the whole day
    5. Drop gaps shorter than the requested minimum
    """

    def __init__(self, reservation_repo: ReservationRepository) -> None:
        self._reservations = reservation_repo

    def booked_intervals(self, room_id: str, day: date) -> list[BookedInterval]:
        intervals: list[BookedInterval] = []
        for reservation in self._reservations.find_by_room_and_date_range(room_id, day, day):
            interval = project_onto_date(reservation, day)
            if interval is not None:
                intervals.append(interval)
        return sorted(intervals, key=lambda i: (i.start, i.end))

    def find_available_windows(
        self, room_id: str, day: date, min_duration: int = 0
    ) -> list[AvailableWindow]:
        merged = merge_intervals(self.booked_intervals(room_id, day))
        return invert_intervals(merged, min_duration)

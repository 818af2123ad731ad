"""Tests for clock-time and calendar arithmetic."""

from __future__ import annotations

from datetime import date, datetime

from room_scheduler.domain.timemath import (
    duration_minutes,
    end_date_for,
    is_date_in_past,
    is_slot_in_past,
    minutes_to_time,
    shift_date,
    spans_midnight,
    time_to_minutes,
)


def test_time_to_minutes():
    assert time_to_minutes("00:00") == 0
    assert time_to_minutes("09:30") == 570
    assert time_to_minutes("23:59") == 1439


def test_minutes_to_time_wraps_past_midnight():
    assert minutes_to_time(570) == "09:30"
    assert minutes_to_time(1440) == "00:00"
    assert minutes_to_time(1500) == "01:00"


def test_duration_same_day():
    assert duration_minutes("09:00", "17:00") == 480


def test_duration_wraps_midnight():
    assert duration_minutes("23:00", "02:00") == 180
    assert duration_minutes("22:30", "00:00") == 90


def test_spans_midnight():
    assert spans_midnight("23:00", "02:00") is True
    assert spans_midnight("10:00", "00:00") is True
    assert spans_midnight("09:00", "10:00") is False


def test_shift_date_crosses_month_and_year():
    assert shift_date(date(2026, 12, 31), 1) == date(2027, 1, 1)
    assert shift_date(date(2026, 3, 1), -1) == date(2026, 2, 28)
    assert shift_date(date(2028, 3, 1), -1) == date(2028, 2, 29)


def test_end_date_for_midnight_spanning_booking():
    day = date(2026, 6, 26)
    assert end_date_for(day, "23:00", "02:00") == date(2026, 6, 27)
    assert end_date_for(day, "10:00", "00:00") == date(2026, 6, 27)
    assert end_date_for(day, "09:00", "10:00") == day


def test_slot_starting_now_is_in_the_past():
    """Only slots strictly after now are bookable."""
    now = datetime(2026, 6, 25, 10, 0)
    assert is_slot_in_past(date(2026, 6, 25), "10:00", now) is True
    assert is_slot_in_past(date(2026, 6, 25), "10:01", now) is False
    assert is_slot_in_past(date(2026, 6, 24), "23:59", now) is True


def test_is_date_in_past():
    today = date(2026, 6, 25)
    assert is_date_in_past(date(2026, 6, 24), today) is True
    assert is_date_in_past(today, today) is False

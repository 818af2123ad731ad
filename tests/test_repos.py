"""Tests for the in-memory repositories."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from room_scheduler.domain.models import Reservation, TimelineEntry, TimelineEntryType
from room_scheduler.repos.memory import ReservationRepository, TimelineRepository

JUNE_25 = date(2026, 6, 25)
JUNE_26 = date(2026, 6, 26)


@pytest.fixture()
def repo() -> ReservationRepository:
    repo = ReservationRepository()
    repo.add(
        Reservation(
            reservation_id="res-1",
            room_id="room-1",
            user_id="user-1",
            start_date=JUNE_25,
            end_date=JUNE_25,
            start_time="10:00",
            end_time="11:00",
        )
    )
    return repo


# ---------------------------------------------------------------------------
# Reservations
# ---------------------------------------------------------------------------


def test_update_in_place_keeps_id(repo):
    updated = repo.update_in_place(
        "res-1", end_date=JUNE_26, start_time="23:00", end_time="01:00"
    )

    assert updated.reservation_id == "res-1"
    assert repo.get("res-1") is updated
    assert (updated.start_time, updated.end_time, updated.end_date) == ("23:00", "01:00", JUNE_26)
    assert len(repo.list_all()) == 1


def test_update_in_place_rejects_inconsistent_span(repo):
    # crosses midnight but keeps the same end date
    with pytest.raises(ValidationError):
        repo.update_in_place("res-1", start_time="23:00", end_time="01:00")

    stored = repo.get("res-1")
    assert (stored.start_time, stored.end_time, stored.end_date) == ("10:00", "11:00", JUNE_25)


def test_update_in_place_unknown_id(repo):
    assert repo.update_in_place("res-9", start_time="12:00") is None


def test_delete_reports_whether_removed(repo):
    assert repo.delete("res-1") is True
    assert repo.delete("res-1") is False


# ---------------------------------------------------------------------------
# Timeline
# ---------------------------------------------------------------------------


def test_timeline_reset():
    timeline = TimelineRepository()
    timeline.add(TimelineEntry(reservation_id="res-1", type=TimelineEntryType.CREATED))

    timeline.reset()

    assert timeline.list_for_reservation("res-1") == []

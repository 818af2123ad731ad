"""Tests for the notification bus and the timeline-recording handlers."""

from __future__ import annotations

import pytest

from room_scheduler.domain.bus import EventBus
from room_scheduler.domain.events import (
    BookingConflict,
    ReservationCancelled,
    ReservationCreated,
    ReservationUpdated,
)
from room_scheduler.domain.handlers import HandlerRegistry
from room_scheduler.domain.models import TimelineEntryType
from room_scheduler.repos.memory import TimelineRepository


@pytest.fixture()
def env():
    """Fresh bus + timeline + registry for each test."""
    bus = EventBus()
    timeline_repo = TimelineRepository()
    registry = HandlerRegistry(bus=bus, timeline_repo=timeline_repo)

    class Env:
        pass

    e = Env()
    e.bus = bus
    e.timeline_repo = timeline_repo
    e.registry = registry
    return e


# ---------------------------------------------------------------------------
# Bus
# ---------------------------------------------------------------------------


def test_publish_without_subscribers_is_noop():
    EventBus().publish(ReservationCancelled(reservation_id="r", user_id="u"))


def test_handlers_run_in_registration_order():
    bus = EventBus()
    calls = []
    bus.subscribe(ReservationCancelled, lambda e: calls.append(("first", e.reservation_id)))
    bus.subscribe(ReservationCancelled, lambda e: calls.append(("second", e.reservation_id)))

    bus.publish(ReservationCancelled(reservation_id="res-1", user_id="user-1"))

    assert calls == [("first", "res-1"), ("second", "res-1")]


def test_handlers_only_see_their_event_type():
    bus = EventBus()
    seen = []
    bus.subscribe(ReservationCreated, seen.append)

    bus.publish(ReservationCancelled(reservation_id="res-1", user_id="user-1"))

    assert seen == []


def test_handler_error_reaches_publisher():
    bus = EventBus()

    def boom(_event):
        raise RuntimeError("handler failed")

    bus.subscribe(ReservationCreated, boom)
    with pytest.raises(RuntimeError, match="handler failed"):
        bus.publish(ReservationCreated(reservation_id="r", room_id="room-1", user_id="u"))


# ---------------------------------------------------------------------------
# Timeline entries
# ---------------------------------------------------------------------------


def test_created_entry(env):
    env.bus.publish(ReservationCreated(reservation_id="res-1", room_id="room-1", user_id="user-1"))

    entries = env.timeline_repo.list_for_reservation("res-1")
    assert len(entries) == 1
    assert entries[0].type == TimelineEntryType.CREATED
    assert entries[0].payload == {"room_id": "room-1", "user_id": "user-1"}


def test_full_lifecycle_recorded_in_order(env):
    env.bus.publish(ReservationCreated(reservation_id="res-1", room_id="room-1", user_id="user-1"))
    env.bus.publish(
        BookingConflict(
            reservation_id="res-1",
            requested_by="user-2",
            suggestion="Nearest available slot: 11:00-12:00.",
        )
    )
    env.bus.publish(ReservationUpdated(reservation_id="res-1", slot="2026-06-25 10:30-11:30"))
    env.bus.publish(ReservationCancelled(reservation_id="res-1", user_id="user-1"))

    types = [e.type for e in env.timeline_repo.list_for_reservation("res-1")]
    assert types == [
        TimelineEntryType.CREATED,
        TimelineEntryType.CONFLICT_DETECTED,
        TimelineEntryType.UPDATED,
        TimelineEntryType.CANCELLED,
    ]


def test_conflict_entry_lands_on_blocking_reservation(env):
    env.bus.publish(
        BookingConflict(reservation_id="res-1", requested_by="user-2", suggestion="No available slots found.")
    )

    entries = env.timeline_repo.list_for_reservation("res-1")
    assert entries[0].payload["requested_by"] == "user-2"
    assert entries[0].payload["suggestion"] == "No available slots found."


def test_timelines_are_kept_per_reservation(env):
    env.bus.publish(ReservationCreated(reservation_id="res-1", room_id="room-1", user_id="user-1"))
    env.bus.publish(ReservationCreated(reservation_id="res-2", room_id="room-1", user_id="user-2"))

    assert len(env.timeline_repo.list_for_reservation("res-1")) == 1
    assert len(env.timeline_repo.list_for_reservation("res-2")) == 1
    assert env.timeline_repo.list_for_reservation("res-3") == []

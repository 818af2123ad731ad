"""Lifecycle notification handlers, wired up at application startup."""

from __future__ import annotations

import logging

from room_scheduler.domain.bus import EventBus
from room_scheduler.domain.events import (
    BookingConflict,
    ReservationCancelled,
    ReservationCreated,
    ReservationUpdated,
)
from room_scheduler.domain.models import TimelineEntry, TimelineEntryType
from room_scheduler.repos.memory import TimelineRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Subscribes timeline-recording handlers to the bus."""

    def __init__(self, bus: EventBus, timeline_repo: TimelineRepository) -> None:
        self.bus = bus
        self.timeline_repo = timeline_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(ReservationCreated, self.on_reservation_created)
        self.bus.subscribe(ReservationUpdated, self.on_reservation_updated)
        self.bus.subscribe(ReservationCancelled, self.on_reservation_cancelled)
        self.bus.subscribe(BookingConflict, self.on_booking_conflict)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_reservation_created(self, event: ReservationCreated) -> None:
        logger.debug("Recording creation of %s", event.reservation_id)
        self.timeline_repo.add(
            TimelineEntry(
                reservation_id=event.reservation_id,
                type=TimelineEntryType.CREATED,
                payload={"room_id": event.room_id, "user_id": event.user_id},
            )
        )

    def on_reservation_updated(self, event: ReservationUpdated) -> None:
        logger.debug("Recording update of %s to %s", event.reservation_id, event.slot)
        self.timeline_repo.add(
            TimelineEntry(
                reservation_id=event.reservation_id,
                type=TimelineEntryType.UPDATED,
                payload={"slot": event.slot},
            )
        )

    def on_reservation_cancelled(self, event: ReservationCancelled) -> None:
        logger.debug("Recording cancellation of %s", event.reservation_id)
        self.timeline_repo.add(
            TimelineEntry(
                reservation_id=event.reservation_id,
                type=TimelineEntryType.CANCELLED,
                payload={"user_id": event.user_id},
            )
        )

    def on_booking_conflict(self, event: BookingConflict) -> None:
        # Recorded on the reservation that blocked the request
        logger.info(
            "Request by %s blocked by reservation %s", event.requested_by, event.reservation_id
        )
        self.timeline_repo.add(
            TimelineEntry(
                reservation_id=event.reservation_id,
                type=TimelineEntryType.CONFLICT_DETECTED,
                payload={"requested_by": event.requested_by, "suggestion": event.suggestion},
            )
        )

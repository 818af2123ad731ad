"""FastAPI application, the entry point for the room reservation service."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Annotated

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Response, status

from room_scheduler.config import Settings
from room_scheduler.domain.bus import EventBus
from room_scheduler.domain.events import (
    BookingConflict,
    ReservationCancelled,
    ReservationCreated,
    ReservationUpdated,
)
from room_scheduler.domain.handlers import HandlerRegistry
from room_scheduler.domain.models import (
    BookingRequest,
    NotFoundKind,
    Outcome,
    OutcomeKind,
    TimelineEntry,
    WindowOut,
)
from room_scheduler.repos.memory import (
    TimelineRepository,
    create_reservation_repository,
    create_room_repository,
    create_user_repository,
)
from room_scheduler.services.reservations import ReservationService

logger = logging.getLogger(__name__)

_STATUS_FOR_KIND = {
    OutcomeKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    OutcomeKind.PAST_BOOKING: status.HTTP_400_BAD_REQUEST,
    OutcomeKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    OutcomeKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    OutcomeKind.CONFLICT: status.HTTP_409_CONFLICT,
}


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


class RoomLocks:
    """One lock per room so a conflict check and its write run as a unit."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = defaultdict(threading.Lock)

    def for_room(self, room_id: str) -> threading.Lock:
        with self._guard:
            return self._locks[room_id]


# ── Singletons (created at import time for simplicity) ────────────────
settings = Settings.from_env()
configure_logging(settings)

app = FastAPI(title="Meeting Room Reservation Service")

event_bus = EventBus()
reservation_repo = create_reservation_repository(seed=settings.seed_sample_data)
room_repo = create_room_repository()
user_repo = create_user_repository()
timeline_repo = TimelineRepository()
room_locks = RoomLocks()

handler_registry = HandlerRegistry(bus=event_bus, timeline_repo=timeline_repo)

reservation_service = ReservationService(
    reservation_repo=reservation_repo,
    room_repo=room_repo,
    user_repo=user_repo,
    settings=settings,
)


def _raise_for(outcome: Outcome) -> None:
    """Translate a failed outcome into an HTTP error response."""
    detail: dict = {"error": outcome.kind.value, "message": outcome.message}
    if outcome.missing is not None:
        detail["missing"] = outcome.missing.value
    if outcome.conflict is not None:
        detail["conflict"] = outcome.conflict.model_dump(mode="json")
    raise HTTPException(status_code=_STATUS_FOR_KIND[outcome.kind], detail=detail)


def current_user_id(
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> str:
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "unauthorized", "message": "Authentication required"},
        )
    return x_user_id


UserId = Annotated[str, Depends(current_user_id)]


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/api/health")
def health() -> dict:
    return {
        "message": "API is running",
        "data": {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()},
    }


@app.post("/api/reservations", status_code=status.HTTP_201_CREATED)
def create_reservation(
    payload: BookingRequest,
    response: Response,
    user_id: UserId,
) -> dict:
    """Book a room; an overlapping request by the same owner moves their booking."""
    with room_locks.for_room(payload.room_id):
        outcome = reservation_service.book(
            room_id=payload.room_id,
            start_date=payload.start_date,
            start_time=payload.start_time,
            end_time=payload.end_time,
            user_id=user_id,
        )

    if outcome.kind == OutcomeKind.CONFLICT:
        event_bus.publish(
            BookingConflict(
                reservation_id=outcome.conflict.reservation_id,
                requested_by=user_id,
                suggestion=outcome.conflict.suggestion,
            )
        )
    if not outcome.ok:
        _raise_for(outcome)

    reservation = outcome.reservation
    if outcome.was_updated:
        response.status_code = status.HTTP_200_OK
        event_bus.publish(
            ReservationUpdated(
                reservation_id=reservation.reservation_id,
                slot=f"{reservation.start_date} {reservation.start_time}-{reservation.end_time}",
            )
        )
    else:
        event_bus.publish(
            ReservationCreated(
                reservation_id=reservation.reservation_id,
                room_id=reservation.room_id,
                user_id=reservation.user_id,
            )
        )

    return {"message": outcome.message, "data": reservation.model_dump(mode="json")}


@app.delete("/api/reservations/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reservation(
    reservation_id: str,
    user_id: UserId,
) -> Response:
    existing = reservation_repo.get(reservation_id)
    if existing is None:
        outcome = reservation_service.cancel(reservation_id, user_id)
    else:
        with room_locks.for_room(existing.room_id):
            outcome = reservation_service.cancel(reservation_id, user_id)
    if not outcome.ok:
        _raise_for(outcome)

    event_bus.publish(ReservationCancelled(reservation_id=reservation_id, user_id=user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/api/reservations/{reservation_id}")
def get_reservation(
    reservation_id: str,
    _user_id: UserId,
) -> dict:
    outcome = reservation_service.get_reservation(reservation_id)
    if not outcome.ok:
        _raise_for(outcome)
    return {"message": outcome.message, "data": outcome.reservation.model_dump(mode="json")}


@app.get("/api/reservations/{reservation_id}/timeline", response_model=list[TimelineEntry])
def get_reservation_timeline(
    reservation_id: str,
    _user_id: UserId,
) -> list[TimelineEntry]:
    """Return the recorded lifecycle entries, oldest first."""
    entries = timeline_repo.list_for_reservation(reservation_id)
    if not entries and reservation_repo.get(reservation_id) is None:
        _raise_for(
            Outcome(
                kind=OutcomeKind.NOT_FOUND,
                missing=NotFoundKind.RESERVATION,
                message=f"Reservation '{reservation_id}' not found.",
            )
        )
    return entries


@app.get("/api/rooms/{room_id}/reservations")
def list_room_reservations(
    room_id: str,
    _user_id: UserId,
) -> dict:
    outcome = reservation_service.list_for_room(room_id)
    if not outcome.ok:
        _raise_for(outcome)
    return {
        "message": outcome.message,
        "data": [r.model_dump(mode="json") for r in outcome.reservations],
    }


@app.get("/api/rooms/{room_id}/availability")
def room_availability(
    room_id: str,
    day: Annotated[date, Query(alias="date")],
    _user_id: UserId,
    duration: Annotated[int, Query(ge=0, le=24 * 60)] = 0,
) -> dict:
    """Free windows of a room on one date, optionally at least *duration* minutes long."""
    outcome = reservation_service.availability(room_id, day, duration)
    if not outcome.ok:
        _raise_for(outcome)
    return {
        "message": outcome.message,
        "data": [WindowOut.from_window(w).model_dump() for w in outcome.windows],
    }

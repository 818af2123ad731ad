"""Notifications emitted by the HTTP layer after booking decisions."""

from __future__ import annotations

from pydantic import BaseModel


class ReservationCreated(BaseModel):
    """Fired when a booking request produced a new reservation."""

    reservation_id: str
    room_id: str
    user_id: str


class ReservationUpdated(BaseModel):
    """Fired when an owner's overlapping request rewrote their reservation."""

    reservation_id: str
    slot: str


class ReservationCancelled(BaseModel):
    """Fired after the owner cancelled a reservation."""

    reservation_id: str
    user_id: str


class BookingConflict(BaseModel):
    """Fired when a request was rejected because another owner holds the slot."""

    reservation_id: str
    requested_by: str
    suggestion: str

"""Domain models for the meeting-room reservation scheduler."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import StrEnum
from typing import Annotated

from pydantic import BaseModel, Field, model_validator

from room_scheduler.domain.timemath import (
    CLOCK_TIME_PATTERN,
    MINUTES_PER_DAY,
    duration_minutes,
    end_date_for,
    minutes_to_time,
)

CalendarDate = date
ClockTime = Annotated[str, Field(pattern=CLOCK_TIME_PATTERN, examples=["09:30"])]


class OutcomeKind(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    CANCELLED = "cancelled"
    LISTED = "listed"
    FOUND = "found"
    CONFLICT = "conflict"
    PAST_BOOKING = "past_booking"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID_INPUT = "invalid_input"


class NotFoundKind(StrEnum):
    ROOM = "room"
    USER = "user"
    RESERVATION = "reservation"


class TimelineEntryType(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    CANCELLED = "cancelled"
    CONFLICT_DETECTED = "conflict_detected"


SUCCESS_KINDS = frozenset(
    {
        OutcomeKind.CREATED,
        OutcomeKind.UPDATED,
        OutcomeKind.CANCELLED,
        OutcomeKind.LISTED,
        OutcomeKind.FOUND,
    }
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Room(BaseModel):
    room_id: str
    name: str


class User(BaseModel):
    user_id: str
    username: str
    name: str


class Reservation(BaseModel):
    reservation_id: str = Field(default_factory=_new_id)
    room_id: str
    user_id: str
    start_date: date
    end_date: date
    start_time: ClockTime
    end_time: ClockTime

    @model_validator(mode="after")
    def _consistent_span(self) -> Reservation:
        if self.start_time == self.end_time:
            raise ValueError("start_time and end_time cannot be the same")
        if self.end_date != end_date_for(self.start_date, self.start_time, self.end_time):
            raise ValueError("end_date does not match start_date and times")
        return self

    @property
    def duration_minutes(self) -> int:
        return duration_minutes(self.start_time, self.end_time)


class TimelineEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    reservation_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Derived minute-of-day spans
# ---------------------------------------------------------------------------


class BookedInterval(BaseModel):
    """A reservation projected onto one date's minute-of-day axis."""

    start: int = Field(ge=0, le=MINUTES_PER_DAY)
    end: int = Field(ge=0, le=MINUTES_PER_DAY)


class AvailableWindow(BaseModel):
    start: int = Field(ge=0, le=MINUTES_PER_DAY)
    end: int = Field(ge=0, le=MINUTES_PER_DAY)

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def start_time(self) -> str:
        return minutes_to_time(self.start)

    @property
    def end_time(self) -> str:
        # 1440 is the end of the day, not the next midnight
        if self.end == MINUTES_PER_DAY:
            return "24:00"
        return minutes_to_time(self.end)


class SlotSuggestion(BaseModel):
    time: str
    date: CalendarDate | None = None


class NearestSlots(BaseModel):
    before: SlotSuggestion | None = None
    after: SlotSuggestion | None = None


class ConflictDetail(BaseModel):
    reservation_id: str
    user_id: str
    user_name: str
    start_date: date
    end_date: date
    start_time: str
    end_time: str
    suggestion: str
    nearest: NearestSlots = Field(default_factory=NearestSlots)


class Outcome(BaseModel):
    """Result of a lifecycle operation, tagged by ``kind``."""

    kind: OutcomeKind
    message: str = ""
    reservation: Reservation | None = None
    reservations: list[Reservation] = Field(default_factory=list)
    windows: list[AvailableWindow] = Field(default_factory=list)
    conflict: ConflictDetail | None = None
    missing: NotFoundKind | None = None

    @property
    def ok(self) -> bool:
        return self.kind in SUCCESS_KINDS

    @property
    def was_updated(self) -> bool:
        return self.kind == OutcomeKind.UPDATED


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class BookingRequest(BaseModel):
    room_id: str = Field(min_length=1)
    start_date: date
    start_time: ClockTime
    end_time: ClockTime


class WindowOut(BaseModel):
    start: str
    end: str
    minutes: int

    @classmethod
    def from_window(cls, window: AvailableWindow) -> WindowOut:
        return cls(start=window.start_time, end=window.end_time, minutes=window.length)

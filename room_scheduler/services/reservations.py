"""Reservation lifecycle: booking, owner overwrite, cancellation and listing.

Every operation returns an ``Outcome`` tagged with what happened instead of
raising. The check-then-write sequence in ``book`` is not locked here; the
caller must serialize writes per room.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable

from room_scheduler.config import Settings
from room_scheduler.domain.models import (
    ConflictDetail,
    NotFoundKind,
    Outcome,
    OutcomeKind,
    Reservation,
)
from room_scheduler.domain.timemath import (
    duration_minutes,
    end_date_for,
    is_slot_in_past,
    time_to_minutes,
)
from room_scheduler.repos.memory import (
    ReservationRepository,
    RoomRepository,
    UserRepository,
)
from room_scheduler.services.availability import AvailabilityScanner
from room_scheduler.services.conflicts import blocking_conflict, find_conflicts
from room_scheduler.services.suggestions import SlotFinder, build_suggestion_message

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown User"


class ReservationService:
    def __init__(
        self,
        reservation_repo: ReservationRepository,
        room_repo: RoomRepository,
        user_repo: UserRepository,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.reservation_repo = reservation_repo
        self.room_repo = room_repo
        self.user_repo = user_repo
        self.settings = settings or Settings()
        self.clock = clock
        self.scanner = AvailabilityScanner(reservation_repo)
        self.slot_finder = SlotFinder(self.scanner, self.settings.max_search_days)

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def book(
        self,
        room_id: str,
        start_date: date,
        start_time: str,
        end_time: str,
        user_id: str,
    ) -> Outcome:
        logger.debug(
            "Booking request room=%s date=%s %s-%s user=%s",
            room_id, start_date, start_time, end_time, user_id,
        )

        invalid = self._check_duration(start_time, end_time)
        if invalid is not None:
            return invalid

        now = self.clock()
        if is_slot_in_past(start_date, start_time, now):
            return Outcome(
                kind=OutcomeKind.PAST_BOOKING,
                message="Cannot create a reservation in the past. Please select a future date and time.",
            )

        room = self.room_repo.get(room_id)
        if room is None:
            return Outcome(
                kind=OutcomeKind.NOT_FOUND,
                missing=NotFoundKind.ROOM,
                message=f"Room '{room_id}' not found. Please select a valid room.",
            )
        if not self.user_repo.exists(user_id):
            return Outcome(
                kind=OutcomeKind.NOT_FOUND,
                missing=NotFoundKind.USER,
                message="User not found",
            )

        end_date = end_date_for(start_date, start_time, end_time)
        minutes = duration_minutes(start_time, end_time)

        candidates = self.reservation_repo.find_by_room_and_date_range(room_id, start_date, end_date)
        conflicts = find_conflicts(start_date, start_time, end_date, end_time, candidates)

        blocking = blocking_conflict(conflicts, user_id)
        if blocking is not None:
            return self._reject(room.name, blocking, start_date, start_time, minutes, now.date())

        if not conflicts:
            reservation = self.reservation_repo.add(
                Reservation(
                    room_id=room_id,
                    user_id=user_id,
                    start_date=start_date,
                    end_date=end_date,
                    start_time=start_time,
                    end_time=end_time,
                )
            )
            logger.info(
                "Reservation created id=%s room=%s %s %s-%s",
                reservation.reservation_id, room_id, start_date, start_time, end_time,
            )
            return Outcome(
                kind=OutcomeKind.CREATED,
                reservation=reservation,
                message="Reservation created successfully",
            )

        # Every overlap belongs to the requester: move their booking
        existing = conflicts[0]
        logger.info(
            "Updating reservation id=%s for same owner: %s-%s -> %s-%s",
            existing.reservation_id, existing.start_time, existing.end_time, start_time, end_time,
        )
        updated = self.reservation_repo.update_in_place(
            existing.reservation_id,
            start_date=start_date,
            end_date=end_date,
            start_time=start_time,
            end_time=end_time,
        )
        if updated is None:
            raise RuntimeError(f"Reservation {existing.reservation_id} vanished during update")
        return Outcome(
            kind=OutcomeKind.UPDATED,
            reservation=updated,
            message="Your existing reservation has been updated to the new time slot",
        )

    def _check_duration(self, start_time: str, end_time: str) -> Outcome | None:
        if start_time == end_time:
            return Outcome(
                kind=OutcomeKind.INVALID_INPUT,
                message="Start time and end time cannot be the same",
            )
        minutes = duration_minutes(start_time, end_time)
        if minutes < self.settings.min_booking_minutes:
            return Outcome(
                kind=OutcomeKind.INVALID_INPUT,
                message=f"Booking must be at least {self.settings.min_booking_minutes} minutes long",
            )
        if minutes > self.settings.max_booking_minutes:
            return Outcome(
                kind=OutcomeKind.INVALID_INPUT,
                message=f"Booking duration cannot exceed {self.settings.max_booking_minutes} minutes",
            )
        return None

    def _reject(
        self,
        room_name: str,
        existing: Reservation,
        start_date: date,
        start_time: str,
        minutes: int,
        today: date,
    ) -> Outcome:
        owner_name = self.user_repo.display_name(existing.user_id) or UNKNOWN_USER
        nearest = self.slot_finder.find_nearest(
            existing.room_id, start_date, time_to_minutes(start_time), minutes, today
        )
        suggestion = build_suggestion_message(nearest.before, nearest.after)

        if existing.start_date == existing.end_date:
            date_info = f"on {existing.start_date.isoformat()}"
        else:
            date_info = f"from {existing.start_date.isoformat()} to {existing.end_date.isoformat()}"

        logger.warning(
            "Booking conflict room=%s with reservation id=%s owned by %s",
            existing.room_id, existing.reservation_id, existing.user_id,
        )
        return Outcome(
            kind=OutcomeKind.CONFLICT,
            message=(
                f"{room_name} is already booked from {existing.start_time}-{existing.end_time} "
                f"{date_info} by {owner_name}.{suggestion}"
            ),
            conflict=ConflictDetail(
                reservation_id=existing.reservation_id,
                user_id=existing.user_id,
                user_name=owner_name,
                start_date=existing.start_date,
                end_date=existing.end_date,
                start_time=existing.start_time,
                end_time=existing.end_time,
                suggestion=suggestion.strip(),
                nearest=nearest,
            ),
        )

    # ------------------------------------------------------------------
    # Cancellation and lookups
    # ------------------------------------------------------------------

    def cancel(self, reservation_id: str, user_id: str) -> Outcome:
        logger.debug("Cancel request reservation=%s user=%s", reservation_id, user_id)

        reservation = self.reservation_repo.get(reservation_id)
        if reservation is None:
            return Outcome(
                kind=OutcomeKind.NOT_FOUND,
                missing=NotFoundKind.RESERVATION,
                message=f"Reservation '{reservation_id}' not found. It may have already been cancelled.",
            )

        if reservation.user_id != user_id:
            owner_name = self.user_repo.display_name(reservation.user_id) or "another user"
            return Outcome(
                kind=OutcomeKind.FORBIDDEN,
                message=f"You cannot cancel this reservation. It belongs to {owner_name}.",
            )

        self.reservation_repo.delete(reservation_id)
        logger.info("Reservation cancelled id=%s user=%s", reservation_id, user_id)
        return Outcome(
            kind=OutcomeKind.CANCELLED,
            reservation=reservation,
            message="Reservation cancelled",
        )

    def list_for_room(self, room_id: str) -> Outcome:
        missing = self._missing_room(room_id)
        if missing is not None:
            return missing

        reservations = self.reservation_repo.list_for_room(room_id)
        logger.debug("Retrieved %d reservation(s) for room %s", len(reservations), room_id)
        return Outcome(
            kind=OutcomeKind.LISTED,
            reservations=reservations,
            message=f"Retrieved {len(reservations)} reservation(s) for room '{room_id}'",
        )

    def get_reservation(self, reservation_id: str) -> Outcome:
        reservation = self.reservation_repo.get(reservation_id)
        if reservation is None:
            return Outcome(
                kind=OutcomeKind.NOT_FOUND,
                missing=NotFoundKind.RESERVATION,
                message=f"Reservation '{reservation_id}' not found.",
            )
        return Outcome(kind=OutcomeKind.FOUND, reservation=reservation, message="Reservation found")

    def availability(self, room_id: str, day: date, min_duration: int = 0) -> Outcome:
        missing = self._missing_room(room_id)
        if missing is not None:
            return missing

        windows = self.scanner.find_available_windows(room_id, day, min_duration)
        return Outcome(
            kind=OutcomeKind.FOUND,
            windows=windows,
            message=f"Found {len(windows)} available window(s) for room '{room_id}' on {day.isoformat()}",
        )

    def _missing_room(self, room_id: str) -> Outcome | None:
        if self.room_repo.exists(room_id):
            return None
        known = ", ".join(room.room_id for room in self.room_repo.list_all())
        return Outcome(
            kind=OutcomeKind.NOT_FOUND,
            missing=NotFoundKind.ROOM,
            message=f"Room '{room_id}' not found. Available rooms: {known}",
        )

"""Nearest open slot search used to suggest alternatives on a conflict."""

from __future__ import annotations

import logging
from datetime import date

from room_scheduler.domain.models import AvailableWindow, NearestSlots, SlotSuggestion
from room_scheduler.domain.timemath import is_date_in_past, minutes_to_time, shift_date
from room_scheduler.services.availability import AvailabilityScanner

logger = logging.getLogger(__name__)

MAX_SEARCH_DAYS = 30


def _slot_text(start: int, duration: int) -> str:
    return f"{minutes_to_time(start)}-{minutes_to_time(start + duration)}"


def _latest_slot(window: AvailableWindow, duration: int, day: date | None = None) -> SlotSuggestion:
    return SlotSuggestion(time=_slot_text(window.end - duration, duration), date=day)


def _earliest_slot(window: AvailableWindow, duration: int, day: date | None = None) -> SlotSuggestion:
    return SlotSuggestion(time=_slot_text(window.start, duration), date=day)


class SlotFinder:
    """Looks for the closest free slot before and after a rejected request.

    The same day is checked first. Each direction then falls back to its own
    day-by-day scan, capped at ``max_search_days`` steps.
    """

    def __init__(self, scanner: AvailabilityScanner, max_search_days: int = MAX_SEARCH_DAYS) -> None:
        self._scanner = scanner
        self.max_search_days = max_search_days

    def find_nearest(
        self,
        room_id: str,
        day: date,
        attempted_start: int,
        duration: int,
        today: date,
    ) -> NearestSlots:
        windows = self._scanner.find_available_windows(room_id, day, duration)

        before = self.same_day_before(windows, attempted_start, duration)
        after = self.same_day_after(windows, attempted_start, duration)

        if before is None:
            before = self.search_backward(room_id, day, duration, today)
        if after is None:
            after = self.search_forward(room_id, day, duration)

        logger.debug(
            "Nearest slots for %s on %s: before=%s after=%s", room_id, day, before, after
        )
        return NearestSlots(before=before, after=after)

    @staticmethod
    def same_day_before(
        windows: list[AvailableWindow], attempted_start: int, duration: int
    ) -> SlotSuggestion | None:
        eligible = [
            w for w in windows if w.end <= attempted_start and w.length >= duration
        ]
        if not eligible:
            return None
        return _latest_slot(max(eligible, key=lambda w: w.end), duration)

    @staticmethod
    def same_day_after(
        windows: list[AvailableWindow], attempted_start: int, duration: int
    ) -> SlotSuggestion | None:
        for window in windows:
            if window.start > attempted_start and window.length >= duration:
                return _earliest_slot(window, duration)
        return None

    def search_backward(
        self, room_id: str, day: date, duration: int, today: date
    ) -> SlotSuggestion | None:
        search_date = day
        for _ in range(self.max_search_days):
            search_date = shift_date(search_date, -1)
            if is_date_in_past(search_date, today):
                return None
            windows = self._scanner.find_available_windows(room_id, search_date, duration)
            if windows:
                return _latest_slot(windows[-1], duration, search_date)
        return None

    def search_forward(self, room_id: str, day: date, duration: int) -> SlotSuggestion | None:
        search_date = day
        for _ in range(self.max_search_days):
            search_date = shift_date(search_date, 1)
            windows = self._scanner.find_available_windows(room_id, search_date, duration)
            if windows:
                return _earliest_slot(windows[0], duration, search_date)
        return None


def format_suggestion(slot: SlotSuggestion) -> str:
    if slot.date is not None:
        return f"{slot.date.isoformat()} at {slot.time}"
    return slot.time


def build_suggestion_message(
    before: SlotSuggestion | None, after: SlotSuggestion | None
) -> str:
    """Compose the sentence appended to a conflict message. Never empty."""
    if before and after:
        if before.date is None and after.date is None:
            return f" Nearest available slots: {before.time} (earlier) or {after.time} (later)."
        return (
            f" Nearest available slots: {format_suggestion(before)}"
            f" or {format_suggestion(after)}."
        )
    if before:
        return f" Nearest available slot: {format_suggestion(before)}."
    if after:
        return f" Nearest available slot: {format_suggestion(after)}."
    return " No available slots found."

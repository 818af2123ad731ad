"""In-memory repositories for rooms, users, reservations and timelines."""

from __future__ import annotations

from datetime import date

from room_scheduler.domain.models import Reservation, Room, TimelineEntry, User


class ReservationRepository:
    """Dict-backed store for Reservation instances, keyed by reservation_id."""

    def __init__(self) -> None:
        self._store: dict[str, Reservation] = {}

    def add(self, reservation: Reservation) -> Reservation:
        self._store[reservation.reservation_id] = reservation
        return reservation

    def get(self, reservation_id: str) -> Reservation | None:
        return self._store.get(reservation_id)

    def list_all(self) -> list[Reservation]:
        return list(self._store.values())

    def list_for_room(self, room_id: str) -> list[Reservation]:
        return [r for r in self._store.values() if r.room_id == room_id]

    def find_by_room_and_date_range(
        self, room_id: str, start_date: date, end_date: date
    ) -> list[Reservation]:
        """Reservations for *room_id* whose date span touches [start_date, end_date]."""
        return [
            r
            for r in self._store.values()
            if r.room_id == room_id
            and r.start_date <= end_date
            and r.end_date >= start_date
        ]

    def update_in_place(self, reservation_id: str, **fields) -> Reservation | None:
        """Replace fields of a stored reservation, keeping its id.

        The record is rebuilt so the span checks run again; an inconsistent
        update raises ``pydantic.ValidationError`` and leaves the store as is.
        """
        reservation = self._store.get(reservation_id)
        if reservation is None:
            return None
        updated = Reservation.model_validate(
            {**reservation.model_dump(), **fields, "reservation_id": reservation_id}
        )
        self._store[reservation_id] = updated
        return updated

    def delete(self, reservation_id: str) -> bool:
        return self._store.pop(reservation_id, None) is not None

    def reset(self) -> None:
        self._store.clear()


class RoomRepository:
    """Dict-backed store for Room instances, keyed by room_id."""

    def __init__(self) -> None:
        self._store: dict[str, Room] = {}

    def add(self, room: Room) -> None:
        self._store[room.room_id] = room

    def get(self, room_id: str) -> Room | None:
        return self._store.get(room_id)

    def exists(self, room_id: str) -> bool:
        return room_id in self._store

    def list_all(self) -> list[Room]:
        return list(self._store.values())


class UserRepository:
    """Dict-backed store for User instances, keyed by user_id."""

    def __init__(self) -> None:
        self._store: dict[str, User] = {}

    def add(self, user: User) -> None:
        self._store[user.user_id] = user

    def get(self, user_id: str) -> User | None:
        return self._store.get(user_id)

    def exists(self, user_id: str) -> bool:
        return user_id in self._store

    def display_name(self, user_id: str) -> str | None:
        user = self._store.get(user_id)
        return user.name if user else None

    def delete(self, user_id: str) -> None:
        self._store.pop(user_id, None)


class TimelineRepository:
    """List-backed store for TimelineEntry instances."""

    def __init__(self) -> None:
        self._entries: list[TimelineEntry] = []

    def add(self, entry: TimelineEntry) -> None:
        self._entries.append(entry)

    def reset(self) -> None:
        self._entries.clear()

    def list_for_reservation(self, reservation_id: str) -> list[TimelineEntry]:
        return sorted(
            [e for e in self._entries if e.reservation_id == reservation_id],
            key=lambda e: e.timestamp,
        )


# ---------------------------------------------------------------------------
# Seed data – three rooms, two users and a handful of June 2026 bookings
# ---------------------------------------------------------------------------

SEED_ROOMS = [
    Room(room_id="room-1", name="Conference Room A"),
    Room(room_id="room-2", name="Meeting Room B"),
    Room(room_id="room-3", name="Huddle Space C"),
]

SEED_USERS = [
    User(user_id="user-1", username="alice", name="Alice Johnson"),
    User(user_id="user-2", username="bob", name="Bob Smith"),
]


def _seed_reservations() -> list[Reservation]:
    rows = [
        ("res-1", "room-1", "user-1", date(2026, 6, 2), "09:00", "10:30"),
        ("res-2", "room-1", "user-2", date(2026, 6, 2), "14:00", "16:00"),
        ("res-3", "room-2", "user-1", date(2026, 6, 3), "10:00", "11:00"),
        ("res-4", "room-2", "user-2", date(2026, 6, 4), "13:00", "14:30"),
        ("res-5", "room-3", "user-1", date(2026, 6, 5), "15:00", "17:00"),
    ]
    return [
        Reservation(
            reservation_id=rid,
            room_id=room_id,
            user_id=user_id,
            start_date=day,
            end_date=day,
            start_time=start,
            end_time=end,
        )
        for rid, room_id, user_id, day, start, end in rows
    ]


def seed_reservations(repo: ReservationRepository) -> None:
    """Replace the repository contents with the sample bookings."""
    repo.reset()
    for reservation in _seed_reservations():
        repo.add(reservation)


def create_room_repository() -> RoomRepository:
    repo = RoomRepository()
    for room in SEED_ROOMS:
        repo.add(room.model_copy())
    return repo


def create_user_repository() -> UserRepository:
    repo = UserRepository()
    for user in SEED_USERS:
        repo.add(user.model_copy())
    return repo


def create_reservation_repository(seed: bool = True) -> ReservationRepository:
    """Return a ReservationRepository, optionally pre-loaded with sample data."""
    repo = ReservationRepository()
    if seed:
        seed_reservations(repo)
    return repo

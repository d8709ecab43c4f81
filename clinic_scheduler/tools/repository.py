"""
Booking storage boundary.

The engine only needs a handful of reads and writes, described by
BookingRepository. InMemoryBookingRepository backs the console demo and
the tests; a database-backed store would implement the same protocol.
"""

import itertools
import logging
import threading
from datetime import date
from typing import Optional, Protocol

from clinic_scheduler.errors import RepositoryError
from clinic_scheduler.schemas.booking_schema import Booking, BookingDraft

logger = logging.getLogger(__name__)


class BookingRepository(Protocol):
    """Storage operations the appointment service relies on."""

    def get(self, booking_id: int) -> Optional[Booking]: ...

    def list_on_date(self, on_date: date) -> list[Booking]: ...

    def list_all(self) -> list[Booking]: ...

    def add(self, draft: BookingDraft) -> Booking: ...

    def update(self, booking: Booking) -> Booking: ...

    def delete(self, booking_id: int) -> bool: ...


class InMemoryBookingRepository:
    """Dictionary-backed booking store. Hands out copies so callers cannot mutate rows."""

    def __init__(self, bookings: Optional[list[Booking]] = None) -> None:
        self._bookings: dict[int, Booking] = {}
        self._lock = threading.Lock()
        for booking in bookings or []:
            self._bookings[booking.booking_id] = booking.model_copy()
        start = max(self._bookings, default=0) + 1
        self._ids = itertools.count(start)

    def get(self, booking_id: int) -> Optional[Booking]:
        with self._lock:
            booking = self._bookings.get(booking_id)
            return booking.model_copy() if booking is not None else None

    def list_on_date(self, on_date: date) -> list[Booking]:
        with self._lock:
            return [b.model_copy() for b in self._bookings.values() if b.date == on_date]

    def list_all(self) -> list[Booking]:
        with self._lock:
            return [b.model_copy() for b in self._bookings.values()]

    def add(self, draft: BookingDraft) -> Booking:
        with self._lock:
            booking = Booking(booking_id=next(self._ids), **draft.model_dump())
            self._bookings[booking.booking_id] = booking
        logger.info(
            "Booking stored: %s on %s at slot %s", booking.booking_id, booking.date,
            booking.start_slot_id,
        )
        return booking.model_copy()

    def update(self, booking: Booking) -> Booking:
        with self._lock:
            if booking.booking_id not in self._bookings:
                raise RepositoryError(f"Cannot update missing booking {booking.booking_id}")
            self._bookings[booking.booking_id] = booking.model_copy()
        logger.info("Booking updated: %s", booking.booking_id)
        return booking.model_copy()

    def delete(self, booking_id: int) -> bool:
        with self._lock:
            removed = self._bookings.pop(booking_id, None)
        if removed is not None:
            logger.info("Booking deleted: %s", booking_id)
        return removed is not None

    def reset(self) -> None:
        """Clear all bookings. Used by test fixtures for isolation."""
        with self._lock:
            self._bookings.clear()
            self._ids = itertools.count(1)

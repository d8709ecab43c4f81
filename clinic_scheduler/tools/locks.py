"""Per-date mutual exclusion for the read-check-write booking sequence."""

import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Iterator

logger = logging.getLogger(__name__)


class DateLockRegistry:
    """
    Hands out one lock per calendar date.

    Bookings on different dates never share blocks, so two requests only
    need to serialize when they touch the same date. Several dates are
    always acquired in ascending order, which rules out lock-order deadlock
    when an edit moves a booking between days.
    """

    def __init__(self) -> None:
        self._locks: dict[date, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def lock_for(self, on_date: date) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(on_date)
            if lock is None:
                lock = self._locks[on_date] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, *dates: date) -> Iterator[None]:
        """Hold the locks for every given date for the duration of the block."""
        ordered = sorted(set(dates))
        acquired: list[threading.Lock] = []
        try:
            for on_date in ordered:
                lock = self.lock_for(on_date)
                lock.acquire()
                acquired.append(lock)
            logger.debug("Holding date locks: %s", [d.isoformat() for d in ordered])
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

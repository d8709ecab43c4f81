"""Injectable sources of the current date and time.

The engine never reads the ambient clock. Every availability or booking
computation receives a Clock so tests can pin "now" across date boundaries.
"""

from datetime import date, datetime, time
from typing import Protocol


class Clock(Protocol):
    """Anything that can report the server's notion of the current moment."""

    def now(self) -> datetime: ...


class SystemClock:
    """Local server time, as the clinic's web server sees it."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """A clock frozen at a given moment. Used by tests and the console demo."""

    def __init__(self, moment: datetime) -> None:
        self._moment = moment

    @classmethod
    def at(cls, day: date, time_of_day: time = time(0, 0)) -> "FixedClock":
        return cls(datetime.combine(day, time_of_day))

    def now(self) -> datetime:
        return self._moment

    def advance_to(self, moment: datetime) -> None:
        self._moment = moment

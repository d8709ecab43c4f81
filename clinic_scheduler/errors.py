"""
Rejections and errors raised or returned by the scheduling engine.

Business rule failures (a past date, a taken slot, a locked booking) are
never raised. They come back as a Rejection carrying a stable reason code
and a message the web layer can show as-is.

Exceptions are reserved for broken inputs to the engine itself, such as
malformed catalog data or an unknown service id asked for directly.
"""

from dataclasses import dataclass
from enum import Enum


class RejectionReason(str, Enum):
    """Stable codes identifying why a booking request was refused."""

    MISSING_FIELD = "missing_field"
    INVALID_SERVICE = "invalid_service"
    INVALID_SLOT = "invalid_slot"
    PAST_DATE = "past_date"
    NON_OPERATING_DAY = "non_operating_day"
    PAST_TIME_TODAY = "past_time_today"
    SLOT_CONFLICT = "slot_conflict"
    ILLEGAL_STATUS_TRANSITION = "illegal_status_transition"
    BOOKING_LOCKED = "booking_locked"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Rejection:
    """A refused request. Returned to the caller, never raised."""

    reason: RejectionReason
    message: str

    def __str__(self) -> str:
        return self.message


class SchedulingError(Exception):
    """Base class for unexpected scheduling failures."""


class CatalogError(SchedulingError):
    """Raised when time slot reference data violates the catalog invariants."""


class UnknownServiceError(SchedulingError):
    """Raised when a service id is resolved directly and does not exist."""


class RepositoryError(SchedulingError):
    """Raised when the booking store cannot be read or written."""


class UnhandledStatusError(SchedulingError):
    """Raised when the transition rules meet a status they have no case for."""

"""Booking, slot, and service data models."""

import datetime as dt
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clinic_scheduler.errors import RejectionReason


class BookingStatus(str, Enum):
    """Lifecycle status of a booking, in lower-case canonical form."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    URGENT = "urgent"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def lookup(cls, value: Any) -> Optional["BookingStatus"]:
        """Case-insensitive match. Missing or blank is pending, unknown is None."""
        if isinstance(value, cls):
            return value
        if value is None or not str(value).strip():
            return cls.PENDING
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None

    @classmethod
    def parse(cls, value: Any) -> "BookingStatus":
        """Canonicalize a stored status. Missing, blank and unknown values read as pending."""
        return cls.lookup(value) or cls.PENDING

    @property
    def is_terminal(self) -> bool:
        return self in (BookingStatus.COMPLETED, BookingStatus.CANCELLED)


class Role(str, Enum):
    """Actor roles the engine distinguishes between."""

    CLIENT = "client"
    ADMIN = "admin"
    STAFF = "staff"

    @property
    def is_client(self) -> bool:
        return self is Role.CLIENT


class TimeSlot(BaseModel):
    """One bookable block in the clinic day."""

    model_config = ConfigDict(frozen=True)

    slot_id: int
    start_time: dt.time


class Service(BaseModel):
    """A clinic service and how long it takes."""

    model_config = ConfigDict(frozen=True)

    service_id: int
    name: str
    duration_minutes: int = Field(gt=0)


class BookingDraft(BaseModel):
    """A validated booking that has not been stored yet."""

    pet_id: Optional[int] = None
    staff_id: Optional[int] = None
    service_id: int
    service_name: str = ""
    date: dt.date
    start_slot_id: int
    status: BookingStatus = BookingStatus.PENDING

    @field_validator("status", mode="before")
    @classmethod
    def _canonical_status(cls, value: Any) -> BookingStatus:
        return BookingStatus.parse(value)


class Booking(BookingDraft):
    """A scheduled appointment occupying a run of blocks on one date."""

    booking_id: int


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class BookingRequest(BaseModel):
    """A create request as posted by the appointments form.

    An unrecognised status is dropped here, so the booking starts as
    pending (clients are further limited to pending or urgent).
    """

    pet_id: Optional[int] = None
    staff_id: Optional[int] = None
    service_id: Optional[int] = None
    date: Optional[dt.date] = None
    slot_id: Optional[int] = None
    status: Optional[BookingStatus] = None

    @field_validator("status", mode="before")
    @classmethod
    def _canonical_status(cls, value: Any) -> Optional[BookingStatus]:
        if _is_blank(value):
            return None
        return BookingStatus.lookup(value)


class BookingEditRequest(BaseModel):
    """An edit request. Fields left as None keep the booking's current value.

    ``status`` is kept as lower-case text rather than a BookingStatus so an
    unknown value reaches the status guard and is rejected there.
    """

    booking_id: int
    pet_id: Optional[int] = None
    staff_id: Optional[int] = None
    service_id: Optional[int] = None
    date: Optional[dt.date] = None
    slot_id: Optional[int] = None
    status: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _canonical_status(cls, value: Any) -> Optional[str]:
        if _is_blank(value):
            return None
        if isinstance(value, BookingStatus):
            return value.value
        return str(value).strip().lower()


class StartTimeOption(BaseModel):
    """A selectable start time, serialized as ``{"slotId": 3, "start": "10:00"}``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    slot_id: int = Field(alias="slotId")
    start: str


class BookingOutcome(BaseModel):
    """Accept/reject result handed back to the web layer."""

    accepted: bool
    booking: Optional[Booking] = None
    reason: Optional[RejectionReason] = None
    message: str = ""
    request_id: Optional[str] = None

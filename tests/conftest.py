"""Shared test fixtures and helpers.

The reference day is Monday 2026-10-19 with the clock at 08:00, before the
clinic opens. The catalog is 16 half-hour slots from 09:00 (id 1) to 16:30
(id 16), so slot id n starts at 09:00 + (n - 1) * 30 minutes.
"""

from datetime import date, datetime, time
from typing import Optional

import pytest

from clinic_scheduler.clock import FixedClock
from clinic_scheduler.engine.availability import AvailabilityCalculator
from clinic_scheduler.engine.catalog import TimeSlotCatalog
from clinic_scheduler.engine.conflicts import ConflictDetector
from clinic_scheduler.engine.durations import ServiceDurationResolver
from clinic_scheduler.engine.status import StatusTransitionGuard
from clinic_scheduler.engine.validator import BookingValidator
from clinic_scheduler.schemas.booking_schema import Booking, BookingStatus, Service
from clinic_scheduler.tools.appointments import AppointmentService
from clinic_scheduler.tools.repository import InMemoryBookingRepository

MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)
SATURDAY = date(2026, 10, 24)
SUNDAY = date(2026, 10, 25)
LAST_FRIDAY = date(2026, 10, 16)

CONSULTATION = 1  # 30 min, 1 block
VACCINATION = 2   # 15 min, 1 block
DENTAL = 3        # 60 min, 2 blocks
GROOMING = 4      # 45 min, 1 block (floor)
SURGERY = 5       # 120 min, 4 blocks

SERVICES = [
    Service(service_id=CONSULTATION, name="General Consultation", duration_minutes=30),
    Service(service_id=VACCINATION, name="Vaccination", duration_minutes=15),
    Service(service_id=DENTAL, name="Dental Cleaning", duration_minutes=60),
    Service(service_id=GROOMING, name="Grooming", duration_minutes=45),
    Service(service_id=SURGERY, name="Spay/Neuter Surgery", duration_minutes=120),
]


def slot_id_at(hhmm: str) -> int:
    """Slot id in the reference catalog for an HH:MM start time."""
    hours, minutes = (int(part) for part in hhmm.split(":"))
    return (hours - 9) * 2 + minutes // 30 + 1


def make_booking(
    booking_id: int = 1,
    on_date: date = MONDAY,
    start: str = "10:00",
    service_id: int = CONSULTATION,
    status: BookingStatus = BookingStatus.PENDING,
    pet_id: int = 10,
    staff_id: Optional[int] = 20,
) -> Booking:
    """Helper to create a Booking with sensible defaults."""
    service = next(s for s in SERVICES if s.service_id == service_id)
    return Booking(
        booking_id=booking_id,
        pet_id=pet_id,
        staff_id=staff_id,
        service_id=service_id,
        service_name=service.name,
        date=on_date,
        start_slot_id=slot_id_at(start),
        status=status,
    )


@pytest.fixture
def clock():
    return FixedClock(datetime.combine(MONDAY, time(8, 0)))


@pytest.fixture
def catalog():
    return TimeSlotCatalog.generate(time(9, 0), time(17, 0), 30)


@pytest.fixture
def durations():
    return ServiceDurationResolver(SERVICES, block_length_minutes=30)


@pytest.fixture
def availability(catalog, durations, clock):
    return AvailabilityCalculator(catalog, durations, clock, frozenset({5, 6}))


@pytest.fixture
def conflicts(catalog, durations):
    return ConflictDetector(catalog, durations)


@pytest.fixture
def guard():
    return StatusTransitionGuard()


@pytest.fixture
def validator(catalog, durations, availability, conflicts, guard):
    return BookingValidator(catalog, durations, availability, conflicts, guard)


@pytest.fixture
def repository():
    return InMemoryBookingRepository()


@pytest.fixture
def appointment_service(repository, catalog, clock):
    return AppointmentService(
        repository=repository,
        catalog=catalog,
        services=SERVICES,
        clock=clock,
    )

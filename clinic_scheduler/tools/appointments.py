"""
Appointment commands and queries for the web layer.

AppointmentService wires the engine to a repository and a clock, and
makes "load bookings, validate, write" atomic per date so two concurrent
requests cannot both see a free slot and both take it.
"""

from datetime import date
from typing import Iterable, Optional

from clinic_scheduler.clock import Clock, SystemClock
from clinic_scheduler.config import SchedulingConfig, settings
from clinic_scheduler.engine.availability import AvailabilityCalculator
from clinic_scheduler.engine.catalog import TimeSlotCatalog
from clinic_scheduler.engine.conflicts import ConflictDetector
from clinic_scheduler.engine.durations import ServiceDurationResolver
from clinic_scheduler.engine.status import StatusTransitionGuard
from clinic_scheduler.engine.validator import BookingValidator
from clinic_scheduler.errors import Rejection, RejectionReason
from clinic_scheduler.logging_context import get_request_logger, request_scope
from clinic_scheduler.schemas.booking_schema import (
    Booking,
    BookingEditRequest,
    BookingOutcome,
    BookingRequest,
    Role,
    Service,
    StartTimeOption,
)
from clinic_scheduler.tools.locks import DateLockRegistry
from clinic_scheduler.tools.repository import BookingRepository

logger = get_request_logger(__name__)

CREATED_MESSAGE = "Appointment created successfully."
UPDATED_MESSAGE = "Appointment updated successfully."


class AppointmentService:
    """Entry point for start-time queries and booking create/edit/delete."""

    def __init__(
        self,
        repository: BookingRepository,
        catalog: TimeSlotCatalog,
        services: Iterable[Service],
        clock: Optional[Clock] = None,
        config: Optional[SchedulingConfig] = None,
        locks: Optional[DateLockRegistry] = None,
    ) -> None:
        config = config or settings.scheduling
        self.repository = repository
        self.catalog = catalog
        self.clock = clock or SystemClock()
        self.locks = locks or DateLockRegistry()
        self.durations = ServiceDurationResolver(
            services,
            block_length_minutes=config.block_length_minutes,
            rounding=config.duration_rounding,
        )
        self.availability = AvailabilityCalculator(
            catalog, self.durations, self.clock, config.non_operating_weekdays
        )
        self.conflicts = ConflictDetector(
            catalog, self.durations, cancelled_frees_slot=config.cancelled_frees_slot
        )
        self.guard = StatusTransitionGuard()
        self.validator = BookingValidator(
            catalog, self.durations, self.availability, self.conflicts, self.guard
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_valid_start_times(self, on_date: date, service_id: int) -> list[StartTimeOption]:
        """Selectable start times for a service. Empty for any rejected date or service."""
        service = self.durations.resolve(service_id)
        booked = self.conflicts.booked_slot_ids(on_date, self.repository.list_on_date(on_date))
        return list(self.availability.valid_start_blocks(on_date, service, booked))

    def explain_empty(self, on_date: date, service_id: int) -> Optional[RejectionReason]:
        """Reason code for an empty start-time list, or None when times are available."""
        service = self.durations.resolve(service_id)
        reason = self.availability.availability_reason(on_date, service)
        if reason is not None:
            return reason
        if self.get_valid_start_times(on_date, service_id):
            return None
        # Elapsed time explains the gap only if the day is empty even with no bookings.
        if on_date == self.clock.now().date() and not any(
            self.availability.valid_start_blocks(on_date, service, frozenset())
        ):
            return RejectionReason.PAST_TIME_TODAY
        return RejectionReason.SLOT_CONFLICT

    def get(self, booking_id: int) -> Optional[Booking]:
        return self.repository.get(booking_id)

    def can_edit(self, booking_id: int) -> Optional[Rejection]:
        """Gate for opening the edit form: None if editable, else why not."""
        booking = self.repository.get(booking_id)
        if booking is None:
            return Rejection(RejectionReason.NOT_FOUND, "Appointment not found.")
        if not self.guard.can_edit(booking.status):
            return Rejection(
                RejectionReason.BOOKING_LOCKED, "Completed appointments cannot be edited."
            )
        return None

    def list_bookings(
        self,
        role: Role,
        staff_id: Optional[int] = None,
        pet_ids: Optional[Iterable[int]] = None,
        search: Optional[str] = None,
    ) -> list[Booking]:
        """
        Bookings visible to an actor, ordered by date then start time.

        Staff see only appointments assigned to them. Clients see only
        appointments for the pets passed in ``pet_ids``. ``search`` matches
        service name or status, case-insensitively.
        """
        bookings = self.repository.list_all()
        if role is Role.STAFF:
            bookings = [b for b in bookings if b.staff_id == staff_id]
        elif role.is_client:
            owned = set(pet_ids or ())
            bookings = [b for b in bookings if b.pet_id in owned]

        if search and search.strip():
            needle = search.strip().lower()
            bookings = [
                b for b in bookings
                if needle in b.service_name.lower() or needle in b.status.value
            ]

        def sort_key(booking: Booking) -> tuple:
            position = self.catalog.index_of(booking.start_slot_id)
            # Unknown slots sort last within their day.
            return (booking.date, position is None, position or 0)

        return sorted(bookings, key=sort_key)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(self, request: BookingRequest, role: Role) -> BookingOutcome:
        """Validate and store a new booking under the target date's lock."""
        with request_scope() as request_id:
            if request.date is None:
                return _outcome(self.validator.validate_create(request, role, []), request_id)

            with self.locks.hold(request.date):
                bookings = self.repository.list_on_date(request.date)
                result = self.validator.validate_create(request, role, bookings)
                if isinstance(result, Rejection):
                    return _outcome(result, request_id)
                booking = self.repository.add(result)

            logger.info(
                "Appointment %s created for %s slot %s (%s)",
                booking.booking_id, booking.date, booking.start_slot_id, booking.status.value,
            )
            return BookingOutcome(
                accepted=True, booking=booking, message=CREATED_MESSAGE, request_id=request_id
            )

    def edit(self, request: BookingEditRequest, role: Role) -> BookingOutcome:
        """Validate and apply an edit while holding both the old and the new date."""
        with request_scope() as request_id:
            while True:
                snapshot = self.repository.get(request.booking_id)
                if snapshot is None:
                    result = self.validator.validate_edit(request, role, None, [])
                    return _outcome(result, request_id)
                target_date = request.date or snapshot.date

                with self.locks.hold(snapshot.date, target_date):
                    existing = self.repository.get(request.booking_id)
                    if existing is not None and existing.date != snapshot.date:
                        logger.debug(
                            "Appointment %s moved to %s while waiting; relocking",
                            existing.booking_id, existing.date,
                        )
                        continue
                    bookings = self.repository.list_on_date(target_date)
                    result = self.validator.validate_edit(request, role, existing, bookings)
                    if isinstance(result, Rejection):
                        return _outcome(result, request_id)
                    booking = self.repository.update(result)

                logger.info("Appointment %s updated", booking.booking_id)
                return BookingOutcome(
                    accepted=True, booking=booking, message=UPDATED_MESSAGE, request_id=request_id
                )

    def delete(self, booking_id: int) -> bool:
        """Remove a booking. Deleting an unknown id is a no-op that returns False."""
        booking = self.repository.get(booking_id)
        if booking is None:
            return False
        with self.locks.hold(booking.date):
            return self.repository.delete(booking_id)


def _outcome(result: Rejection, request_id: str) -> BookingOutcome:
    return BookingOutcome(
        accepted=False, reason=result.reason, message=result.message, request_id=request_id
    )

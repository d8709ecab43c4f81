"""
End-to-end validation of create and edit requests.

The validator never touches storage. The caller hands it the reference
data and the bookings it has already loaded, gets back either a
Rejection or the booking to persist, and performs the write itself.
"""

from typing import Iterable, Optional, Union

from clinic_scheduler.engine.availability import INVALID_SERVICE_MESSAGE, AvailabilityCalculator
from clinic_scheduler.engine.catalog import TimeSlotCatalog
from clinic_scheduler.engine.conflicts import ConflictDetector
from clinic_scheduler.engine.durations import ServiceDurationResolver
from clinic_scheduler.engine.status import (
    COMPLETED_LOCKED_MESSAGE,
    StatusTransitionGuard,
)
from clinic_scheduler.errors import Rejection, RejectionReason
from clinic_scheduler.logging_context import get_request_logger
from clinic_scheduler.schemas.booking_schema import (
    Booking,
    BookingDraft,
    BookingEditRequest,
    BookingRequest,
    Role,
)

logger = get_request_logger(__name__)

MISSING_SCHEDULE_MESSAGE = "Please select a date and time slot."
INVALID_SLOT_MESSAGE = "Please select a valid time slot."
PAST_TIME_MESSAGE = (
    "You cannot book a time that is already in the past. Please select a future time."
)
CREATE_CONFLICT_MESSAGE = "This timeslot overlaps with another booking."
EDIT_CONFLICT_MESSAGE = "That timeslot is already booked."
NOT_FOUND_MESSAGE = "Appointment not found."


class BookingValidator:
    """Runs every scheduling and status rule for one request."""

    def __init__(
        self,
        catalog: TimeSlotCatalog,
        durations: ServiceDurationResolver,
        availability: AvailabilityCalculator,
        conflicts: ConflictDetector,
        guard: Optional[StatusTransitionGuard] = None,
    ) -> None:
        self.catalog = catalog
        self.durations = durations
        self.availability = availability
        self.conflicts = conflicts
        self.guard = guard or StatusTransitionGuard()

    def validate_create(
        self,
        request: BookingRequest,
        role: Role,
        bookings: Iterable[Booking],
    ) -> Union[BookingDraft, Rejection]:
        """Check a new booking. Returns the draft to store, or the first rule it breaks."""
        if request.date is None or request.slot_id is None:
            return self._reject(RejectionReason.MISSING_FIELD, MISSING_SCHEDULE_MESSAGE)

        date_rejection = self.availability.check_date(request.date)
        if date_rejection is not None:
            return self._rejected(date_rejection)

        service = self.durations.resolve(request.service_id)
        if service is None:
            return self._reject(RejectionReason.INVALID_SERVICE, INVALID_SERVICE_MESSAGE)
        blocks_needed = self.durations.blocks_needed(service)

        slot = self.catalog.get(request.slot_id)
        if slot is None:
            return self._reject(RejectionReason.INVALID_SLOT, INVALID_SLOT_MESSAGE)
        if self.availability.is_past_time(request.date, slot):
            return self._reject(RejectionReason.PAST_TIME_TODAY, PAST_TIME_MESSAGE)

        if self.conflicts.has_conflict(request.date, request.slot_id, blocks_needed, bookings):
            return self._reject(RejectionReason.SLOT_CONFLICT, CREATE_CONFLICT_MESSAGE)

        draft = BookingDraft(
            pet_id=request.pet_id,
            staff_id=request.staff_id,
            service_id=service.service_id,
            service_name=service.name,
            date=request.date,
            start_slot_id=request.slot_id,
            status=self.guard.initial_status(role, request.status),
        )
        logger.debug(
            "Create accepted: %s slot %s (%d blocks) as %s",
            draft.date, draft.start_slot_id, blocks_needed, draft.status.value,
        )
        return draft

    def validate_edit(
        self,
        request: BookingEditRequest,
        role: Role,
        existing: Optional[Booking],
        bookings: Iterable[Booking],
    ) -> Union[Booking, Rejection]:
        """
        Check an edit against the stored booking.

        Fields left as None in the request keep their stored values. Date and
        slot are re-validated only when they move (or when a service change
        alters how many blocks the booking needs), and the conflict check
        ignores the booking's own current reservation.

        Returns:
            An updated copy of the booking, or a Rejection. ``existing`` is
            never modified.
        """
        if existing is None:
            return self._reject(RejectionReason.NOT_FOUND, NOT_FOUND_MESSAGE)
        if not self.guard.can_edit(existing.status):
            return self._reject(RejectionReason.BOOKING_LOCKED, COMPLETED_LOCKED_MESSAGE)

        service_id = request.service_id if request.service_id is not None else existing.service_id
        service = self.durations.resolve(service_id)
        if service is None:
            return self._reject(RejectionReason.INVALID_SERVICE, "Invalid service.")
        blocks_needed = self.durations.blocks_needed(service)

        new_date = request.date or existing.date
        new_slot_id = request.slot_id if request.slot_id is not None else existing.start_slot_id
        schedule_changed = new_date != existing.date or new_slot_id != existing.start_slot_id

        old_service = self.durations.resolve(existing.service_id)
        old_blocks = self.durations.blocks_needed(old_service) if old_service else 1

        if schedule_changed:
            date_rejection = self.availability.check_date(new_date)
            if date_rejection is not None:
                return self._rejected(date_rejection)
            slot = self.catalog.get(new_slot_id)
            if slot is None:
                return self._reject(RejectionReason.INVALID_SLOT, INVALID_SLOT_MESSAGE)
            if self.availability.is_past_time(new_date, slot):
                return self._reject(
                    RejectionReason.PAST_TIME_TODAY,
                    "You cannot select a timeslot in the past. Please choose a future time.",
                )

        if schedule_changed or blocks_needed != old_blocks:
            if self.conflicts.has_conflict(
                new_date, new_slot_id, blocks_needed, bookings,
                exclude_booking_id=existing.booking_id,
            ):
                return self._reject(RejectionReason.SLOT_CONFLICT, EDIT_CONFLICT_MESSAGE)

        decision = self.guard.apply_edit_policy(role, existing.status, request.status)
        if isinstance(decision, Rejection):
            return self._rejected(decision)

        updated = existing.model_copy(update={
            "pet_id": request.pet_id if request.pet_id is not None else existing.pet_id,
            "staff_id": request.staff_id if request.staff_id is not None else existing.staff_id,
            "service_id": service.service_id,
            "service_name": service.name,
            "date": new_date,
            "start_slot_id": new_slot_id,
            "status": decision.status,
        })
        logger.debug(
            "Edit accepted for booking %s (schedule_changed=%s, status_changed=%s)",
            existing.booking_id, schedule_changed, decision.changed,
        )
        return updated

    @staticmethod
    def _reject(reason: RejectionReason, message: str) -> Rejection:
        return BookingValidator._rejected(Rejection(reason, message))

    @staticmethod
    def _rejected(rejection: Rejection) -> Rejection:
        logger.info("Booking rejected (%s): %s", rejection.reason.value, rejection.message)
        return rejection
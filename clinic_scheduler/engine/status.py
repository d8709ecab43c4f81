"""
Booking status state machine with role-gated edits.

States: pending, confirmed, urgent, completed, cancelled. Completed and
cancelled are terminal. Confirmed is status-locked: the booking can still
move in time but its status no longer changes. Staying in the same state
is always allowed, terminal states included.

Usage:
    guard = StatusTransitionGuard()
    guard.can_transition("Pending", "confirmed")  # True
    decision = guard.apply_edit_policy(Role.STAFF, "urgent", "completed")
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from clinic_scheduler.errors import Rejection, RejectionReason, UnhandledStatusError
from clinic_scheduler.schemas.booking_schema import BookingStatus, Role

logger = logging.getLogger(__name__)

StatusLike = Union[BookingStatus, str, None]

CLIENT_INITIAL_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.URGENT})

COMPLETED_LOCKED_MESSAGE = "Completed appointments cannot be edited."
CONFIRMED_LOCKED_MESSAGE = "Confirmed appointments cannot change their status."
CLIENT_STATUS_MESSAGE = "Only clinic staff can change an appointment's status."


@dataclass(frozen=True)
class StatusDecision:
    """Accepted outcome of an edit's status field."""

    status: BookingStatus
    changed: bool = False


def allowed_transitions(status: BookingStatus) -> frozenset[BookingStatus]:
    """Statuses an edit may move ``status`` to, not counting itself.

    Raises:
        UnhandledStatusError: ``status`` has no case below.
    """
    match status:
        case BookingStatus.PENDING:
            return frozenset({
                BookingStatus.CONFIRMED, BookingStatus.URGENT,
                BookingStatus.COMPLETED, BookingStatus.CANCELLED,
            })
        case BookingStatus.CONFIRMED:
            return frozenset({
                BookingStatus.URGENT, BookingStatus.COMPLETED, BookingStatus.CANCELLED,
            })
        case BookingStatus.URGENT:
            return frozenset({
                BookingStatus.CONFIRMED, BookingStatus.COMPLETED, BookingStatus.CANCELLED,
            })
        case BookingStatus.COMPLETED | BookingStatus.CANCELLED:
            return frozenset()
        case _:
            raise UnhandledStatusError(f"No transition rule for status {status!r}")


def can_transition(old: StatusLike, new: StatusLike) -> bool:
    """Whether ``old -> new`` is allowed. Case-insensitive; unknown names never are."""
    old_status = BookingStatus.lookup(old)
    new_status = BookingStatus.lookup(new)
    if old_status is None or new_status is None:
        return False
    if old_status == new_status:
        return True
    return new_status in allowed_transitions(old_status)


class StatusTransitionGuard:
    """Applies the transition table plus the client/staff role rules."""

    def can_transition(self, old: StatusLike, new: StatusLike) -> bool:
        return can_transition(old, new)

    def can_edit(self, status: StatusLike) -> bool:
        """Completed bookings are closed to every kind of edit."""
        return BookingStatus.parse(status) != BookingStatus.COMPLETED

    def initial_status(self, role: Role, requested: Optional[BookingStatus]) -> BookingStatus:
        """Status a new booking starts in. Clients may only pick pending or urgent."""
        status = requested or BookingStatus.PENDING
        if role.is_client and status not in CLIENT_INITIAL_STATUSES:
            logger.info("Client requested initial status '%s'; using pending", status.value)
            return BookingStatus.PENDING
        return status

    def apply_edit_policy(
        self,
        role: Role,
        old: StatusLike,
        requested: Optional[StatusLike],
    ) -> Union[StatusDecision, Rejection]:
        """
        Decide the status an edited booking ends up with.

        Args:
            role: Actor submitting the edit.
            old: The booking's stored status.
            requested: Status submitted with the edit; None or blank keeps the
                old one. A name that is not a status is rejected.

        Returns:
            A StatusDecision, or a Rejection with BOOKING_LOCKED or
            ILLEGAL_STATUS_TRANSITION.
        """
        old_status = BookingStatus.parse(old)
        if old_status == BookingStatus.COMPLETED:
            return Rejection(RejectionReason.BOOKING_LOCKED, COMPLETED_LOCKED_MESSAGE)

        if requested is None or not str(requested).strip():
            return StatusDecision(status=old_status)
        new_status = BookingStatus.lookup(requested)
        if new_status is None:
            return Rejection(
                RejectionReason.ILLEGAL_STATUS_TRANSITION,
                f"Invalid status change: {old_status.value} -> {str(requested).strip().lower()}",
            )
        if new_status == old_status:
            return StatusDecision(status=old_status)

        if old_status == BookingStatus.CONFIRMED:
            return Rejection(RejectionReason.BOOKING_LOCKED, CONFIRMED_LOCKED_MESSAGE)

        if role.is_client:
            return Rejection(RejectionReason.ILLEGAL_STATUS_TRANSITION, CLIENT_STATUS_MESSAGE)

        if not can_transition(old_status, new_status):
            return Rejection(
                RejectionReason.ILLEGAL_STATUS_TRANSITION,
                f"Invalid status change: {old_status.value} -> {new_status.value}",
            )

        logger.debug("Status %s -> %s by %s", old_status.value, new_status.value, role.value)
        return StatusDecision(status=new_status, changed=True)

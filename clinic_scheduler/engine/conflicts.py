"""
Overlap detection for multi-block bookings.

A booking occupies every block from its start slot through
``blocks_needed - 1`` further catalog positions. Two bookings on the same
date conflict when those ranges share any slot.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from clinic_scheduler.engine.catalog import TimeSlotCatalog
from clinic_scheduler.engine.durations import ServiceDurationResolver
from clinic_scheduler.schemas.booking_schema import Booking, BookingStatus

logger = logging.getLogger(__name__)


class ConflictDetector:
    """
    Decides whether a candidate block range collides with existing bookings.

    ``cancelled_frees_slot`` controls whether cancelled bookings still hold
    their blocks. It defaults to False: a cancelled appointment keeps its
    time blocked until the booking row is deleted.
    """

    def __init__(
        self,
        catalog: TimeSlotCatalog,
        durations: ServiceDurationResolver,
        cancelled_frees_slot: bool = False,
    ) -> None:
        self.catalog = catalog
        self.durations = durations
        self.cancelled_frees_slot = cancelled_frees_slot

    def _counts(self, booking: Booking) -> bool:
        if self.cancelled_frees_slot and booking.status == BookingStatus.CANCELLED:
            return False
        return True

    def occupied_slot_ids(self, booking: Booking) -> list[int]:
        """Slot ids held by one booking, clipped to the catalog."""
        position = self.catalog.index_of(booking.start_slot_id)
        if position is None:
            logger.warning(
                "Booking %s starts at unknown slot %s; it holds no blocks",
                booking.booking_id, booking.start_slot_id,
            )
            return []
        service = self.durations.resolve(booking.service_id)
        blocks = self.durations.blocks_needed(service) if service is not None else 1
        end = min(position + blocks, len(self.catalog))
        return [self.catalog.slot_at(i).slot_id for i in range(position, end)]

    def booked_slot_ids(
        self,
        on_date: date,
        bookings: Iterable[Booking],
        exclude_booking_id: Optional[int] = None,
    ) -> set[int]:
        """All slot ids already taken on ``on_date``, ignoring the excluded booking."""
        booked: set[int] = set()
        for booking in bookings:
            if booking.date != on_date or booking.booking_id == exclude_booking_id:
                continue
            if not self._counts(booking):
                continue
            booked.update(self.occupied_slot_ids(booking))
        return booked

    def has_conflict(
        self,
        on_date: date,
        start_slot_id: int,
        blocks_needed: int,
        bookings: Iterable[Booking],
        exclude_booking_id: Optional[int] = None,
    ) -> bool:
        """
        True when the requested range cannot be booked.

        An unknown start slot or a range running past the last slot counts as
        a conflict, so an unresolvable request is never silently accepted.
        """
        position = self.catalog.index_of(start_slot_id)
        if position is None:
            logger.debug("Slot %s not in catalog; treating as conflict", start_slot_id)
            return True

        requested = self.catalog.block_range(position, blocks_needed)
        if requested is None:
            logger.debug(
                "Slot %s + %d blocks runs past the last slot", start_slot_id, blocks_needed
            )
            return True

        booked = self.booked_slot_ids(on_date, bookings, exclude_booking_id)
        clashes = booked.intersection(requested)
        if clashes:
            logger.debug("Slots %s already booked on %s", sorted(clashes), on_date)
            return True
        return False

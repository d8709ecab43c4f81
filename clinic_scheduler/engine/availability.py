"""
Valid start times for a service on a given date.

Rules, applied in order:
1. Past dates and non-operating weekdays have no start times.
2. Unknown services have no start times.
3. A start slot is valid only if every block the service needs exists
   and none of them is booked.
4. On today's date, slots starting at or before the current time are
   dropped (a slot starting exactly "now" is already gone).
"""

import logging
from datetime import date
from typing import AbstractSet, Iterator, Optional

from clinic_scheduler.clock import Clock
from clinic_scheduler.engine.catalog import TimeSlotCatalog
from clinic_scheduler.engine.durations import ServiceDurationResolver
from clinic_scheduler.errors import Rejection, RejectionReason
from clinic_scheduler.schemas.booking_schema import Service, StartTimeOption, TimeSlot
from clinic_scheduler.utils import format_time_of_day

logger = logging.getLogger(__name__)

PAST_DATE_MESSAGE = "You cannot book a past date."
NON_OPERATING_DAY_MESSAGE = "Weekends are not available."
INVALID_SERVICE_MESSAGE = "Invalid service selection."


class AvailabilityCalculator:
    """Computes selectable start slots against an injected clock."""

    def __init__(
        self,
        catalog: TimeSlotCatalog,
        durations: ServiceDurationResolver,
        clock: Clock,
        non_operating_weekdays: AbstractSet[int] = frozenset({5, 6}),
    ) -> None:
        self.catalog = catalog
        self.durations = durations
        self.clock = clock
        self.non_operating_weekdays = frozenset(non_operating_weekdays)

    def check_date(self, on_date: date) -> Optional[Rejection]:
        """Reject past dates and non-operating weekdays; None when the date is bookable."""
        today = self.clock.now().date()
        if on_date < today:
            return Rejection(RejectionReason.PAST_DATE, PAST_DATE_MESSAGE)
        if on_date.weekday() in self.non_operating_weekdays:
            message = NON_OPERATING_DAY_MESSAGE
            if self.non_operating_weekdays != frozenset({5, 6}):
                message = f"The clinic is closed on {on_date:%A}s."
            return Rejection(RejectionReason.NON_OPERATING_DAY, message)
        return None

    def is_past_time(self, on_date: date, slot: TimeSlot) -> bool:
        """True when ``slot`` on ``on_date`` has already started (today only)."""
        now = self.clock.now()
        return on_date == now.date() and slot.start_time <= now.time()

    def availability_reason(
        self, on_date: date, service: Optional[Service]
    ) -> Optional[RejectionReason]:
        """Why a whole date has no start times, or None if it may have some."""
        rejection = self.check_date(on_date)
        if rejection is not None:
            return rejection.reason
        if service is None:
            return RejectionReason.INVALID_SERVICE
        return None

    def valid_start_blocks(
        self,
        on_date: date,
        service: Optional[Service],
        booked_slot_ids: AbstractSet[int],
    ) -> Iterator[StartTimeOption]:
        """Yield start times in catalog order. Each call recomputes from scratch."""
        reason = self.availability_reason(on_date, service)
        if reason is not None:
            logger.debug("No start times on %s: %s", on_date, reason.value)
            return

        blocks_needed = self.durations.blocks_needed(service)
        for position, slot in enumerate(self.catalog):
            span = self.catalog.block_range(position, blocks_needed)
            if span is None:
                # Every later position runs past the end as well.
                break
            if any(slot_id in booked_slot_ids for slot_id in span):
                continue
            if self.is_past_time(on_date, slot):
                continue
            yield StartTimeOption(slot_id=slot.slot_id, start=format_time_of_day(slot.start_time))

"""
Ordered catalog of bookable time slots for one clinic day.

Everything downstream indexes slots by catalog position, so the catalog
sorts slots by start time and rejects duplicate or out-of-order slot ids.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, Optional

from clinic_scheduler.errors import CatalogError
from clinic_scheduler.schemas.booking_schema import TimeSlot

logger = logging.getLogger(__name__)


class TimeSlotCatalog:
    """Immutable, chronologically ordered sequence of TimeSlots."""

    def __init__(self, slots: Iterable[TimeSlot]) -> None:
        ordered = tuple(sorted(slots, key=lambda s: s.start_time))
        self._positions: dict[int, int] = {}
        for position, slot in enumerate(ordered):
            if slot.slot_id in self._positions:
                raise CatalogError(f"Duplicate slot id {slot.slot_id} in time slot catalog")
            self._positions[slot.slot_id] = position
        for earlier, later in zip(ordered, ordered[1:]):
            if earlier.start_time == later.start_time:
                raise CatalogError(
                    f"Slots {earlier.slot_id} and {later.slot_id} both start at "
                    f"{earlier.start_time:%H:%M}"
                )
            if later.slot_id < earlier.slot_id:
                raise CatalogError(
                    f"Slot id {later.slot_id} at {later.start_time:%H:%M} is out of order "
                    f"after slot id {earlier.slot_id} at {earlier.start_time:%H:%M}"
                )
        self._slots = ordered

    @classmethod
    def generate(
        cls,
        open_time: time,
        close_time: time,
        block_minutes: int,
        first_id: int = 1,
    ) -> "TimeSlotCatalog":
        """Build a fixed-cadence catalog of blocks that start and end within opening hours.

        09:00 to 17:00 with 30-minute blocks yields 16 slots, the last at 16:30.
        """
        if block_minutes < 1:
            raise CatalogError(f"Block length must be positive, got {block_minutes}")
        if close_time <= open_time:
            raise CatalogError(f"Close time {close_time} is not after open time {open_time}")

        anchor = date(2000, 1, 1)
        cursor = datetime.combine(anchor, open_time)
        end = datetime.combine(anchor, close_time)
        step = timedelta(minutes=block_minutes)

        slots = []
        slot_id = first_id
        while cursor + step <= end:
            slots.append(TimeSlot(slot_id=slot_id, start_time=cursor.time()))
            slot_id += 1
            cursor += step

        logger.debug(
            "Generated %d slots from %s to %s every %d minutes",
            len(slots), open_time, close_time, block_minutes,
        )
        return cls(slots)

    def ordered_slots(self) -> tuple[TimeSlot, ...]:
        return self._slots

    def index_of(self, slot_id: int) -> Optional[int]:
        """Catalog position of a slot id, or None when the id is unknown."""
        return self._positions.get(slot_id)

    def get(self, slot_id: int) -> Optional[TimeSlot]:
        position = self.index_of(slot_id)
        return None if position is None else self._slots[position]

    def slot_at(self, position: int) -> TimeSlot:
        return self._slots[position]

    def block_range(self, start_position: int, blocks: int) -> Optional[list[int]]:
        """Slot ids for ``blocks`` consecutive positions, or None if it runs past the end."""
        if start_position < 0 or start_position + blocks > len(self._slots):
            return None
        return [s.slot_id for s in self._slots[start_position:start_position + blocks]]

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[TimeSlot]:
        return iter(self._slots)

    def __contains__(self, slot_id: object) -> bool:
        return slot_id in self._positions

"""Maps services to the number of contiguous blocks they consume."""

import logging
import math
from typing import Iterable, Optional

from clinic_scheduler.errors import UnknownServiceError
from clinic_scheduler.schemas.booking_schema import Service

logger = logging.getLogger(__name__)


class ServiceDurationResolver:
    """
    Resolves service ids and converts durations to block counts.

    Rounding defaults to floor, which is how the clinic has always sized
    appointments: a 45-minute service gets a single 30-minute block. Set
    ``rounding="ceil"`` to allocate enough blocks to cover the full duration.
    """

    def __init__(
        self,
        services: Iterable[Service],
        block_length_minutes: int = 30,
        rounding: str = "floor",
    ) -> None:
        if block_length_minutes < 1:
            raise ValueError(f"block_length_minutes must be >= 1, got {block_length_minutes}")
        if rounding not in ("floor", "ceil"):
            raise ValueError(f"rounding must be 'floor' or 'ceil', got {rounding!r}")
        self._services = {s.service_id: s for s in services}
        self.block_length_minutes = block_length_minutes
        self.rounding = rounding

    def resolve(self, service_id: Optional[int]) -> Optional[Service]:
        """Look up a service. Returns None for unknown or missing ids."""
        if service_id is None:
            return None
        return self._services.get(service_id)

    def blocks_needed(self, service: Service) -> int:
        ratio = service.duration_minutes / self.block_length_minutes
        if self.rounding == "ceil":
            blocks = math.ceil(ratio)
        else:
            blocks = service.duration_minutes // self.block_length_minutes
        return max(1, int(blocks))

    def blocks_for(self, service_id: int) -> int:
        """Block count for a service id. Raises UnknownServiceError if it does not resolve."""
        service = self.resolve(service_id)
        if service is None:
            raise UnknownServiceError(f"Unknown service id: {service_id}")
        return self.blocks_needed(service)

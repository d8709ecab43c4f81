"""Default clinic reference data: the service list and the day's slot catalog."""

import logging
from typing import Optional

from clinic_scheduler.config import AppConfig, settings
from clinic_scheduler.engine.catalog import TimeSlotCatalog
from clinic_scheduler.schemas.booking_schema import Service
from clinic_scheduler.utils import parse_time_of_day

logger = logging.getLogger(__name__)

SERVICE_CATALOG: dict[int, dict] = {
    1: {"name": "General Consultation", "duration_minutes": 30},
    2: {"name": "Vaccination", "duration_minutes": 15},
    3: {"name": "Dental Cleaning", "duration_minutes": 60},
    4: {"name": "Grooming", "duration_minutes": 45},
    5: {"name": "Spay/Neuter Surgery", "duration_minutes": 120},
    6: {"name": "X-Ray Imaging", "duration_minutes": 30},
    7: {"name": "Follow-up Check", "duration_minutes": 20},
}


def get_all_services() -> list[Service]:
    """Return every service, ordered by name as the booking form lists them."""
    services = [
        Service(service_id=sid, name=info["name"], duration_minutes=info["duration_minutes"])
        for sid, info in SERVICE_CATALOG.items()
    ]
    return sorted(services, key=lambda s: s.name)


def get_service(service_id: int) -> Optional[Service]:
    info = SERVICE_CATALOG.get(service_id)
    if info is None:
        return None
    return Service(service_id=service_id, **info)


def build_slot_catalog(config: Optional[AppConfig] = None) -> TimeSlotCatalog:
    """Build the clinic day from configured opening hours and block length."""
    config = config or settings
    catalog = TimeSlotCatalog.generate(
        open_time=parse_time_of_day(config.clinic.open_time),
        close_time=parse_time_of_day(config.clinic.close_time),
        block_minutes=config.scheduling.block_length_minutes,
    )
    logger.info(
        "Slot catalog for '%s': %d blocks from %s",
        config.clinic.name, len(catalog), config.clinic.open_time,
    )
    return catalog

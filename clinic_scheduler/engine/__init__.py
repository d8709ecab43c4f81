from clinic_scheduler.engine.availability import AvailabilityCalculator
from clinic_scheduler.engine.catalog import TimeSlotCatalog
from clinic_scheduler.engine.conflicts import ConflictDetector
from clinic_scheduler.engine.durations import ServiceDurationResolver
from clinic_scheduler.engine.status import StatusTransitionGuard, can_transition
from clinic_scheduler.engine.validator import BookingValidator

__all__ = [
    "TimeSlotCatalog",
    "ServiceDurationResolver",
    "AvailabilityCalculator",
    "ConflictDetector",
    "StatusTransitionGuard",
    "can_transition",
    "BookingValidator",
]

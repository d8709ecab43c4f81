"""
Console entry point for the appointment scheduling engine.

Runs against the default clinic reference data and an in-memory booking
store, so nothing needs a database. Useful for checking how configuration
(block length, closed weekdays, rounding) changes the bookable day.

Usage:
    python main.py services
    python main.py slots --date 2026-10-19 --service 3
    python main.py slots --date 2026-10-19 --service 3 --now "2026-10-19 14:05"
    python main.py demo
"""

import argparse
import logging
import sys
from datetime import date, datetime, time, timedelta
from typing import Optional

from clinic_scheduler.clock import Clock, FixedClock, SystemClock
from clinic_scheduler.config import settings
from clinic_scheduler.schemas.booking_schema import BookingEditRequest, BookingRequest, Role
from clinic_scheduler.tools.appointments import AppointmentService
from clinic_scheduler.tools.reference_data import build_slot_catalog, get_all_services
from clinic_scheduler.tools.repository import InMemoryBookingRepository

GREEN = "\033[92m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


def _build_service(clock: Clock) -> AppointmentService:
    return AppointmentService(
        repository=InMemoryBookingRepository(),
        catalog=build_slot_catalog(settings),
        services=get_all_services(),
        clock=clock,
    )


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM-DD, got {value!r}") from None


def _parse_now(value: str) -> datetime:
    try:
        return datetime.strptime(value, "%Y-%m-%d %H:%M")
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected 'YYYY-MM-DD HH:MM', got {value!r}") from None


def _print_services() -> None:
    block = settings.scheduling.block_length_minutes
    print(f"{BOLD}{settings.clinic.name} services{RESET} ({block}-minute blocks)")
    service = _build_service(SystemClock())
    for svc in get_all_services():
        blocks = service.durations.blocks_needed(svc)
        print(f"  {svc.service_id:>3}  {svc.name:<24} {svc.duration_minutes:>4} min  {blocks} block(s)")


def _print_slots(on_date: date, service_id: int, now: Optional[datetime]) -> int:
    clock = FixedClock(now) if now else SystemClock()
    service = _build_service(clock)
    options = service.get_valid_start_times(on_date, service_id)
    if not options:
        reason = service.explain_empty(on_date, service_id)
        print(f"{RED}No start times on {on_date} ({reason.value if reason else 'unknown'}).{RESET}")
        return 1
    print(f"{BOLD}Start times on {on_date} for service {service_id}:{RESET}")
    print("  " + "  ".join(option.start for option in options))
    return 0


def _next_operating_day(start: date) -> date:
    closed = settings.scheduling.non_operating_weekdays
    day = start + timedelta(days=1)
    while day.weekday() in closed:
        day += timedelta(days=1)
    return day


def _run_demo() -> int:
    """Scripted walkthrough: book, collide, confirm, then hit the confirmed lock."""
    demo_day = _next_operating_day(date.today())
    clock = FixedClock.at(demo_day, time(0, 0))
    service = _build_service(clock)
    if len(service.catalog) < 2:
        print(f"{RED}The demo needs at least two slots per day; check CLINIC_OPEN_TIME, "
              f"CLINIC_CLOSE_TIME and BLOCK_LENGTH_MINUTES.{RESET}")
        return 1
    opening, second = service.catalog.slot_at(0), service.catalog.slot_at(1)

    def show(label: str, outcome) -> None:
        colour = GREEN if outcome.accepted else RED
        print(f"{colour}{BOLD}[{label}]{RESET} {colour}{outcome.message}{RESET}")

    print(f"{DIM}  >> Demo date {demo_day}, clock fixed at 00:00{RESET}")
    first = service.create(
        BookingRequest(pet_id=1, staff_id=2, service_id=1, date=demo_day, slot_id=second.slot_id),
        Role.CLIENT,
    )
    show(f"client books consultation at {second.start_time:%H:%M}", first)
    show(
        f"client books dental cleaning at {opening.start_time:%H:%M}",
        service.create(
            BookingRequest(pet_id=2, staff_id=2, service_id=3, date=demo_day,
                           slot_id=opening.slot_id),
            Role.CLIENT,
        ),
    )
    if not first.accepted:
        return 1
    booking_id = first.booking.booking_id
    show(
        "staff confirms the consultation",
        service.edit(BookingEditRequest(booking_id=booking_id, status="Confirmed"), Role.STAFF),
    )
    show(
        "staff tries to complete a confirmed booking",
        service.edit(BookingEditRequest(booking_id=booking_id, status="completed"), Role.STAFF),
    )
    remaining = service.get_valid_start_times(demo_day, 3)
    print(f"{DIM}  >> Dental cleaning start times left: "
          f"{', '.join(o.start for o in remaining)}{RESET}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Query and exercise the clinic appointment scheduling engine."
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("services", help="List services and the blocks each one needs.")

    slots = sub.add_parser("slots", help="List valid start times for a date and service.")
    slots.add_argument("--date", type=_parse_date, required=True, help="YYYY-MM-DD")
    slots.add_argument("--service", type=int, required=True, help="Service id.")
    slots.add_argument(
        "--now",
        type=_parse_now,
        default=None,
        help="Pretend the current time is 'YYYY-MM-DD HH:MM' (default: system clock).",
    )

    sub.add_parser("demo", help="Run a scripted booking walkthrough.")

    args = parser.parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.command == "services":
        _print_services()
        sys.exit(0)
    if args.command == "slots":
        sys.exit(_print_slots(args.date, args.service, args.now))
    sys.exit(_run_demo())


if __name__ == "__main__":
    main()

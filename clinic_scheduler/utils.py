"""Shared utilities used across the scheduling engine."""

from datetime import datetime, time

WEEKDAY_NAMES: dict[str, int] = {
    "mon": 0, "tue": 1, "wed": 2, "thu": 3, "fri": 4, "sat": 5, "sun": 6,
}

WEEKDAY_NAMES_FULL: dict[str, str] = {
    "mon": "monday", "tue": "tuesday", "wed": "wednesday", "thu": "thursday",
    "fri": "friday", "sat": "saturday", "sun": "sunday",
}


def parse_weekdays(value: str) -> frozenset[int]:
    """Parse a comma-separated weekday list into ``date.weekday()`` numbers.

    Accepts three-letter names, full names, or integers 0-6 (Monday is 0).
    An empty string means every day is an operating day.

    Examples:
        >>> sorted(parse_weekdays("sat,sun"))
        [5, 6]
        >>> sorted(parse_weekdays("Sunday, 0"))
        [0, 6]
    """
    days: set[int] = set()
    for token in value.split(","):
        token = token.strip().lower()
        if not token:
            continue
        if token.isdigit():
            day = int(token)
            if not 0 <= day <= 6:
                raise ValueError(f"Weekday number out of range: {token!r}")
            days.add(day)
            continue
        key = token[:3]
        if key not in WEEKDAY_NAMES or not WEEKDAY_NAMES_FULL[key].startswith(token):
            raise ValueError(f"Unknown weekday: {token!r}")
        days.add(WEEKDAY_NAMES[key])
    return frozenset(days)


def parse_time_of_day(value: str) -> time:
    """Parse an ``HH:MM`` 24-hour string into a ``datetime.time``."""
    return datetime.strptime(value.strip(), "%H:%M").time()


def format_time_of_day(value: time) -> str:
    """Format a time of day as ``HH:MM`` (24-hour, zero padded)."""
    return value.strftime("%H:%M")

"""
Minute-of-day parsing and formatting.

All engine arithmetic stays in integer minutes; these helpers are the only
place where clock strings are produced or consumed.
"""

from typing import Optional

from tessera.core.exceptions import InvalidTimeError

MINUTES_IN_DAY = 24 * 60


def clamp_minutes(value: int, lower: int = 0, upper: int = MINUTES_IN_DAY) -> int:
    return max(lower, min(upper, value))


def parse_hhmm(value: Optional[str]) -> int:
    """
    Parse a 24h ``HH:MM`` string into minutes since midnight.

    ``24:00`` is accepted as the end of the day.

    Raises:
        InvalidTimeError: If the value is empty or not a valid clock time
    """
    if not value:
        raise InvalidTimeError("Please enter valid times (HH:MM).")
    parts = value.strip().split(":")
    if len(parts) != 2:
        raise InvalidTimeError(f"Invalid time: {value!r} (expected HH:MM)")
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError as exc:
        raise InvalidTimeError(f"Invalid time: {value!r} (expected HH:MM)") from exc
    if hours == 24 and minutes == 0:
        return MINUTES_IN_DAY
    if hours < 0 or hours > 23 or minutes < 0 or minutes > 59:
        raise InvalidTimeError(f"Invalid time: {value!r} (expected HH:MM)")
    return hours * 60 + minutes


def try_parse_hhmm(value: Optional[str]) -> Optional[int]:
    """Parse ``HH:MM`` or return None for missing/garbled input."""
    try:
        return parse_hhmm(value)
    except InvalidTimeError:
        return None


def format_hhmm(minutes: int) -> str:
    """Format minutes as zero-padded 24h ``HH:MM`` for editing."""
    total = round(minutes)
    return f"{total // 60:02d}:{total % 60:02d}"


def format_12h(minutes: int) -> str:
    """
    Format minutes as a 12h read-only label.

    Example:
        >>> format_12h(13 * 60 + 5)
        '1:05 PM'
    """
    total = round(minutes)
    hours = (total // 60) % 24
    mins = total % 60
    period = "PM" if hours >= 12 else "AM"
    hour12 = 12 if hours % 12 == 0 else hours % 12
    return f"{hour12}:{mins:02d} {period}"


def format_range_12h(start_minutes: int, end_minutes: int) -> str:
    return f"{format_12h(start_minutes)} - {format_12h(end_minutes)}"

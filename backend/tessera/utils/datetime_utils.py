"""
Calendar date utilities.

Dates crossing the planner boundary are local-calendar ``YYYY-MM-DD`` strings
without a timezone component. Weeks are anchored on Monday while day windows
are indexed Sun-first (0=Sun ... 6=Sat).
"""

from datetime import date, datetime, timedelta, timezone

# UTC timezone constant
UTC = timezone.utc

WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Returns:
        datetime: Current UTC time with tzinfo set to UTC
    """
    return datetime.now(UTC)


def week_monday(day: date) -> date:
    """Get the Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def week_monday_iso(day: date) -> str:
    """Get the Monday of the week containing ``day`` as ``YYYY-MM-DD``."""
    return week_monday(day).isoformat()


def weekday_index(day: date) -> int:
    """
    Sun-first weekday index used by day windows.

    Example:
        >>> weekday_index(date(2026, 10, 18))  # Sunday
        0
    """
    return day.isoweekday() % 7

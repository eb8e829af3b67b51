"""
Weekly capacity check.

Compares available window minutes against requested work minutes. Going over
capacity is a surfaced state, not an error: the layout still runs and pushes
the excess into overflow blocks.
"""

from __future__ import annotations

from typing import Iterable

from tessera.core.logger import setup_logger
from tessera.models.schedule import CapacitySummary
from tessera.models.window import DayWindow
from tessera.models.work_item import WorkItem

logger = setup_logger(__name__)


def available_minutes(days: Iterable[DayWindow]) -> int:
    return sum(day.span_minutes for day in days if day.active)


def needed_minutes(items: Iterable[WorkItem]) -> int:
    return sum(item.weekly_minutes_requested for item in items if item.enabled)


def calculate_capacity(days: list[DayWindow], items: list[WorkItem]) -> CapacitySummary:
    """
    Summarize available vs requested minutes for a week.

    Args:
        days: Day windows (inactive days are ignored)
        items: Work items (disabled items are ignored)

    Returns:
        CapacitySummary with signed slack (negative = over capacity)
    """
    available = available_minutes(days)
    needed = needed_minutes(items)
    slack = available - needed
    summary = CapacitySummary(
        available_minutes=available,
        needed_minutes=needed,
        slack_minutes=slack,
        over_capacity=slack < 0,
        active_day_count=sum(1 for day in days if day.active),
    )
    if summary.over_capacity:
        logger.warning(
            f"Week over capacity by {-slack} minutes "
            f"(available={available}, needed={needed})"
        )
    return summary

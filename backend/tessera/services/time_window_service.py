"""
Time window editing rules.

Edits always leave an active window at least a nominal span wide instead of a
degenerate or inverted range. Toggling a day never touches its start/end, and
bulk default changes skip days the user customized.
"""

from __future__ import annotations

from typing import Optional

from tessera.core.exceptions import NotFoundError, ValidationError
from tessera.core.logger import setup_logger
from tessera.models.enums import WindowEditField
from tessera.models.window import DayWindow, WindowEditRequest, WindowEditResponse
from tessera.utils.time_utils import MINUTES_IN_DAY, clamp_minutes, parse_hhmm

logger = setup_logger(__name__)

NOMINAL_SPAN_MINUTES = 60


def normalize_start_edit(start: int, end: int) -> tuple[int, int]:
    """Clamp a (start, end) pair after the start was edited."""
    start = clamp_minutes(start)
    end = clamp_minutes(end)
    if end <= start:
        end = min(MINUTES_IN_DAY, start + NOMINAL_SPAN_MINUTES)
        if end <= start:
            # start pinned at midnight: pull start back instead
            start = max(0, end - NOMINAL_SPAN_MINUTES)
    return start, end


def normalize_end_edit(start: int, end: int) -> tuple[int, int]:
    """Clamp a (start, end) pair after the end was edited."""
    start = clamp_minutes(start)
    end = clamp_minutes(end)
    if end <= start:
        start = max(0, end - NOMINAL_SPAN_MINUTES)
        if end <= start:
            end = min(MINUTES_IN_DAY, start + NOMINAL_SPAN_MINUTES)
    return start, end


def edit_window_start(window: DayWindow, new_start: int) -> DayWindow:
    start, end = normalize_start_edit(new_start, window.end_minutes)
    return window.model_copy(
        update={"start_minutes": start, "end_minutes": end, "is_custom_override": True}
    )


def edit_window_end(window: DayWindow, new_end: int) -> DayWindow:
    start, end = normalize_end_edit(window.start_minutes, new_end)
    return window.model_copy(
        update={"start_minutes": start, "end_minutes": end, "is_custom_override": True}
    )


def set_window_active(window: DayWindow, active: bool) -> DayWindow:
    """
    Flip a day on or off. Start/end are kept, except that an inactive day
    holding an inverted range is normalized like an end edit when activated.
    """
    if active and window.end_minutes <= window.start_minutes:
        start, end = normalize_end_edit(window.start_minutes, window.end_minutes)
        return window.model_copy(update={"active": True, "start_minutes": start, "end_minutes": end})
    return window.model_copy(update={"active": active})


def reset_window_override(window: DayWindow, default_start: int, default_end: int) -> DayWindow:
    start, end = normalize_end_edit(default_start, default_end)
    return window.model_copy(
        update={"start_minutes": start, "end_minutes": end, "is_custom_override": False}
    )


def apply_default_window(
    days: list[DayWindow],
    default_start: int,
    default_end: int,
) -> tuple[list[DayWindow], int, int]:
    """
    Apply a new weekly default to every non-custom day.

    Returns:
        (days, normalized_start, normalized_end)
    """
    start, end = normalize_end_edit(default_start, default_end)
    updated: list[DayWindow] = []
    skipped = 0
    for day in days:
        if day.is_custom_override:
            skipped += 1
            updated.append(day)
            continue
        updated.append(day.model_copy(update={"start_minutes": start, "end_minutes": end}))
    logger.debug(f"Applied default window {start}-{end} ({skipped} custom days kept)")
    return updated, start, end


def _replace_day(days: list[DayWindow], day_id: Optional[int], updater) -> list[DayWindow]:
    if day_id is None:
        raise ValidationError("day_id is required for this edit")
    if not any(day.id == day_id for day in days):
        raise NotFoundError(f"Day {day_id} not found")
    return [updater(day) if day.id == day_id else day for day in days]


def apply_window_edit(request: WindowEditRequest) -> WindowEditResponse:
    """
    Apply one wizard edit to the week configuration.

    Raises:
        InvalidTimeError: If a ``HH:MM`` value cannot be parsed
        ValidationError: If a required value is missing
    """
    days = list(request.days)
    default_start = request.default_start_minutes
    default_end = request.default_end_minutes

    if request.field == WindowEditField.START:
        minutes = parse_hhmm(request.start)
        days = _replace_day(days, request.day_id, lambda day: edit_window_start(day, minutes))
    elif request.field == WindowEditField.END:
        minutes = parse_hhmm(request.end)
        days = _replace_day(days, request.day_id, lambda day: edit_window_end(day, minutes))
    elif request.field == WindowEditField.ACTIVE:
        if request.active is None:
            raise ValidationError("active is required for this edit")
        days = _replace_day(days, request.day_id, lambda day: set_window_active(day, request.active))
    elif request.field == WindowEditField.DEFAULTS:
        start = parse_hhmm(request.start) if request.start else default_start
        end = parse_hhmm(request.end) if request.end else default_end
        days, default_start, default_end = apply_default_window(days, start, end)
    elif request.field == WindowEditField.RESET:
        days = _replace_day(
            days,
            request.day_id,
            lambda day: reset_window_override(day, default_start, default_end),
        )

    return WindowEditResponse(
        days=days,
        default_start_minutes=default_start,
        default_end_minutes=default_end,
    )

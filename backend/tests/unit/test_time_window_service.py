"""
Unit tests for day window editing rules.
"""

import pytest

from tessera.core.exceptions import InvalidTimeError
from tessera.models.enums import WindowEditField
from tessera.models.window import DayWindow, WindowEditRequest, make_default_days
from tessera.services.time_window_service import (
    apply_default_window,
    apply_window_edit,
    edit_window_end,
    edit_window_start,
    reset_window_override,
    set_window_active,
)


def _monday(start: int = 540, end: int = 1020, custom: bool = False) -> DayWindow:
    return DayWindow(id=1, label="Mon", start_minutes=start, end_minutes=end, is_custom_override=custom)


def test_default_days():
    days = make_default_days()
    assert [day.label for day in days] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    assert [day.active for day in days] == [False, True, True, True, True, True, False]
    assert all(day.start_minutes == 540 and day.end_minutes == 1020 for day in days)
    assert not any(day.is_custom_override for day in days)


@pytest.mark.parametrize("new_start", [1020, 1100, 1380])
def test_start_at_or_after_end_pushes_end(new_start):
    window = edit_window_start(_monday(), new_start)
    assert window.start_minutes == new_start
    assert window.end_minutes == min(1440, new_start + 60)
    assert window.is_custom_override is True


def test_start_edit_clamps_to_day():
    window = edit_window_start(_monday(), 1500)
    assert window.end_minutes == 1440
    assert window.start_minutes < window.end_minutes


@pytest.mark.parametrize("new_end", [540, 500, 30])
def test_end_at_or_before_start_pulls_start(new_end):
    window = edit_window_end(_monday(), new_end)
    assert window.end_minutes == new_end
    assert window.start_minutes == max(0, new_end - 60)


def test_end_edit_clamps_negative():
    window = edit_window_end(_monday(), -20)
    assert window.start_minutes == 0
    assert window.end_minutes == 60


def test_toggle_keeps_times():
    window = set_window_active(_monday(600, 900), False)
    assert window.active is False
    assert (window.start_minutes, window.end_minutes) == (600, 900)


def test_activating_inverted_day_normalizes_range():
    days = make_default_days()
    days[6] = DayWindow(id=6, label="Sat", active=False, start_minutes=900, end_minutes=600)

    response = apply_window_edit(WindowEditRequest(days=days, field=WindowEditField.ACTIVE, day_id=6, active=True))

    saturday = response.days[6]
    assert saturday.active is True
    assert (saturday.start_minutes, saturday.end_minutes) == (540, 600)


def test_apply_defaults_skips_custom_days():
    days = make_default_days()
    days[2] = days[2].model_copy(update={"start_minutes": 600, "end_minutes": 700, "is_custom_override": True})

    updated, start, end = apply_default_window(days, 480, 960)

    assert (start, end) == (480, 960)
    assert (updated[2].start_minutes, updated[2].end_minutes) == (600, 700)
    for index in (0, 1, 3, 4, 5, 6):
        assert (updated[index].start_minutes, updated[index].end_minutes) == (480, 960)


def test_reset_override_reapplies_defaults():
    window = reset_window_override(_monday(600, 700, custom=True), 540, 1020)
    assert window.is_custom_override is False
    assert (window.start_minutes, window.end_minutes) == (540, 1020)


def test_apply_window_edit_start():
    request = WindowEditRequest(days=make_default_days(), field=WindowEditField.START, day_id=1, start="18:00")
    response = apply_window_edit(request)
    monday = response.days[1]
    assert (monday.start_minutes, monday.end_minutes) == (1080, 1140)
    assert monday.is_custom_override is True


def test_apply_window_edit_defaults():
    request = WindowEditRequest(
        days=make_default_days(),
        field=WindowEditField.DEFAULTS,
        start="08:00",
        end="16:00",
    )
    response = apply_window_edit(request)
    assert response.default_start_minutes == 480
    assert response.default_end_minutes == 960
    assert all(day.start_minutes == 480 for day in response.days)


def test_apply_window_edit_rejects_bad_time():
    request = WindowEditRequest(days=make_default_days(), field=WindowEditField.END, day_id=1, end="5pm")
    with pytest.raises(InvalidTimeError):
        apply_window_edit(request)


def test_custom_flag_serializes_camel_case():
    data = _monday(custom=True).model_dump(by_alias=True)
    assert data["isCustomOverride"] is True
    assert DayWindow.model_validate({"id": 1, "label": "Mon", "custom": True}).is_custom_override is True

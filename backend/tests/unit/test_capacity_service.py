from tessera.models.window import make_default_days
from tessera.models.work_item import WorkItem
from tessera.services.capacity_service import calculate_capacity


def _item(project_id: str, minutes: int, enabled: bool = True) -> WorkItem:
    return WorkItem(
        project_id=project_id,
        display_name=project_id.title(),
        enabled=enabled,
        weekly_minutes_requested=minutes,
    )


def test_over_capacity_week():
    # Mon-Fri 09:00-17:00 = 2400 minutes
    summary = calculate_capacity(make_default_days(), [_item("a", 1800), _item("b", 1200)])

    assert summary.available_minutes == 2400
    assert summary.needed_minutes == 3000
    assert summary.slack_minutes == -600
    assert summary.over_capacity is True
    assert summary.active_day_count == 5


def test_ignores_inactive_days_and_disabled_items():
    days = make_default_days()
    days[0] = days[0].model_copy(update={"active": False, "start_minutes": 0, "end_minutes": 1440})
    days[1] = days[1].model_copy(update={"active": False})

    summary = calculate_capacity(days, [_item("a", 600), _item("b", 5000, enabled=False)])

    assert summary.available_minutes == 4 * 480
    assert summary.needed_minutes == 600
    assert summary.slack_minutes == 1320
    assert summary.over_capacity is False


def test_over_capacity_logs_warning(caplog):
    calculate_capacity(make_default_days(), [_item("a", 3000)])
    assert "over capacity by 600" in caplog.text

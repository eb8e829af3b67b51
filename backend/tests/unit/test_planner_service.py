"""
Unit tests for PlannerService (daily view over a saved plan).
"""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from tessera.core.exceptions import LockedBlockOverlapError, NotFoundError
from tessera.infrastructure.local.memory_store import InMemoryKeyValueStore
from tessera.models.enums import Scenario
from tessera.models.overrides import BlockEditRequest, BlockMoveRequest, BlockResizeRequest, SlotDropRequest
from tessera.models.plan import ProjectOrderMoveRequest, SavedPlan, WeeklyPreviewRequest
from tessera.models.schedule import MeetingRecord
from tessera.models.work_item import PriorityRow
from tessera.services.daily_relayout_service import DailyRelayoutService
from tessera.services.override_store import OverrideStore
from tessera.services.planner_service import PlannerService
from tessera.services.saved_plan_store import SavedPlanStore
from tessera.services.weekly_layout_service import WeeklyLayoutService

MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def override_store(kv):
    return OverrideStore(kv, key_prefix="tessera:")


@pytest.fixture
def planner(kv, override_store):
    return PlannerService(
        override_store=override_store,
        plan_store=SavedPlanStore(kv, key_prefix="tessera:"),
        layout_service=WeeklyLayoutService(lunch_start_minutes=720, lunch_minutes=30, default_meeting_minutes=30),
        relayout_service=DailyRelayoutService(slot_minutes=30, min_block_minutes=30),
    )


@pytest.fixture
async def saved_plan(planner):
    plan = SavedPlan(
        week_start_iso=MONDAY,
        priorities=[
            PriorityRow(project_id="a", weekly_hours=10, label="Alpha"),
            PriorityRow(project_id="b", weekly_hours=10, label="Beta"),
        ],
    )
    return await planner.save_plan(plan)


def _spans(response) -> list[tuple[str, int, int]]:
    return [(block.id, block.start_minutes, block.end_minutes) for block in response.blocks]


@pytest.mark.asyncio
async def test_today_without_plan_is_unplanned(planner):
    response = await planner.today(TUESDAY)
    assert response.status == "unplanned"
    assert response.blocks == []


@pytest.mark.asyncio
async def test_inactive_day_is_off(planner, saved_plan):
    response = await planner.today(date(2026, 10, 25))
    assert response.status == "off"
    assert response.label == "Sun"


@pytest.mark.asyncio
async def test_today_lays_out_saved_plan(planner, saved_plan):
    response = await planner.today(TUESDAY)

    assert response.status == "work"
    assert response.date_iso == "2026-10-20"
    assert _spans(response) == [
        ("work-a", 540, 660),
        ("work-b", 660, 720),
        ("lunch", 720, 750),
        ("work-b-2", 750, 810),
    ]
    assert response.work_minutes == 240
    assert response.timeline[-1].key == "empty-990"


@pytest.mark.asyncio
async def test_today_includes_meetings_for_date(planner, saved_plan):
    meetings = [
        MeetingRecord(id="m1", title="Standup", date_iso=TUESDAY, time="09:00", duration_minutes=30),
        MeetingRecord(id="m2", title="Other day", date_iso=MONDAY, time="09:00"),
    ]
    response = await planner.today(TUESDAY, meetings)
    ids = [block.id for block in response.blocks]
    assert "mtg-m1" in ids
    assert "mtg-m2" not in ids
    assert response.blocks[0].id == "mtg-m1"


@pytest.mark.asyncio
async def test_move_block_requantizes_and_persists(planner, saved_plan, override_store):
    response = await planner.move_block(TUESDAY, BlockMoveRequest(block_id="work-b-2", new_index=0))

    expected = [
        ("work-b-2", 540, 600),
        ("work-a", 600, 660),
        ("work-b", 660, 720),
        ("lunch", 720, 750),
    ]
    assert _spans(response) == expected
    assert response.evicted_block_ids == []
    assert await override_store.load_order("2026-10-20") == ["work-b-2", "work-a", "work-b", "lunch"]

    reloaded = await planner.today(TUESDAY)
    assert _spans(reloaded) == expected


@pytest.mark.asyncio
async def test_rejected_edit_leaves_state_untouched(planner, saved_plan, override_store):
    with pytest.raises(LockedBlockOverlapError) as exc_info:
        await planner.edit_block(TUESDAY, "work-a", BlockEditRequest(start="12:10", end="13:00"))

    assert exc_info.value.locked_block_id == "lunch"
    assert await override_store.load_overrides("2026-10-20") == {}


@pytest.mark.asyncio
async def test_edit_block_saves_override(planner, saved_plan):
    response = await planner.edit_block(TUESDAY, "work-b-2", BlockEditRequest(start="15:00", end="16:00"))
    block = next(block for block in response.blocks if block.id == "work-b-2")
    assert (block.start_minutes, block.end_minutes) == (900, 960)


@pytest.mark.asyncio
async def test_resize_block_keeps_start(planner, saved_plan):
    response = await planner.resize_block(TUESDAY, "work-b-2", BlockResizeRequest(duration_minutes=90))
    block = next(block for block in response.blocks if block.id == "work-b-2")
    assert (block.start_minutes, block.end_minutes) == (750, 840)


@pytest.mark.asyncio
async def test_drop_block_on_slot(planner, saved_plan):
    response = await planner.drop_block(TUESDAY, SlotDropRequest(block_id="work-b-2", slot_start_minutes=900))
    assert _spans(response)[-1] == ("work-b-2", 900, 960)


@pytest.mark.asyncio
async def test_unknown_block_raises(planner, saved_plan):
    with pytest.raises(NotFoundError):
        await planner.resize_block(TUESDAY, "work-zzz", BlockResizeRequest(duration_minutes=60))


@pytest.mark.asyncio
async def test_block_actions_need_a_plan(planner):
    with pytest.raises(NotFoundError):
        await planner.move_block(TUESDAY, BlockMoveRequest(block_id="work-a", new_index=0))


@pytest.mark.asyncio
async def test_get_plan_missing(planner):
    with pytest.raises(NotFoundError):
        await planner.get_plan(MONDAY)


@pytest.mark.asyncio
async def test_project_order_drives_today(planner, saved_plan):
    order = await planner.move_project(
        TUESDAY,
        ProjectOrderMoveRequest(project_ids=["a", "b"], moved_project_id="b", target_project_id="a"),
    )
    assert order.week_start_iso == MONDAY
    assert order.project_order == ["b", "a"]

    response = await planner.today(TUESDAY)
    assert response.blocks[0].id == "work-b"


@pytest.mark.asyncio
async def test_preview_uses_request_priorities(planner):
    request = WeeklyPreviewRequest(
        week_start_iso=TUESDAY,
        priorities=[PriorityRow(project_id="a", weekly_hours=50)],
    )

    preview = await planner.preview(request)

    assert preview.week_start_iso == MONDAY
    assert preview.capacity.slack_minutes == -600
    assert len(preview.days) == 5
    assert all(day.blocks[-1].is_overflow for day in preview.days)


@pytest.mark.asyncio
async def test_suggest_priorities(planner):
    suggestions = await planner.suggest_priorities(TUESDAY, Scenario.NORMAL)
    assert suggestions.week_start_iso == MONDAY
    assert [row.project_id for row in suggestions.priorities][0] == "gailforce"
    assert len(suggestions.projects) == 5


@pytest.mark.asyncio
async def test_preview_falls_back_to_stored_project_order():
    override_store = AsyncMock(spec=OverrideStore)
    override_store.load_project_order.return_value = ["b", "a"]
    planner = PlannerService(override_store=override_store, plan_store=AsyncMock(spec=SavedPlanStore))

    preview = await planner.preview(
        WeeklyPreviewRequest(
            week_start_iso=MONDAY,
            priorities=[
                PriorityRow(project_id="a", weekly_hours=5),
                PriorityRow(project_id="b", weekly_hours=5),
            ],
        )
    )

    override_store.load_project_order.assert_awaited_once_with("2026-10-19")
    assert preview.days[0].blocks[0].project_ref == "b"

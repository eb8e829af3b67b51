"""
Unit tests for the persisted order/override and saved plan stores.
"""

import json
from datetime import date

import pytest

from tessera.infrastructure.local.memory_store import InMemoryKeyValueStore
from tessera.models.overrides import TimeOverride
from tessera.models.plan import SavedPlan
from tessera.models.work_item import PriorityRow
from tessera.services.override_store import OverrideStore
from tessera.services.saved_plan_store import SavedPlanStore

DAY = "2026-10-20"


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def overrides(kv):
    return OverrideStore(kv, key_prefix="tessera:")


@pytest.fixture
def plans(kv):
    return SavedPlanStore(kv, key_prefix="tessera:")


@pytest.mark.asyncio
async def test_order_round_trip(overrides, kv):
    assert await overrides.load_order(DAY) is None

    await overrides.save_order(DAY, ["work-a", "lunch"])
    await overrides.save_order("2026-10-21", ["work-b"])

    assert await overrides.load_order(DAY) == ["work-a", "lunch"]
    stored = json.loads(await kv.get("tessera:dailyRundownOrder"))
    assert stored == {DAY: ["work-a", "lunch"], "2026-10-21": ["work-b"]}


@pytest.mark.asyncio
async def test_malformed_order_reads_as_empty(overrides, kv):
    await kv.set("tessera:dailyRundownOrder", "{not json")
    assert await overrides.load_order(DAY) is None

    await kv.set("tessera:dailyRundownOrder", json.dumps([1, 2, 3]))
    assert await overrides.load_order(DAY) is None

    await kv.set("tessera:dailyRundownOrder", json.dumps({DAY: "work-a"}))
    assert await overrides.load_order(DAY) is None


@pytest.mark.asyncio
async def test_malformed_order_is_replaced_on_save(overrides, kv):
    await kv.set("tessera:dailyRundownOrder", "garbage")
    await overrides.save_order(DAY, ["a"])
    assert await overrides.load_order(DAY) == ["a"]


@pytest.mark.asyncio
async def test_override_round_trip_uses_camel_case(overrides, kv):
    await overrides.save_override(DAY, "work-a", TimeOverride(start_minutes=600, end_minutes=660))
    await overrides.save_override(DAY, "work-b", TimeOverride(start_minutes=660, end_minutes=690))

    loaded = await overrides.load_overrides(DAY)

    assert loaded == {
        "work-a": TimeOverride(start_minutes=600, end_minutes=660),
        "work-b": TimeOverride(start_minutes=660, end_minutes=690),
    }
    stored = json.loads(await kv.get("tessera:dailyRundownOverrides"))
    assert stored[DAY]["work-a"] == {"startMinutes": 600, "endMinutes": 660}


@pytest.mark.asyncio
async def test_invalid_override_entries_are_dropped(overrides, kv):
    await kv.set(
        "tessera:dailyRundownOverrides",
        json.dumps(
            {
                DAY: {
                    "inverted": {"startMinutes": 700, "endMinutes": 600},
                    "shape": "nope",
                    "ok": {"startMinutes": 540, "endMinutes": 600},
                }
            }
        ),
    )
    assert await overrides.load_overrides(DAY) == {"ok": TimeOverride(start_minutes=540, end_minutes=600)}


@pytest.mark.asyncio
async def test_save_overrides_for_date_replaces_day(overrides):
    await overrides.save_override(DAY, "old", TimeOverride(start_minutes=540, end_minutes=570))
    await overrides.save_overrides_for_date(DAY, {"new": TimeOverride(start_minutes=600, end_minutes=630)})
    assert set(await overrides.load_overrides(DAY)) == {"new"}


@pytest.mark.asyncio
async def test_clear_overrides(overrides):
    await overrides.save_override(DAY, "a", TimeOverride(start_minutes=540, end_minutes=570))
    await overrides.save_override(DAY, "b", TimeOverride(start_minutes=570, end_minutes=600))

    await overrides.clear_overrides(DAY, ["a"])
    assert set(await overrides.load_overrides(DAY)) == {"b"}

    await overrides.clear_overrides(DAY)
    assert await overrides.load_overrides(DAY) == {}


@pytest.mark.asyncio
async def test_project_order_per_week(overrides, kv):
    await overrides.save_project_order("2026-10-19", ["b", "a"])

    assert await overrides.load_project_order("2026-10-19") == ["b", "a"]
    assert await overrides.load_project_order("2026-10-26") is None
    assert json.loads(await kv.get("tessera:plannerProjectOrder:2026-10-19")) == ["b", "a"]

    await kv.set("tessera:plannerProjectOrder:2026-10-26", '{"a": 1}')
    assert await overrides.load_project_order("2026-10-26") is None


@pytest.mark.asyncio
async def test_saved_plan_round_trip(plans, kv):
    plan = SavedPlan(
        week_start_iso=date(2026, 10, 21),
        priorities=[PriorityRow(project_id="a", weekly_hours=10, label="Alpha")],
        project_done_from_day_index={"a": 4},
    )

    saved = await plans.save(plan)

    assert saved.week_start_iso == date(2026, 10, 19)
    assert saved.saved_at is not None
    raw = json.loads(await kv.get("tessera:weeklyPlan:2026-10-19"))
    assert raw["weekStartIso"] == "2026-10-19"
    assert raw["projectDoneFromDayIndex"] == {"a": 4}
    assert raw["days"][1]["isCustomOverride"] is False

    loaded = await plans.load(date(2026, 10, 23))
    assert loaded is not None
    assert loaded.priorities[0].weekly_minutes == 600


@pytest.mark.asyncio
async def test_corrupt_saved_plan_reads_as_absent(plans, kv):
    await kv.set("tessera:weeklyPlan:2026-10-19", "{broken")
    assert await plans.load(date(2026, 10, 19)) is None

    await kv.set("tessera:weeklyPlan:2026-10-19", json.dumps({"scenario": "normal"}))
    assert await plans.load(date(2026, 10, 19)) is None

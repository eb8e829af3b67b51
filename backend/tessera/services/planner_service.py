"""
Planner orchestration.

Connects the pure layout engines to the persisted state: saved weekly plans,
per-week project order, and the per-date block order and time overrides of
the daily view.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from tessera.core.exceptions import NotFoundError
from tessera.core.logger import setup_logger
from tessera.models.enums import BlockKind, Scenario
from tessera.models.overrides import (
    BlockEditRequest,
    BlockMoveRequest,
    BlockResizeRequest,
    SlotDropRequest,
    TodayResponse,
)
from tessera.models.plan import (
    PlanInput,
    ProjectOrderMoveRequest,
    ProjectOrderResponse,
    SavedPlan,
    SuggestionResponse,
    WeeklyPreviewRequest,
    WeeklyPreviewResponse,
)
from tessera.models.schedule import CapacitySummary, MeetingRecord, TimeBlock
from tessera.models.window import DayWindow, WindowEditRequest, WindowEditResponse
from tessera.models.work_item import PriorityRow, WorkItem
from tessera.services.capacity_service import calculate_capacity
from tessera.services.daily_relayout_service import (
    DailyRelayoutService,
    apply_order,
    apply_overrides,
    find_block_index,
)
from tessera.services.override_store import OverrideStore
from tessera.services.saved_plan_store import SavedPlanStore
from tessera.services.scoring_service import (
    MilestoneStalenessScoring,
    ScoringContext,
    ScoringStrategy,
    build_scenario_projects,
    to_priority_rows,
)
from tessera.services.time_window_service import apply_window_edit
from tessera.services.weekly_layout_service import (
    WeeklyLayoutService,
    order_priorities,
    reorder_projects,
)
from tessera.utils.datetime_utils import week_monday, week_monday_iso, weekday_index

logger = setup_logger(__name__)

STATUS_WORK = "work"
STATUS_OFF = "off"
STATUS_UNPLANNED = "unplanned"


@dataclass
class _TodayState:
    """Blocks of one date after overrides and saved order are applied."""

    day: date
    status: str
    window: Optional[DayWindow] = None
    blocks: list[TimeBlock] = field(default_factory=list)

    @property
    def date_iso(self) -> str:
        return self.day.isoformat()


def build_work_items(priorities: list[PriorityRow], labels: Optional[dict[str, str]] = None) -> list[WorkItem]:
    labels = labels or {}
    return [row.to_work_item(labels.get(row.project_id)) for row in priorities]


class PlannerService:
    """Weekly planning and daily re-layout use cases."""

    def __init__(
        self,
        override_store: OverrideStore,
        plan_store: SavedPlanStore,
        layout_service: Optional[WeeklyLayoutService] = None,
        relayout_service: Optional[DailyRelayoutService] = None,
        scoring: Optional[ScoringStrategy] = None,
    ):
        self._override_store = override_store
        self._plan_store = plan_store
        self._layout = layout_service or WeeklyLayoutService()
        self._relayout = relayout_service or DailyRelayoutService()
        self._scoring = scoring or MilestoneStalenessScoring()

    # ------------------------------------------------------------------
    # Weekly planner
    # ------------------------------------------------------------------

    def capacity(self, request: PlanInput) -> CapacitySummary:
        return calculate_capacity(request.days, build_work_items(request.priorities, request.labels))

    def edit_windows(self, request: WindowEditRequest) -> WindowEditResponse:
        return apply_window_edit(request)

    async def preview(self, request: WeeklyPreviewRequest) -> WeeklyPreviewResponse:
        """
        Lay out the whole week for the wizard's finalize step.

        Uses the request's project order, falling back to the order saved for
        that week.
        """
        week_start = week_monday(request.week_start_iso)
        project_order = request.project_order
        if project_order is None:
            project_order = await self._override_store.load_project_order(week_start.isoformat())

        items = order_priorities(build_work_items(request.priorities, request.labels), project_order)
        days = self._layout.build_week(
            week_start,
            request.days,
            items,
            meetings=request.meetings,
            done_from_day_index=request.project_done_from_day_index,
        )
        return WeeklyPreviewResponse(
            week_start_iso=week_start,
            capacity=calculate_capacity(request.days, items),
            days=days,
        )

    async def suggest_priorities(self, week_start: date, scenario: Scenario) -> SuggestionResponse:
        monday = week_monday(week_start)
        projects = build_scenario_projects(scenario)
        scored = self._scoring.score_projects(projects, ScoringContext(week_start=monday))
        return SuggestionResponse(
            week_start_iso=monday,
            scenario=scenario,
            projects=scored,
            priorities=to_priority_rows(scored),
        )

    async def save_plan(self, plan: SavedPlan) -> SavedPlan:
        return await self._plan_store.save(plan)

    async def get_plan(self, week_start: date) -> SavedPlan:
        """
        Raises:
            NotFoundError: If no plan was saved for that week
        """
        plan = await self._plan_store.load(week_start)
        if plan is None:
            raise NotFoundError(f"No saved plan for week of {week_monday_iso(week_start)}")
        return plan

    async def move_project(self, week_start: date, request: ProjectOrderMoveRequest) -> ProjectOrderResponse:
        """Drag one project onto another; the new order applies to the whole week."""
        monday = week_monday(week_start)
        new_order = reorder_projects(request.project_ids, request.moved_project_id, request.target_project_id)
        await self._override_store.save_project_order(monday.isoformat(), new_order)
        return ProjectOrderResponse(week_start_iso=monday, project_order=new_order)

    # ------------------------------------------------------------------
    # Daily view
    # ------------------------------------------------------------------

    async def _load_today(self, day: date, meetings: list[MeetingRecord]) -> _TodayState:
        plan = await self._plan_store.load(day)
        if plan is None:
            return _TodayState(day=day, status=STATUS_UNPLANNED)

        window = next((candidate for candidate in plan.days if candidate.id == weekday_index(day)), None)
        if window is None or not window.active or window.end_minutes <= window.start_minutes:
            return _TodayState(day=day, status=STATUS_OFF, window=window)

        monday = week_monday(day)
        project_order = await self._override_store.load_project_order(monday.isoformat())
        if project_order is None:
            project_order = plan.manual_order

        items = order_priorities(build_work_items(plan.priorities), project_order)
        week = self._layout.build_week(
            monday,
            plan.days,
            items,
            meetings=[meeting for meeting in meetings if meeting.date_iso == day],
            done_from_day_index=plan.project_done_from_day_index,
        )
        day_plan = next((candidate for candidate in week if candidate.date_iso == day), None)
        base = day_plan.blocks if day_plan else []

        date_iso = day.isoformat()
        overrides = await self._override_store.load_overrides(date_iso)
        order = await self._override_store.load_order(date_iso)
        blocks = apply_order(apply_overrides(base, overrides, window.end_minutes), order)
        return _TodayState(day=day, status=STATUS_WORK, window=window, blocks=blocks)

    def _render(self, state: _TodayState, evicted_block_ids: Optional[list[str]] = None) -> TodayResponse:
        if state.status != STATUS_WORK or state.window is None:
            return TodayResponse(
                date_iso=state.date_iso,
                status=state.status,
                label=state.window.label if state.window else None,
            )
        window = state.window
        return TodayResponse(
            date_iso=state.date_iso,
            status=state.status,
            label=window.label,
            window_start_minutes=window.start_minutes,
            window_end_minutes=window.end_minutes,
            blocks=state.blocks,
            timeline=self._relayout.build_timeline_rows(state.blocks, window.start_minutes, window.end_minutes),
            work_minutes=sum(block.duration_minutes for block in state.blocks if block.kind == BlockKind.WORK),
            evicted_block_ids=evicted_block_ids or [],
        )

    async def _require_block(self, day: date, block_id: str, meetings: list[MeetingRecord]) -> tuple[_TodayState, TimeBlock]:
        state = await self._load_today(day, meetings)
        if state.status != STATUS_WORK:
            raise NotFoundError(f"No planned blocks for {state.date_iso}")
        return state, state.blocks[find_block_index(state.blocks, block_id)]

    async def today(self, day: date, meetings: Optional[list[MeetingRecord]] = None) -> TodayResponse:
        """Today's blocks: computed base, then overrides, then saved order."""
        return self._render(await self._load_today(day, meetings or []))

    async def move_block(self, day: date, request: BlockMoveRequest) -> TodayResponse:
        """
        Drag a block to a new list position.

        Evicts window overflow, saves the new order, re-quantizes and replaces
        the date's overrides with the recomputed flexible block times.
        """
        state, _ = await self._require_block(day, request.block_id, request.meetings)
        window = state.window
        result = self._relayout.move_block(
            state.blocks,
            request.block_id,
            request.new_index,
            window.start_minutes,
            window.end_minutes,
        )
        await self._override_store.save_order(state.date_iso, result.order)
        await self._override_store.save_overrides_for_date(state.date_iso, result.overrides)
        logger.info(
            f"Moved {request.block_id} to {request.new_index} on {state.date_iso} "
            f"({len(result.evicted_block_ids)} evicted)"
        )
        state.blocks = result.blocks
        return self._render(state, result.evicted_block_ids)

    async def drop_block(self, day: date, request: SlotDropRequest) -> TodayResponse:
        state, _ = await self._require_block(day, request.block_id, request.meetings)
        window = state.window
        updated, override = self._relayout.drop_on_slot(
            state.blocks,
            request.block_id,
            request.slot_start_minutes,
            window.start_minutes,
            window.end_minutes,
        )
        await self._override_store.save_override(state.date_iso, request.block_id, override)
        await self._override_store.save_order(state.date_iso, [block.id for block in updated])
        state.blocks = updated
        return self._render(state)

    async def edit_block(self, day: date, block_id: str, request: BlockEditRequest) -> TodayResponse:
        """
        Manual time edit of one block. Rejected edits leave the stored state untouched.

        Raises:
            InvalidTimeError: Unparsable or inverted times
            LockedBlockOverlapError: Range overlaps a meeting or lunch
        """
        state, block = await self._require_block(day, block_id, request.meetings)
        window = state.window
        override = self._relayout.validate_manual_edit(
            block,
            request.start,
            request.end,
            state.blocks,
            window.start_minutes,
            window.end_minutes,
        )
        await self._override_store.save_override(state.date_iso, block_id, override)
        return await self.today(day, request.meetings)

    async def resize_block(self, day: date, block_id: str, request: BlockResizeRequest) -> TodayResponse:
        state, block = await self._require_block(day, block_id, request.meetings)
        window = state.window
        override = self._relayout.resize_block(
            block,
            request.duration_minutes,
            window.start_minutes,
            window.end_minutes,
        )
        await self._override_store.save_override(state.date_iso, block_id, override)
        return await self.today(day, request.meetings)

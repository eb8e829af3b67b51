"""
Weekly planner API endpoints.

Capacity check, window editing, weekly preview, saved plans and project order.
"""

from datetime import date

from fastapi import APIRouter, HTTPException, Query, status

from tessera.api.deps import Planner
from tessera.core.exceptions import NotFoundError, ValidationError
from tessera.models.enums import Scenario
from tessera.models.plan import (
    PlanInput,
    ProjectOrderMoveRequest,
    ProjectOrderResponse,
    SavedPlan,
    SuggestionResponse,
    WeeklyPreviewRequest,
    WeeklyPreviewResponse,
)
from tessera.models.schedule import CapacitySummary
from tessera.models.window import WindowEditRequest, WindowEditResponse

router = APIRouter()


@router.post("/capacity", response_model=CapacitySummary)
async def get_capacity(request: PlanInput, planner: Planner):
    """Available vs requested minutes for the configured week."""
    return planner.capacity(request)


@router.post("/windows/edit", response_model=WindowEditResponse)
async def edit_windows(request: WindowEditRequest, planner: Planner):
    """Apply one start/end/active/defaults/reset edit to the day windows."""
    try:
        return planner.edit_windows(request)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        )


@router.post("/preview", response_model=WeeklyPreviewResponse)
async def preview_week(request: WeeklyPreviewRequest, planner: Planner):
    """Lay out every active day of the week."""
    return await planner.preview(request)


@router.get(
    "/suggestions/{week_start}",
    response_model=SuggestionResponse,
)
async def suggest_priorities(
    week_start: date,
    planner: Planner,
    scenario: Scenario = Query(Scenario.NORMAL),
):
    """Scored sample projects and the priority rows they suggest."""
    return await planner.suggest_priorities(week_start, scenario)


@router.get("/plans/{week_start}", response_model=SavedPlan)
async def get_plan(week_start: date, planner: Planner):
    """Get the saved plan for the week containing ``week_start``."""
    try:
        return await planner.get_plan(week_start)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        )


@router.put("/plans/{week_start}", response_model=SavedPlan)
async def save_plan(week_start: date, plan: SavedPlan, planner: Planner):
    """Save (or replace) the plan for a week. The path date wins over the body."""
    return await planner.save_plan(plan.model_copy(update={"week_start_iso": week_start}))


@router.put(
    "/plans/{week_start}/project-order",
    response_model=ProjectOrderResponse,
)
async def move_project(week_start: date, request: ProjectOrderMoveRequest, planner: Planner):
    """Drag one project's block onto another's; reorders the whole week."""
    try:
        return await planner.move_project(week_start, request)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )

"""
Saved weekly plan and weekly preview models.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import Field

from tessera.models.base import CamelModel
from tessera.models.enums import Scenario
from tessera.models.project import ScoredProject
from tessera.models.schedule import CapacitySummary, DayPlan, MeetingRecord
from tessera.models.window import (
    DEFAULT_END_MINUTES,
    DEFAULT_START_MINUTES,
    DayWindow,
    make_default_days,
)
from tessera.models.work_item import PriorityRow
from tessera.utils.time_utils import MINUTES_IN_DAY


class SavedPlan(CamelModel):
    """
    Finalized weekly plan.

    Keyed by the Monday (``YYYY-MM-DD``) of the week it describes.
    """

    week_start_iso: date
    scenario: Scenario = Scenario.NORMAL
    days: list[DayWindow] = Field(default_factory=make_default_days)
    default_start_minutes: int = Field(DEFAULT_START_MINUTES, ge=0, le=MINUTES_IN_DAY)
    default_end_minutes: int = Field(DEFAULT_END_MINUTES, ge=0, le=MINUTES_IN_DAY)
    manual_order: Optional[list[str]] = None
    priorities: list[PriorityRow] = Field(default_factory=list)
    project_done_from_day_index: dict[str, int] = Field(default_factory=dict)
    saved_at: Optional[datetime] = None


class PlanInput(CamelModel):
    """Week configuration + priorities as sent by the planner wizard."""

    days: list[DayWindow] = Field(default_factory=make_default_days, min_length=7, max_length=7)
    priorities: list[PriorityRow] = Field(default_factory=list)
    project_done_from_day_index: dict[str, int] = Field(default_factory=dict)
    project_order: Optional[list[str]] = None
    labels: dict[str, str] = Field(default_factory=dict, description="projectId -> display name")


class WeeklyPreviewRequest(PlanInput):
    week_start_iso: date
    meetings: list[MeetingRecord] = Field(default_factory=list)


class WeeklyPreviewResponse(CamelModel):
    week_start_iso: date
    capacity: CapacitySummary
    days: list[DayPlan] = Field(default_factory=list)


class ProjectOrderMoveRequest(CamelModel):
    """Drag one project's block onto another project's block."""

    project_ids: list[str] = Field(..., description="Current ordered project ids")
    moved_project_id: str
    target_project_id: str


class ProjectOrderResponse(CamelModel):
    week_start_iso: date
    project_order: list[str]


class SuggestionResponse(CamelModel):
    """Scored projects for a week plus the priority rows they seed."""

    week_start_iso: date
    scenario: Scenario
    projects: list[ScoredProject] = Field(default_factory=list)
    priorities: list[PriorityRow] = Field(default_factory=list)

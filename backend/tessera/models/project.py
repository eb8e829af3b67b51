"""
Project signal models used by the prioritization strategy.

These records come from the external project/milestone/meeting stores. The
scoring strategy turns them into weekly minute requests; the layout engine
never reads them directly.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from tessera.models.base import CamelModel


class ProjectSignals(CamelModel):
    """Per-project workload signals for one week."""

    id: str
    name: str
    company: Optional[str] = None
    base_weekly_hours: float = Field(0.0, ge=0)
    last_touched_days_ago: int = Field(0, ge=0)
    milestone_count: int = Field(0, ge=0)
    tomorrow_tasks_count: int = Field(0, ge=0)
    meeting_count: int = Field(0, ge=0)


class AutoTask(CamelModel):
    """Auto-expanded task line that contributes to a project's weekly request."""

    id: str
    label: str
    estimated_minutes: int = Field(..., ge=0)
    included: bool = True


class ScoredProject(CamelModel):
    """Scoring result for one project."""

    project_id: str
    project_name: str
    company_name: Optional[str] = None
    priority_score: float
    weekly_minutes_requested: int = Field(..., ge=0)
    auto_tasks: list[AutoTask] = Field(default_factory=list)

"""
Work item models.

A work item is a project's weekly time request. How many minutes a project
asks for is decided by a scoring strategy outside the layout engine; the
engine only sees the resulting demand.
"""

from typing import Optional

from pydantic import Field

from tessera.models.base import CamelModel


class WorkItem(CamelModel):
    """Weighted demand consumed by the layout engine."""

    project_id: str = Field(..., min_length=1)
    display_name: str
    company_name: Optional[str] = None
    enabled: bool = True
    weekly_minutes_requested: int = Field(0, ge=0)


class PriorityRow(CamelModel):
    """Persisted form of a work item inside a saved plan."""

    project_id: str = Field(..., min_length=1)
    enabled: bool = True
    weekly_hours: float = Field(0.0, ge=0)
    label: Optional[str] = None

    @property
    def weekly_minutes(self) -> int:
        return round(self.weekly_hours * 60)

    def to_work_item(self, display_name: Optional[str] = None) -> WorkItem:
        return WorkItem(
            project_id=self.project_id,
            display_name=display_name or self.label or self.project_id,
            enabled=self.enabled,
            weekly_minutes_requested=self.weekly_minutes,
        )

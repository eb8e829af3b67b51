"""
Schedule models for layout engine outputs.
"""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import Field, model_validator

from tessera.models.base import CamelModel
from tessera.models.enums import LOCKED_BLOCK_KINDS, BlockKind, ObligationKind
from tessera.utils.time_utils import MINUTES_IN_DAY


class MeetingRecord(CamelModel):
    """Meeting as stored by the external meeting records."""

    id: str
    title: str
    date_iso: date
    time: Optional[str] = Field(None, description="24h HH:MM, None = no fixed clock time")
    duration_minutes: int = Field(30, gt=0, le=MINUTES_IN_DAY)
    project_id: Optional[str] = None


class FixedObligation(CamelModel):
    """Lunch or meeting with an immutable slot for the day."""

    id: str
    kind: ObligationKind
    label: str
    start_minutes: int = Field(..., ge=0, le=MINUTES_IN_DAY)
    end_minutes: int = Field(..., ge=0, le=MINUTES_IN_DAY)
    source_id: Optional[str] = None

    @model_validator(mode="after")
    def validate_range(self):
        if self.end_minutes <= self.start_minutes:
            raise ValueError("obligation must end after it starts")
        return self


class TimeBlock(CamelModel):
    """One block of a day's schedule."""

    id: str
    kind: BlockKind
    label: str
    project_ref: Optional[str] = None
    start_minutes: int = Field(..., ge=0, le=MINUTES_IN_DAY)
    end_minutes: int = Field(..., ge=0, le=MINUTES_IN_DAY)
    cumulative_minutes_after: Optional[int] = None
    total_minutes_planned: Optional[int] = None
    is_overflow: bool = False
    has_conflict: bool = False
    meeting_id: Optional[str] = None

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    @property
    def is_locked(self) -> bool:
        return self.kind in LOCKED_BLOCK_KINDS


class DayPlan(CamelModel):
    """Materialized blocks for one active day."""

    day_id: str
    label: str
    date_iso: Optional[date] = None
    blocks: list[TimeBlock] = Field(default_factory=list)
    day_start_minutes: int
    day_end_minutes: int
    has_conflicts: bool = False
    unscheduled_minutes: int = Field(0, ge=0, description="Overflow that could not fit before midnight")


class CapacitySummary(CamelModel):
    """Available vs requested minutes for a week."""

    available_minutes: int
    needed_minutes: int
    slack_minutes: int
    over_capacity: bool
    active_day_count: int


class TimelineRow(CamelModel):
    """A block row or an empty slot row (drop target) in the day timeline."""

    key: str
    type: Literal["block", "empty"]
    start_minutes: int
    end_minutes: int
    time_label: str = Field("", description="12h range, e.g. 9:00 AM - 9:30 AM")
    block: Optional[TimeBlock] = None

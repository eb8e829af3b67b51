"""
Manual order and per-block time override models for the daily view.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, model_validator

from tessera.models.base import CamelModel
from tessera.models.schedule import MeetingRecord, TimeBlock, TimelineRow
from tessera.utils.time_utils import MINUTES_IN_DAY


class TimeOverride(CamelModel):
    """Manual start/end for one block on one date."""

    start_minutes: int = Field(..., ge=0, le=MINUTES_IN_DAY)
    end_minutes: int = Field(..., ge=0, le=MINUTES_IN_DAY)

    @model_validator(mode="after")
    def validate_range(self):
        if self.end_minutes <= self.start_minutes:
            raise ValueError("override must end after it starts")
        return self


class TodayRequest(CamelModel):
    """Inputs the daily view needs besides the persisted state."""

    meetings: list[MeetingRecord] = Field(default_factory=list)


class BlockMoveRequest(TodayRequest):
    """Drag one block to a new list position (array-move semantics)."""

    block_id: str
    new_index: int = Field(..., ge=0)


class SlotDropRequest(TodayRequest):
    """Drop one block onto an empty slot starting at ``slot_start_minutes``."""

    block_id: str
    slot_start_minutes: int = Field(..., ge=0, le=MINUTES_IN_DAY)


class BlockEditRequest(TodayRequest):
    """Manual single-block time edit with 24h HH:MM values."""

    start: str
    end: str


class BlockResizeRequest(TodayRequest):
    duration_minutes: int = Field(..., gt=0, le=MINUTES_IN_DAY)


class TodayResponse(CamelModel):
    """Materialized daily view."""

    date_iso: str
    status: str = Field(..., description="work | off | unplanned")
    label: Optional[str] = None
    window_start_minutes: Optional[int] = None
    window_end_minutes: Optional[int] = None
    blocks: list[TimeBlock] = Field(default_factory=list)
    timeline: list[TimelineRow] = Field(default_factory=list)
    work_minutes: int = 0
    evicted_block_ids: list[str] = Field(default_factory=list)

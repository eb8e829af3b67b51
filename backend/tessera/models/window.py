"""
Day window models.

A day window is one weekday's working-hour range. Windows are never deleted,
only reconfigured.
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field, model_validator

from tessera.models.base import CamelModel
from tessera.models.enums import WindowEditField
from tessera.utils.datetime_utils import WEEKDAY_LABELS
from tessera.utils.time_utils import MINUTES_IN_DAY

DEFAULT_START_MINUTES = 9 * 60
DEFAULT_END_MINUTES = 17 * 60


class DayWindow(CamelModel):
    """Active flag and [start, end) minute range for one weekday."""

    id: int = Field(..., ge=0, le=6, description="0=Sun ... 6=Sat")
    label: str
    active: bool = True
    start_minutes: int = Field(DEFAULT_START_MINUTES, ge=0, le=MINUTES_IN_DAY)
    end_minutes: int = Field(DEFAULT_END_MINUTES, ge=0, le=MINUTES_IN_DAY)
    is_custom_override: bool = Field(
        False,
        validation_alias=AliasChoices("isCustomOverride", "is_custom_override", "custom"),
        serialization_alias="isCustomOverride",
    )

    @model_validator(mode="after")
    def validate_range(self):
        if self.active and self.end_minutes <= self.start_minutes:
            raise ValueError("active window must end after it starts")
        return self

    @property
    def span_minutes(self) -> int:
        return max(0, self.end_minutes - self.start_minutes)


def make_default_days(
    start_minutes: int = DEFAULT_START_MINUTES,
    end_minutes: int = DEFAULT_END_MINUTES,
) -> list[DayWindow]:
    """Sun..Sat windows with Mon-Fri active."""
    return [
        DayWindow(
            id=index,
            label=label,
            active=1 <= index <= 5,
            start_minutes=start_minutes,
            end_minutes=end_minutes,
            is_custom_override=False,
        )
        for index, label in enumerate(WEEKDAY_LABELS)
    ]


class WindowEditRequest(CamelModel):
    """
    One edit of the week configuration.

    ``start``/``end`` take a 24h ``HH:MM`` value, ``active`` takes a bool,
    ``defaults`` takes both ``start`` and ``end`` and applies them to every
    non-custom day, ``reset`` drops a day's override.
    """

    days: list[DayWindow] = Field(..., min_length=7, max_length=7)
    field: WindowEditField
    day_id: Optional[int] = Field(None, ge=0, le=6)
    start: Optional[str] = None
    end: Optional[str] = None
    active: Optional[bool] = None
    default_start_minutes: int = Field(DEFAULT_START_MINUTES, ge=0, le=MINUTES_IN_DAY)
    default_end_minutes: int = Field(DEFAULT_END_MINUTES, ge=0, le=MINUTES_IN_DAY)


class WindowEditResponse(CamelModel):
    days: list[DayWindow]
    default_start_minutes: int
    default_end_minutes: int

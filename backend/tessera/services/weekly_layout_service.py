"""
Weekly layout engine.

Turns day windows, fixed obligations (lunch, meetings) and ordered work items
into per-day block lists for a whole week. Allocation is greedy and
left-to-right: each work item consumes its daily quota from the free segments
between fixed obligations in time order, and anything that does not fit is
pushed past the end of the day as overflow instead of being dropped.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence, TypeVar

from tessera.core.config import get_settings
from tessera.core.exceptions import ValidationError
from tessera.core.logger import setup_logger
from tessera.models.enums import BlockKind, ObligationKind
from tessera.models.schedule import DayPlan, FixedObligation, MeetingRecord, TimeBlock
from tessera.models.window import DayWindow
from tessera.models.work_item import WorkItem
from tessera.utils.list_utils import array_move
from tessera.utils.time_utils import MINUTES_IN_DAY, parse_hhmm, try_parse_hhmm

logger = setup_logger(__name__)

LUNCH_BLOCK_ID = "lunch"
FREE_BLOCK_ID = "free"
FREE_BLOCK_LABEL = "Free time"

T = TypeVar("T")


@dataclass
class TimeInterval:
    start_minutes: int
    end_minutes: int


def _subtract_intervals(base: list[TimeInterval], remove: list[TimeInterval]) -> list[TimeInterval]:
    if not remove:
        return base
    intervals = base
    for block in remove:
        next_intervals: list[TimeInterval] = []
        for interval in intervals:
            if block.end_minutes <= interval.start_minutes or block.start_minutes >= interval.end_minutes:
                next_intervals.append(interval)
                continue
            if block.start_minutes > interval.start_minutes:
                next_intervals.append(
                    TimeInterval(interval.start_minutes, min(block.start_minutes, interval.end_minutes))
                )
            if block.end_minutes < interval.end_minutes:
                next_intervals.append(
                    TimeInterval(max(block.end_minutes, interval.start_minutes), interval.end_minutes)
                )
        intervals = next_intervals
    return sorted(
        (interval for interval in intervals if interval.end_minutes > interval.start_minutes),
        key=lambda interval: interval.start_minutes,
    )


def _overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and b_start < a_end


def work_block_id(project_id: str, slice_number: int = 1) -> str:
    """``work-<id>`` for the first slice of the day, ``work-<id>-<n>`` after."""
    if slice_number <= 1:
        return f"work-{project_id}"
    return f"work-{project_id}-{slice_number}"


def meeting_block_id(meeting_id: str) -> str:
    return f"mtg-{meeting_id}"


def split_daily_quota(weekly_minutes: int, active_day_count: int) -> list[int]:
    """
    Split a weekly request into integer per-day quotas.

    The remainder goes one minute each to the earliest days so the quotas
    always sum back to ``weekly_minutes``.

    Example:
        >>> split_daily_quota(602, 5)
        [121, 121, 120, 120, 120]
    """
    if active_day_count <= 0:
        return []
    base, remainder = divmod(max(0, weekly_minutes), active_day_count)
    return [base + (1 if index < remainder else 0) for index in range(active_day_count)]


def order_priorities(items: Sequence[T], project_order: Optional[Iterable[str]]) -> list[T]:
    """
    Apply a persisted project order to priority rows or work items.

    Ids from the saved order come first, items the order does not know yet
    follow in their original order, and stale ids are ignored.
    """
    if not project_order:
        return list(items)
    by_id: dict[str, T] = {}
    for item in items:
        by_id.setdefault(item.project_id, item)
    ordered: list[T] = []
    seen: set[str] = set()
    for project_id in project_order:
        item = by_id.get(project_id)
        if item is None or project_id in seen:
            continue
        ordered.append(item)
        seen.add(project_id)
    ordered.extend(item for item in items if item.project_id not in seen)
    return ordered


def reorder_projects(project_ids: list[str], moved_project_id: str, target_project_id: str) -> list[str]:
    """
    Move one project to the position of another (drag one block onto another).

    Raises:
        ValidationError: If either project is not part of the order
    """
    if moved_project_id not in project_ids:
        raise ValidationError(f"Project {moved_project_id} is not in the current order")
    if target_project_id not in project_ids:
        raise ValidationError(f"Project {target_project_id} is not in the current order")
    return array_move(
        project_ids,
        project_ids.index(moved_project_id),
        project_ids.index(target_project_id),
    )


class WeeklyLayoutService:
    """Builds weekly and single-day block layouts."""

    def __init__(
        self,
        lunch_start_minutes: Optional[int] = None,
        lunch_minutes: Optional[int] = None,
        default_meeting_minutes: Optional[int] = None,
    ):
        settings = get_settings()
        self._lunch_start = (
            lunch_start_minutes if lunch_start_minutes is not None else parse_hhmm(settings.LUNCH_START)
        )
        self._lunch_minutes = lunch_minutes if lunch_minutes is not None else settings.LUNCH_MINUTES
        self._default_meeting_minutes = default_meeting_minutes or settings.DEFAULT_MEETING_MINUTES

    # ------------------------------------------------------------------
    # Fixed obligations
    # ------------------------------------------------------------------

    def build_lunch(self, day_start: int, day_end: int) -> Optional[FixedObligation]:
        """Lunch fits fully inside the window or is omitted (no partial lunch)."""
        if self._lunch_minutes <= 0:
            return None
        start = self._lunch_start
        end = start + self._lunch_minutes
        if start < day_start or end > day_end:
            return None
        return FixedObligation(
            id=LUNCH_BLOCK_ID,
            kind=ObligationKind.LUNCH,
            label="Lunch",
            start_minutes=start,
            end_minutes=end,
        )

    def place_meetings(
        self,
        meetings: list[MeetingRecord],
        day_start: int,
        day_end: int,
        lunch: Optional[FixedObligation] = None,
    ) -> list[FixedObligation]:
        """
        Turn the day's meeting records into fixed obligations.

        Meetings with a clock time keep it. Meetings without one are laid out
        one after another starting after lunch, skipping anything already
        booked. Meetings starting at or after ``day_end`` (or ending at or
        before ``day_start``) are not scheduled.
        """
        placed: list[FixedObligation] = []
        unclocked: list[MeetingRecord] = []

        for meeting in meetings:
            start = try_parse_hhmm(meeting.time)
            if start is None:
                if meeting.time:
                    logger.debug(f"Meeting {meeting.id} has unparsable time {meeting.time!r}, placing sequentially")
                unclocked.append(meeting)
                continue
            end = min(MINUTES_IN_DAY, start + self._meeting_duration(meeting))
            if start >= day_end or end <= day_start or end <= start:
                logger.debug(f"Meeting {meeting.id} at {meeting.time} falls outside the window, skipped")
                continue
            placed.append(self._meeting_obligation(meeting, start, end))

        cursor = max(day_start, lunch.end_minutes if lunch else day_start)
        for meeting in unclocked:
            duration = self._meeting_duration(meeting)
            booked = sorted(
                [obligation for obligation in placed] + ([lunch] if lunch else []),
                key=lambda obligation: obligation.start_minutes,
            )
            for obligation in booked:
                if _overlaps(cursor, cursor + duration, obligation.start_minutes, obligation.end_minutes):
                    cursor = obligation.end_minutes
            if cursor >= day_end:
                logger.debug(f"Meeting {meeting.id} does not fit before day end, skipped")
                continue
            end = min(MINUTES_IN_DAY, cursor + duration)
            placed.append(self._meeting_obligation(meeting, cursor, end))
            cursor = end

        return placed

    def _meeting_duration(self, meeting: MeetingRecord) -> int:
        return meeting.duration_minutes or self._default_meeting_minutes

    @staticmethod
    def _meeting_obligation(meeting: MeetingRecord, start: int, end: int) -> FixedObligation:
        return FixedObligation(
            id=meeting_block_id(meeting.id),
            kind=ObligationKind.MEETING,
            label=meeting.title,
            start_minutes=start,
            end_minutes=end,
            source_id=meeting.id,
        )

    # ------------------------------------------------------------------
    # Day layout
    # ------------------------------------------------------------------

    def build_day(
        self,
        window: DayWindow,
        quotas: list[tuple[WorkItem, int]],
        meetings: Optional[list[MeetingRecord]] = None,
        cumulative: Optional[dict[str, int]] = None,
        done_from_day_index: Optional[dict[str, int]] = None,
        date_iso: Optional[date] = None,
    ) -> DayPlan:
        """
        Lay out one active day.

        Args:
            window: The day's window (must be active)
            quotas: Ordered (work item, minutes for this day) pairs
            meetings: Meeting records for this date
            cumulative: Per-project minutes consumed earlier in the week.
                Updated in place.
            done_from_day_index: projectId -> Sun-first day index from which
                the project is done
            date_iso: Calendar date of the day, if known

        Returns:
            DayPlan with blocks sorted by start time
        """
        cumulative = cumulative if cumulative is not None else {}
        done_from_day_index = done_from_day_index or {}
        day_start = window.start_minutes
        day_end = window.end_minutes

        lunch = self.build_lunch(day_start, day_end)
        obligations = ([lunch] if lunch else []) + self.place_meetings(
            meetings or [], day_start, day_end, lunch
        )
        conflict_ids = self._find_conflicts(obligations)

        blocks: list[TimeBlock] = [
            TimeBlock(
                id=obligation.id,
                kind=BlockKind(obligation.kind.value),
                label=obligation.label,
                start_minutes=obligation.start_minutes,
                end_minutes=obligation.end_minutes,
                has_conflict=obligation.id in conflict_ids,
                meeting_id=obligation.source_id,
            )
            for obligation in obligations
        ]

        segments = _subtract_intervals(
            [TimeInterval(day_start, day_end)],
            [TimeInterval(o.start_minutes, o.end_minutes) for o in obligations],
        )
        work_blocks, unscheduled = self._allocate(segments, quotas, day_end, cumulative)
        blocks.extend(work_blocks)

        done_projects = {
            project_id
            for project_id, day_index in done_from_day_index.items()
            if window.id >= day_index
        }
        if done_projects:
            blocks = self._fold_done_projects(blocks, done_projects, day_start, day_end)

        blocks.sort(key=lambda block: block.start_minutes)

        if unscheduled:
            logger.warning(
                f"{window.label}: {unscheduled} overflow minutes do not fit before midnight"
            )

        return DayPlan(
            day_id=str(window.id),
            label=window.label,
            date_iso=date_iso,
            blocks=blocks,
            day_start_minutes=day_start,
            day_end_minutes=day_end,
            has_conflicts=bool(conflict_ids),
            unscheduled_minutes=unscheduled,
        )

    @staticmethod
    def _find_conflicts(obligations: list[FixedObligation]) -> set[str]:
        conflict_ids: set[str] = set()
        for index, first in enumerate(obligations):
            for second in obligations[index + 1:]:
                if _overlaps(first.start_minutes, first.end_minutes, second.start_minutes, second.end_minutes):
                    conflict_ids.add(first.id)
                    conflict_ids.add(second.id)
        return conflict_ids

    @staticmethod
    def _work_block(
        item: WorkItem,
        slice_number: int,
        start: int,
        end: int,
        cumulative: dict[str, int],
        overflow: bool = False,
    ) -> TimeBlock:
        cumulative[item.project_id] = cumulative.get(item.project_id, 0) + (end - start)
        return TimeBlock(
            id=work_block_id(item.project_id, slice_number),
            kind=BlockKind.WORK,
            label=item.display_name,
            project_ref=item.project_id,
            start_minutes=start,
            end_minutes=end,
            cumulative_minutes_after=cumulative[item.project_id],
            total_minutes_planned=item.weekly_minutes_requested,
            is_overflow=overflow,
        )

    def _allocate(
        self,
        segments: list[TimeInterval],
        quotas: list[tuple[WorkItem, int]],
        day_end: int,
        cumulative: dict[str, int],
    ) -> tuple[list[TimeBlock], int]:
        """Slice each quota across the free segments; spill the rest at day end."""
        blocks: list[TimeBlock] = []
        unscheduled = 0
        segment_index = 0
        cursor = segments[0].start_minutes if segments else day_end

        for item, quota in quotas:
            remaining = quota
            slice_number = 0

            while remaining > 0 and segment_index < len(segments):
                segment = segments[segment_index]
                take = min(remaining, segment.end_minutes - cursor)
                if take >= 1:
                    slice_number += 1
                    blocks.append(self._work_block(item, slice_number, cursor, cursor + take, cumulative))
                    cursor += take
                    remaining -= take
                if cursor >= segment.end_minutes:
                    segment_index += 1
                    if segment_index < len(segments):
                        cursor = segments[segment_index].start_minutes

            if remaining > 0:
                overflow_end = min(MINUTES_IN_DAY, day_end + remaining)
                if overflow_end - day_end >= 1:
                    slice_number += 1
                    blocks.append(
                        self._work_block(item, slice_number, day_end, overflow_end, cumulative, overflow=True)
                    )
                unscheduled += remaining - max(0, overflow_end - day_end)

        return blocks, unscheduled

    @staticmethod
    def _fold_done_projects(
        blocks: list[TimeBlock],
        done_projects: set[str],
        day_start: int,
        day_end: int,
    ) -> list[TimeBlock]:
        """Hide work blocks of finished projects and release the tail as free time."""
        kept = [
            block
            for block in blocks
            if not (block.kind == BlockKind.WORK and block.project_ref in done_projects)
        ]
        if len(kept) == len(blocks):
            return blocks
        free_start = max((block.end_minutes for block in kept), default=day_start)
        free_start = max(free_start, day_start)
        if day_end > free_start:
            kept.append(
                TimeBlock(
                    id=FREE_BLOCK_ID,
                    kind=BlockKind.FREE,
                    label=FREE_BLOCK_LABEL,
                    start_minutes=free_start,
                    end_minutes=day_end,
                )
            )
        return kept

    # ------------------------------------------------------------------
    # Week layout
    # ------------------------------------------------------------------

    def build_week(
        self,
        week_start: date,
        days: list[DayWindow],
        items: list[WorkItem],
        meetings: Optional[list[MeetingRecord]] = None,
        done_from_day_index: Optional[dict[str, int]] = None,
    ) -> list[DayPlan]:
        """
        Build one DayPlan per active day of the week starting ``week_start``.

        Dates are walked Monday first; each date uses the window with the
        matching Sun-first weekday id. ``items`` must already be in priority
        order.
        """
        windows_by_id = {day.id: day for day in days}
        calendar: list[tuple[date, DayWindow]] = []
        for offset in range(7):
            current = week_start + timedelta(days=offset)
            window = windows_by_id.get(current.isoweekday() % 7)
            if window is not None and window.active and window.end_minutes > window.start_minutes:
                calendar.append((current, window))

        enabled = [item for item in items if item.enabled and item.weekly_minutes_requested > 0]
        quotas_by_project = {
            item.project_id: split_daily_quota(item.weekly_minutes_requested, len(calendar))
            for item in enabled
        }
        meetings_by_date: dict[date, list[MeetingRecord]] = {}
        for meeting in meetings or []:
            meetings_by_date.setdefault(meeting.date_iso, []).append(meeting)

        cumulative: dict[str, int] = {}
        plans: list[DayPlan] = []
        for position, (current, window) in enumerate(calendar):
            quotas = [(item, quotas_by_project[item.project_id][position]) for item in enabled]
            plans.append(
                self.build_day(
                    window,
                    quotas,
                    meetings=meetings_by_date.get(current, []),
                    cumulative=cumulative,
                    done_from_day_index=done_from_day_index,
                    date_iso=current,
                )
            )

        logger.debug(
            f"Built week {week_start.isoformat()}: {len(plans)} active days, {len(enabled)} work items"
        )
        return plans

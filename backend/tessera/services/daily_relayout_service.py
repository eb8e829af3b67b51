"""
Daily re-layout engine.

Works on one day's already materialized block list. Locked blocks (meetings,
lunch) are time anchors that never move; flexible blocks (work, free) are
packed by their list position into the time gaps between those anchors and
quantized to fixed-size slots.

The list position of a block is what the user controls by dragging. A block
sitting between the lunch and a meeting in the list is laid out in the time
gap between them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from tessera.core.config import get_settings
from tessera.core.exceptions import InvalidTimeError, LockedBlockOverlapError, NotFoundError, ValidationError
from tessera.core.logger import setup_logger
from tessera.models.overrides import TimeOverride
from tessera.models.schedule import TimeBlock, TimelineRow
from tessera.utils.list_utils import array_move
from tessera.utils.time_utils import MINUTES_IN_DAY, format_hhmm, format_range_12h, parse_hhmm

logger = setup_logger(__name__)


@dataclass
class LayoutWindow:
    """A time gap between locked blocks and the list positions that map to it."""

    time_start: int
    time_end: int
    list_index_start: int
    list_index_end: int  # inclusive

    @property
    def span_minutes(self) -> int:
        return self.time_end - self.time_start

    def slot_count(self, slot_minutes: int) -> int:
        return self.span_minutes // slot_minutes

    def indices(self) -> range:
        return range(self.list_index_start, self.list_index_end + 1)


@dataclass
class RelayoutResult:
    """Outcome of a drag: new order, re-timed blocks and the overrides to persist."""

    blocks: list[TimeBlock]
    order: list[str]
    overrides: dict[str, TimeOverride] = field(default_factory=dict)
    evicted_block_ids: list[str] = field(default_factory=list)


def find_block_index(blocks: list[TimeBlock], block_id: str) -> int:
    for index, block in enumerate(blocks):
        if block.id == block_id:
            return index
    raise NotFoundError(f"Block {block_id} not found")


def apply_order(blocks: list[TimeBlock], order: Optional[list[str]]) -> list[TimeBlock]:
    """
    Reorder blocks by a saved id list.

    Ids that no longer exist are skipped; blocks missing from the saved order
    keep their computed order after the ordered ones.
    """
    if not order:
        return list(blocks)
    by_id = {block.id: block for block in blocks}
    ordered: list[TimeBlock] = []
    for block_id in order:
        block = by_id.pop(block_id, None)
        if block is not None:
            ordered.append(block)
    ordered.extend(block for block in blocks if block.id in by_id)
    return ordered


def apply_overrides(
    blocks: list[TimeBlock],
    overrides: Optional[dict[str, TimeOverride]],
    day_end: Optional[int] = None,
) -> list[TimeBlock]:
    """
    Replace computed times with manual overrides; stale ids are ignored.

    An overridden block starting at or after ``day_end`` stays flagged as
    overflow.
    """
    if not overrides:
        return list(blocks)
    updated: list[TimeBlock] = []
    for block in blocks:
        override = overrides.get(block.id)
        if override is None:
            updated.append(block)
            continue
        updated.append(
            block.model_copy(
                update={
                    "start_minutes": override.start_minutes,
                    "end_minutes": override.end_minutes,
                    "is_overflow": day_end is not None and override.start_minutes >= day_end,
                }
            )
        )
    return updated


def flexible_overrides(blocks: list[TimeBlock]) -> dict[str, TimeOverride]:
    """Snapshot the times of every flexible block as overrides."""
    return {
        block.id: TimeOverride(start_minutes=block.start_minutes, end_minutes=block.end_minutes)
        for block in blocks
        if not block.is_locked and block.end_minutes > block.start_minutes
    }


class DailyRelayoutService:
    """Drag-and-drop re-pack of one day's blocks."""

    def __init__(self, slot_minutes: Optional[int] = None, min_block_minutes: Optional[int] = None):
        settings = get_settings()
        self.slot_minutes = slot_minutes or settings.SLOT_MINUTES
        self.min_block_minutes = min_block_minutes or settings.MIN_BLOCK_MINUTES

    # ------------------------------------------------------------------
    # Window partitioning
    # ------------------------------------------------------------------

    def partition_windows(self, blocks: list[TimeBlock], day_start: int, day_end: int) -> list[LayoutWindow]:
        """
        Map list positions between locked blocks to the time gaps between them.

        Locked blocks are taken in time order. For each one, the window before
        it runs from the latest locked end seen so far to its start (capped at
        ``day_end``) and covers the list positions between the previous locked
        block and this one. A tail window covers everything after the last
        locked block. Windows with no time or no list positions are skipped.
        """
        if day_end <= day_start:
            return []

        locked = sorted(
            ((index, block) for index, block in enumerate(blocks) if block.is_locked),
            key=lambda pair: pair[1].start_minutes,
        )

        windows: list[LayoutWindow] = []
        previous_end = day_start
        previous_index = -1
        for index, block in locked:
            window_start = previous_end
            window_end = min(block.start_minutes, day_end)
            index_start = previous_index + 1
            index_end = index - 1
            if window_end > window_start and index_end >= index_start:
                windows.append(LayoutWindow(window_start, window_end, index_start, index_end))
            previous_end = max(previous_end, block.end_minutes)
            previous_index = index

        tail_start = previous_index + 1
        if day_end > previous_end and tail_start <= len(blocks) - 1:
            windows.append(LayoutWindow(previous_end, day_end, tail_start, len(blocks) - 1))

        return windows

    def _flex_indices(self, blocks: list[TimeBlock], window: LayoutWindow) -> list[int]:
        return [index for index in window.indices() if not blocks[index].is_locked]

    # ------------------------------------------------------------------
    # Capacity enforcement
    # ------------------------------------------------------------------

    def enforce_window_capacity(
        self,
        blocks: list[TimeBlock],
        day_start: int,
        day_end: int,
    ) -> tuple[list[TimeBlock], list[str]]:
        """
        Evict flexible blocks that exceed their window's slot count.

        A window with ``k`` slots keeps its first ``k`` flexible blocks (by
        list position); the rest move, in their original relative order, to
        the very end of the day's list. Every window is checked against the
        list as it was before any eviction.

        Returns:
            (new block list, evicted block ids)
        """
        evicted_ids: list[str] = []
        for window in self.partition_windows(blocks, day_start, day_end):
            flex = self._flex_indices(blocks, window)
            capacity = window.slot_count(self.slot_minutes)
            if len(flex) <= capacity:
                continue
            excess = flex[capacity:]
            evicted_ids.extend(blocks[index].id for index in excess)
            logger.info(
                f"Window {window.time_start}-{window.time_end} holds {len(flex)} blocks "
                f"for {capacity} slots, evicting {len(excess)}"
            )

        if not evicted_ids:
            return list(blocks), []

        evicted = set(evicted_ids)
        kept = [block for block in blocks if block.id not in evicted]
        popped = [block for block in blocks if block.id in evicted]
        return kept + popped, [block.id for block in popped]

    # ------------------------------------------------------------------
    # Re-quantization
    # ------------------------------------------------------------------

    def requantize(self, blocks: list[TimeBlock], day_start: int, day_end: int) -> list[TimeBlock]:
        """
        Spread each window's slots evenly over its flexible blocks.

        Every flexible block in a window gets ``slots // count`` slots and the
        earliest ``slots % count`` get one more; ranges are contiguous from the
        window start and never run past the window end. Flexible blocks left
        with no slot, or outside every window, are stacked one slot each from
        ``day_end`` as overflow. Locked blocks keep their times.
        """
        if day_end <= day_start:
            return list(blocks)

        slot = self.slot_minutes
        updated = list(blocks)
        placed: set[int] = set()

        for window in self.partition_windows(blocks, day_start, day_end):
            flex = self._flex_indices(blocks, window)
            if not flex:
                continue
            total_slots = window.slot_count(slot)
            base, remainder = divmod(total_slots, len(flex))
            cursor = window.time_start
            for position, index in enumerate(flex):
                slots = base + (1 if position < remainder else 0)
                if slots <= 0:
                    continue
                end = min(window.time_end, cursor + slots * slot)
                updated[index] = blocks[index].model_copy(
                    update={"start_minutes": cursor, "end_minutes": end, "is_overflow": False}
                )
                placed.add(index)
                cursor = end

        overflow_cursor = day_end
        for index, block in enumerate(blocks):
            if block.is_locked or index in placed:
                continue
            start = min(overflow_cursor, MINUTES_IN_DAY - 1)
            end = min(MINUTES_IN_DAY, start + slot)
            if overflow_cursor >= MINUTES_IN_DAY:
                logger.warning(f"Block {block.id} overflows past midnight, pinned to the last minute")
            updated[index] = block.model_copy(
                update={"start_minutes": start, "end_minutes": end, "is_overflow": True}
            )
            overflow_cursor = end

        return updated

    # ------------------------------------------------------------------
    # Drag interactions
    # ------------------------------------------------------------------

    def relayout(self, blocks: list[TimeBlock], day_start: int, day_end: int) -> RelayoutResult:
        """Evict, then re-quantize. The post-eviction order is the new canonical order."""
        evicted_list, evicted_ids = self.enforce_window_capacity(blocks, day_start, day_end)
        requantized = self.requantize(evicted_list, day_start, day_end)
        return RelayoutResult(
            blocks=requantized,
            order=[block.id for block in evicted_list],
            overrides=flexible_overrides(requantized),
            evicted_block_ids=evicted_ids,
        )

    def move_block(
        self,
        blocks: list[TimeBlock],
        block_id: str,
        new_index: int,
        day_start: int,
        day_end: int,
    ) -> RelayoutResult:
        """
        Drag one block to ``new_index`` and re-pack the day.

        Raises:
            NotFoundError: If the block is not in today's list
            ValidationError: If the block is a meeting or lunch
        """
        old_index = find_block_index(blocks, block_id)
        if blocks[old_index].is_locked:
            raise ValidationError("Meetings and lunch blocks cannot be moved.")
        moved = array_move(blocks, old_index, new_index)
        return self.relayout(moved, day_start, day_end)

    def drop_on_slot(
        self,
        blocks: list[TimeBlock],
        block_id: str,
        slot_start: int,
        day_start: int,
        day_end: int,
    ) -> tuple[list[TimeBlock], TimeOverride]:
        """
        Drop a block onto an empty slot.

        The block keeps its duration (at least the minimum block length),
        starts at the slot clamped into the window and stops before the next
        locked block. The returned list is in time order, which becomes the
        saved order.

        Raises:
            NotFoundError: If the block is not in today's list
            LockedBlockOverlapError: If the slot lies inside a meeting or lunch
            ValidationError: If the block is locked or nothing fits at the slot
        """
        block = blocks[find_block_index(blocks, block_id)]
        if block.is_locked:
            raise ValidationError("Meetings and lunch blocks cannot be moved.")

        duration = block.duration_minutes if block.duration_minutes > 0 else self.min_block_minutes
        start = max(day_start, min(slot_start, day_end))
        end = min(day_end, start + duration)
        if end - start < self.min_block_minutes:
            end = min(day_end, start + self.min_block_minutes)

        for other in blocks:
            if other.is_locked and other.start_minutes <= start < other.end_minutes:
                raise LockedBlockOverlapError(
                    f"{format_hhmm(start)} is inside {other.label} ({format_hhmm(other.start_minutes)}"
                    f"-{format_hhmm(other.end_minutes)}).",
                    locked_block_id=other.id,
                )

        next_locked = [
            other.start_minutes
            for other in blocks
            if other.is_locked and other.id != block.id and other.start_minutes >= start
        ]
        if next_locked:
            end = min(end, min(next_locked))
        if end <= start:
            raise ValidationError("No room for this block at the selected slot.")

        override = TimeOverride(start_minutes=start, end_minutes=end)
        updated = [
            other.model_copy(update={"start_minutes": start, "end_minutes": end, "is_overflow": False})
            if other.id == block.id
            else other
            for other in blocks
        ]
        updated.sort(key=lambda other: other.start_minutes)
        return updated, override

    # ------------------------------------------------------------------
    # Direct edits
    # ------------------------------------------------------------------

    def validate_manual_edit(
        self,
        block: TimeBlock,
        start_text: str,
        end_text: str,
        blocks: list[TimeBlock],
        day_start: int,
        day_end: int,
    ) -> TimeOverride:
        """
        Validate a manual ``HH:MM`` edit of one flexible block.

        Both times are clamped into the day window. Nothing is mutated; the
        caller persists the returned override.

        Raises:
            InvalidTimeError: Unparsable time, or end not after start
            LockedBlockOverlapError: The range overlaps a meeting or lunch
            ValidationError: The edited block itself is locked
        """
        if block.is_locked:
            raise ValidationError("Meetings and lunch blocks cannot be edited here.")

        start = max(day_start, min(parse_hhmm(start_text), day_end))
        end = max(day_start, min(parse_hhmm(end_text), day_end))
        if end <= start:
            raise InvalidTimeError("End time must be after start time.")

        for other in blocks:
            if not other.is_locked or other.id == block.id:
                continue
            if start < other.end_minutes and end > other.start_minutes:
                raise LockedBlockOverlapError(
                    "This range overlaps a meeting or lunch block.",
                    locked_block_id=other.id,
                )

        return TimeOverride(start_minutes=start, end_minutes=end)

    def resize_block(self, block: TimeBlock, duration_minutes: int, day_start: int, day_end: int) -> TimeOverride:
        """Keep the start, set the duration (minimum block length), stop at day end."""
        if block.is_locked:
            raise ValidationError("Meetings and lunch blocks cannot be resized.")
        start = max(day_start, min(block.start_minutes, day_end))
        end = min(day_end, start + max(self.min_block_minutes, duration_minutes))
        if end <= start:
            raise ValidationError("Block starts at the end of the day and cannot be resized.")
        return TimeOverride(start_minutes=start, end_minutes=end)

    # ------------------------------------------------------------------
    # Timeline
    # ------------------------------------------------------------------

    def build_timeline_rows(self, blocks: list[TimeBlock], day_start: int, day_end: int) -> list[TimelineRow]:
        """Block rows in time order with empty slot rows filling the gaps."""
        if day_end <= day_start:
            return []

        rows: list[TimelineRow] = []
        cursor = day_start

        def add_empty(gap_start: int, gap_end: int) -> None:
            for slot_start in range(gap_start, gap_end, self.slot_minutes):
                slot_end = min(gap_end, slot_start + self.slot_minutes)
                rows.append(
                    TimelineRow(
                        key=f"empty-{slot_start}",
                        type="empty",
                        start_minutes=slot_start,
                        end_minutes=slot_end,
                        time_label=format_range_12h(slot_start, slot_end),
                    )
                )

        for block in sorted(blocks, key=lambda item: item.start_minutes):
            add_empty(cursor, min(block.start_minutes, day_end))
            rows.append(
                TimelineRow(
                    key=f"block-{block.id}-{block.start_minutes}",
                    type="block",
                    start_minutes=block.start_minutes,
                    end_minutes=block.end_minutes,
                    time_label=format_range_12h(block.start_minutes, block.end_minutes),
                    block=block,
                )
            )
            cursor = max(cursor, block.end_minutes)

        add_empty(cursor, day_end)
        return rows

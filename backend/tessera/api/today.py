"""
Today API endpoints.

Daily rundown: computed blocks with saved order and overrides, drag
re-layout, slot drops and direct time edits.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, status

from tessera.api.deps import Planner
from tessera.core.exceptions import LockedBlockOverlapError, NotFoundError, ValidationError
from tessera.models.overrides import (
    BlockEditRequest,
    BlockMoveRequest,
    BlockResizeRequest,
    SlotDropRequest,
    TodayRequest,
    TodayResponse,
)

router = APIRouter()


def _to_http_error(error: Exception) -> HTTPException:
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    if isinstance(error, LockedBlockOverlapError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": error.message, "lockedBlockId": error.locked_block_id},
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)


@router.post("/{day}", response_model=TodayResponse)
async def get_today(day: date, planner: Planner, request: Optional[TodayRequest] = None):
    """
    Blocks for a date.

    Returns status ``unplanned`` with no blocks when no plan was saved for
    that week, and ``off`` when the weekday is inactive.
    """
    meetings = request.meetings if request else []
    return await planner.today(day, meetings)


@router.post("/{day}/move", response_model=TodayResponse)
async def move_block(day: date, request: BlockMoveRequest, planner: Planner):
    """Drag a block to a new position; evicts and re-quantizes the day."""
    try:
        return await planner.move_block(day, request)
    except (NotFoundError, ValidationError) as e:
        raise _to_http_error(e)


@router.post("/{day}/drop", response_model=TodayResponse)
async def drop_block(day: date, request: SlotDropRequest, planner: Planner):
    """Drop a block onto an empty time slot."""
    try:
        return await planner.drop_block(day, request)
    except (NotFoundError, ValidationError) as e:
        raise _to_http_error(e)


@router.put("/{day}/blocks/{block_id}", response_model=TodayResponse)
async def edit_block(day: date, block_id: str, request: BlockEditRequest, planner: Planner):
    """Set a block's start/end (24h HH:MM)."""
    try:
        return await planner.edit_block(day, block_id, request)
    except (NotFoundError, ValidationError) as e:
        raise _to_http_error(e)


@router.put(
    "/{day}/blocks/{block_id}/duration",
    response_model=TodayResponse,
)
async def resize_block(day: date, block_id: str, request: BlockResizeRequest, planner: Planner):
    """Change a block's duration, keeping its start."""
    try:
        return await planner.resize_block(day, block_id, request)
    except (NotFoundError, ValidationError) as e:
        raise _to_http_error(e)

"""
Enum definitions for the application.

These enums are used across models and provide type-safe kind/scenario values.
"""

from enum import Enum


class BlockKind(str, Enum):
    """Kind of a time block in a day plan."""

    WORK = "work"
    LUNCH = "lunch"
    MEETING = "meeting"
    FREE = "free"


LOCKED_BLOCK_KINDS = frozenset({BlockKind.MEETING, BlockKind.LUNCH})


class ObligationKind(str, Enum):
    """Fixed obligation kind. Never moved by the layout engine."""

    LUNCH = "lunch"
    MEETING = "meeting"


class Scenario(str, Enum):
    """
    Workload scenario used by the demo project generator.

    LIGHT = 0.6x base hours and counts
    NORMAL = 1.0x
    HEAVY = 1.4x
    """

    LIGHT = "light"
    NORMAL = "normal"
    HEAVY = "heavy"


class WindowEditField(str, Enum):
    """Which part of the week configuration an edit touches."""

    START = "start"
    END = "end"
    ACTIVE = "active"
    DEFAULTS = "defaults"
    RESET = "reset"

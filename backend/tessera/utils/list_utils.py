"""
List reordering helpers shared by the drag handlers.
"""

from typing import TypeVar

T = TypeVar("T")


def array_move(items: list[T], old_index: int, new_index: int) -> list[T]:
    """
    Remove the item at ``old_index`` and insert it at ``new_index``.

    Returns a new list; the input is not modified. ``new_index`` is clamped to
    the list bounds.

    Example:
        >>> array_move(["a", "b", "c"], 0, 2)
        ['b', 'c', 'a']
    """
    if not items:
        return []
    if old_index < 0 or old_index >= len(items):
        raise IndexError(f"old_index {old_index} out of range")
    moved = list(items)
    item = moved.pop(old_index)
    new_index = max(0, min(new_index, len(moved)))
    moved.insert(new_index, item)
    return moved

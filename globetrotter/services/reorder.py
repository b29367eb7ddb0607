"""
Itinerary reorder engine.

Pure functions that compute the new state of one or two ordered collections after
a single-item positional move. Inputs are never mutated; callers persist the
returned collections.
"""

from typing import List, Sequence, Tuple, TypeVar

from globetrotter.models.itinerary import Activity, ItineraryDay
from globetrotter.utils.exceptions import InvalidMoveError


T = TypeVar("T")


def _check_index(name: str, index: int, length: int) -> None:
    if not 0 <= index < length:
        raise InvalidMoveError(name, index, length)


def _reposition(items: Sequence[T], source_index: int, dest_index: int) -> List[T]:
    reordered = list(items)
    moved = reordered.pop(source_index)
    reordered.insert(dest_index, moved)
    return reordered


def move_day(days: Sequence[ItineraryDay], source_index: int, dest_index: int) -> List[ItineraryDay]:
    """
    Move the day at `source_index` to `dest_index`.

    Every day in the result has its `order` rewritten to its new zero-based index,
    so the orders are dense and unique even if the input's were not. Moving a day
    onto its own position returns an unchanged copy of the input.

    Raises:
        InvalidMoveError: If either index is outside `0 <= i < len(days)`.
    """
    _check_index("source_index", source_index, len(days))
    _check_index("dest_index", dest_index, len(days))

    if source_index == dest_index:
        return list(days)

    reordered = _reposition(days, source_index, dest_index)
    return [
        day if day.order == position else day.model_copy(update={"order": position})
        for position, day in enumerate(reordered)
    ]


def move_activity(
    source_activities: Sequence[Activity],
    dest_activities: Sequence[Activity],
    source_index: int,
    dest_index: int,
    same_day: bool,
) -> Tuple[List[Activity], List[Activity]]:
    """
    Move one activity within a day or from one day to another.

    With `same_day` the destination list is ignored and both members of the
    returned tuple are the same repositioned list. Otherwise the activity is
    removed from the source and inserted into the destination at `dest_index`,
    which may equal `len(dest_activities)` to append.

    Returns:
        (new_source_activities, new_dest_activities)

    Raises:
        InvalidMoveError: If an index lies outside its list.
    """
    _check_index("source_index", source_index, len(source_activities))

    if same_day:
        _check_index("dest_index", dest_index, len(source_activities))
        reordered = _reposition(source_activities, source_index, dest_index)
        return reordered, reordered

    # inserting may target the slot just past the last element
    _check_index("dest_index", dest_index, len(dest_activities) + 1)

    new_source = list(source_activities)
    moved = new_source.pop(source_index)
    new_dest = list(dest_activities)
    new_dest.insert(dest_index, moved)
    return new_source, new_dest

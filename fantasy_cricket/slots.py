"""Roster slot compatibility and assignment."""

from collections import Counter
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .config import get_slot_capacity
from .constants import POSITION_COMPATIBILITY
from .models import Position, RosterEntry, Slot

# Returned by best_slot when every compatible slot is full
NO_SLOT = None


def compatible_slots(position: Position) -> Tuple[Slot, ...]:
    """Active slots a position may occupy, in preference order (bench excluded)."""
    return POSITION_COMPATIBILITY.get(Position(position), ())


def can_place(position: Position, slot: Slot) -> bool:
    """
    Check whether a player of the given position may occupy a slot.

    Bench accepts every position.
    """
    slot = Slot(slot)
    if slot == Slot.BENCH:
        return True
    return slot in compatible_slots(position)


def slot_capacity(slot: Slot, capacities: Optional[Mapping[Slot, Optional[int]]] = None) -> Optional[int]:
    """Maximum players for a slot (None = unbounded)."""
    if capacities is None:
        capacities = get_slot_capacity()
    return capacities.get(Slot(slot))


def has_room(
    slot: Slot,
    counts: Mapping[Slot, int],
    capacities: Optional[Mapping[Slot, Optional[int]]] = None,
) -> bool:
    capacity = slot_capacity(slot, capacities)
    if capacity is None:
        return True
    return counts.get(Slot(slot), 0) < capacity


def slot_counts(roster: Iterable[RosterEntry]) -> Dict[Slot, int]:
    """Count roster entries per slot (every slot present, zero if empty)."""
    counter = Counter(Slot(entry.slot) for entry in roster)
    return {slot: counter.get(slot, 0) for slot in Slot}


def best_slot(
    position: Position,
    counts: Mapping[Slot, int],
    capacities: Optional[Mapping[Slot, Optional[int]]] = None,
) -> Optional[Slot]:
    """
    Pick the slot for a newly drafted player.

    Walks the position's compatible slots in preference order (primary slots
    before flex) and returns the first one below capacity. Flex is therefore
    kept free for players who have nowhere else to go.

    Args:
        position: Player position
        counts: Current number of players per slot on the team
        capacities: Optional capacity override (defaults to league config)

    Returns:
        The chosen Slot, or NO_SLOT if every compatible slot is full
    """
    if capacities is None:
        capacities = get_slot_capacity()
    for slot in compatible_slots(position):
        if has_room(slot, counts, capacities):
            return slot
    return NO_SLOT

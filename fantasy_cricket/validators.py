"""Validation functions for rosters, draft history, and scoring results."""

from collections import Counter
from typing import Mapping, Optional

from .models import DraftPick, LeagueDraftState, Player, PointsResult, Slot, Team
from .slots import can_place, slot_capacity, slot_counts


def validate_roster(
    team: Team,
    players: Mapping[str, Player],
    capacities: Optional[Mapping[Slot, Optional[int]]] = None,
) -> list[str]:
    """
    Validate that a fantasy team's roster complies with league rules.

    Checks:
    - Slot capacity (batters 5, keepers 1, bowlers 5, flex 1, bench unbounded)
    - Every player sits in a slot compatible with their position
    - No player appears twice

    Args:
        team: Team to validate
        players: Player lookup by id

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    counts = slot_counts(team.roster)
    for slot, count in counts.items():
        capacity = slot_capacity(slot, capacities)
        if capacity is not None and count > capacity:
            errors.append(f'{team.name} has {count} players in {slot.value} (max {capacity})')

    for entry in team.roster:
        player = players.get(entry.player_id)
        if player is None:
            errors.append(f'{team.name} has unknown player {entry.player_id}')
            continue
        if not can_place(player.position, entry.slot):
            errors.append(
                f'{team.name} has {player.name} ({player.position.value}) in {Slot(entry.slot).value}'
            )

    duplicates = sorted(pid for pid, n in Counter(e.player_id for e in team.roster).items() if n > 1)
    if duplicates:
        errors.append(f'{team.name} has duplicate players: {", ".join(duplicates)}')

    return errors


def validate_draft_history(state: LeagueDraftState, picks: list[DraftPick]) -> list[str]:
    """
    Check committed picks against the stored draft order.

    Checks:
    - Pick numbers run 1..cursor with no gaps or repeats
    - Each pick was made by the participant the order names
    - No player was drafted twice
    """
    errors = []

    if len(picks) != state.current_pick:
        errors.append(f'{len(picks)} picks recorded but cursor is {state.current_pick}')

    for expected, pick in enumerate(sorted(picks, key=lambda p: p.pick_number), start=1):
        if pick.pick_number != expected:
            errors.append(f'Expected pick {expected}, found pick {pick.pick_number}')
            continue
        if expected > len(state.draft_order):
            errors.append(f'Pick {expected} is beyond the draft order ({len(state.draft_order)} picks)')
            continue
        owner = state.draft_order[expected - 1].participant_id
        if pick.participant_id != owner:
            errors.append(f'Pick {expected} made by {pick.participant_id}, order says {owner}')

    duplicates = sorted(pid for pid, n in Counter(p.player_id for p in picks).items() if n > 1)
    if duplicates:
        errors.append(f'Players drafted more than once: {", ".join(duplicates)}')

    return errors


def validate_points(name: str, result: PointsResult) -> list[str]:
    """
    Check that a computed score is reasonable and internally consistent.

    Sanity checks:
    - Total points in reasonable range (0 to 400)
    - Breakdown sums to the total

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    if result.total > 400:
        warnings.append(f'{name} scored {result.total} pts (unusually high - check the scorecard)')
    elif result.total < 0:
        warnings.append(f'{name} scored {result.total} pts (negative - check the scorecard)')

    breakdown_sum = sum(points for _label, points in result.breakdown)
    if breakdown_sum != result.total:
        warnings.append(f'{name} breakdown sum ({breakdown_sum}) != total ({result.total})')

    return warnings

"""Snake draft order generation.

Snake drafts reverse direction each round:
    Round 1: A, B, C, D
    Round 2: D, C, B, A
    Round 3: A, B, C, D

so no team is stuck picking last twice in a row. The order is fully
determined by the input sequence; shuffle participants before calling
if a random order is wanted.
"""

from typing import List, Sequence

from .models import DraftOrderEntry


def generate_draft_order(participants: Sequence[str], rounds: int) -> List[DraftOrderEntry]:
    """
    Build the full pick sequence for a snake draft.

    Args:
        participants: Participant (team) ids in first-round order
        rounds: Number of rounds (one player per team per round)

    Returns:
        List of DraftOrderEntry with 1-based pick numbers, len = N * rounds.
        Empty when there are no participants or no rounds.
    """
    order: List[DraftOrderEntry] = []
    if not participants or rounds <= 0:
        return order

    forward = list(participants)
    backward = forward[::-1]

    for round_number in range(1, rounds + 1):
        round_order = forward if round_number % 2 == 1 else backward
        for participant_id in round_order:
            order.append(
                DraftOrderEntry(
                    pick_number=len(order) + 1,
                    round=round_number,
                    participant_id=participant_id,
                )
            )

    return order


def participant_for_pick(pick_number: int, participants: Sequence[str]) -> str:
    """
    Determine which participant picks at a given overall pick number.

    Args:
        pick_number: Overall pick number (1-based)
        participants: Participant ids in first-round order

    Raises:
        ValueError: If pick_number < 1 or there are no participants
    """
    if pick_number < 1:
        raise ValueError('Pick number must be >= 1')
    if not participants:
        raise ValueError('No participants')

    team_count = len(participants)
    round_number = ((pick_number - 1) // team_count) + 1
    pick_in_round = (pick_number - 1) % team_count

    if round_number % 2 == 1:
        return participants[pick_in_round]
    return participants[team_count - 1 - pick_in_round]

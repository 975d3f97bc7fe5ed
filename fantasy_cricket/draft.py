"""Draft state machine.

The league's draft session lives in the store; DraftStateMachine is its only
writer. The session moves

    pending -> open -> in_progress -> completed

and the cursor (``current_pick``, the number of committed picks) is the single
source of truth for whose turn it is. A pick is accepted only when the order
entry at the cursor names the submitting participant, so two clients racing
for the same turn cannot both succeed.

A pick is written in three steps (pick record, roster, cursor) and only the
cursor advance commits it. A pick numbered past the cursor is left over from
a failed commit; the next make_pick discards it and undoes its roster entry.
"""

import logging
from datetime import datetime, timezone
from typing import Mapping, Optional, Sequence

from .config import get_roster_size
from .locks import league_lock
from .models import (
    DraftOrderEntry,
    DraftPick,
    DraftResult,
    DraftStatus,
    LeagueDraftState,
    PickRejection,
    PickResult,
    RosterEntry,
    Slot,
)
from .slots import NO_SLOT, best_slot, slot_counts
from .snake_order import generate_draft_order
from .store import LeagueStore

logger = logging.getLogger('fantasy_cricket.draft')

MIN_PARTICIPANTS = 2


def _reject_pick(rejection: PickRejection, message: str) -> PickResult:
    logger.info(f'Pick rejected ({rejection.value}): {message}')
    return PickResult(accepted=False, rejection=rejection, message=message)


class DraftStateMachine:
    """Validates and commits draft transitions for one league."""

    def __init__(
        self,
        store: LeagueStore,
        league_id: str,
        capacities: Optional[Mapping[Slot, Optional[int]]] = None,
    ):
        """
        Args:
            store: Persistence collaborator holding the authoritative session
            league_id: League whose draft this machine drives
            capacities: Optional slot capacity override (defaults to league config)
        """
        self.store = store
        self.league_id = league_id
        self.capacities = capacities

    def state(self) -> LeagueDraftState:
        return self.store.get_league_draft_state(self.league_id)

    def current_turn(self) -> Optional[DraftOrderEntry]:
        """Order entry on the clock, or None if no pick is due."""
        return self.state().on_the_clock()

    def open_registration(self) -> DraftResult:
        """Move a pending league to open so teams can register."""
        with league_lock(self.league_id):
            state = self.state()
            if state.status != DraftStatus.PENDING:
                return DraftResult(
                    accepted=False,
                    state=state,
                    rejection=PickRejection.INVALID_STATE,
                    message=f'Cannot open registration while draft is {state.status.value}',
                )
            state.status = DraftStatus.OPEN
            self.store.set_league_draft_state(state)
            logger.info(f'League {self.league_id}: registration open')
            return DraftResult(accepted=True, state=state)

    def start_draft(
        self,
        participants: Optional[Sequence[str]] = None,
        rounds: Optional[int] = None,
        admin_override: bool = False,
    ) -> DraftResult:
        """
        Fix the draft order and begin the draft.

        The order is generated exactly once here. Calling this again while the
        draft is in progress (or completed) is rejected and leaves the stored
        order and cursor untouched.

        Args:
            participants: Team ids in first-round order (default: league teams
                sorted by draft position)
            rounds: Number of rounds (default: configured roster size)
            admin_override: Allow starting straight from pending

        Returns:
            DraftResult; rejected with INVALID_STATE, NOT_ENOUGH_PARTICIPANTS
            or EMPTY_ORDER
        """
        with league_lock(self.league_id):
            state = self.state()

            if state.status in (DraftStatus.IN_PROGRESS, DraftStatus.COMPLETED):
                logger.warning(
                    f'League {self.league_id}: start_draft refused, draft already {state.status.value}'
                )
                return DraftResult(
                    accepted=False,
                    state=state,
                    rejection=PickRejection.INVALID_STATE,
                    message=f'Draft already {state.status.value}; the order cannot be regenerated',
                )

            if state.status == DraftStatus.PENDING and not admin_override:
                return DraftResult(
                    accepted=False,
                    state=state,
                    rejection=PickRejection.INVALID_STATE,
                    message='Registration has not been opened (use admin override to start anyway)',
                )

            if participants is None:
                participants = [t.id for t in self.store.get_teams_for_league(self.league_id)]
            participants = list(participants)

            if len(set(participants)) != len(participants):
                return DraftResult(
                    accepted=False,
                    state=state,
                    rejection=PickRejection.INVALID_STATE,
                    message='Participant list contains duplicates',
                )

            if len(participants) < MIN_PARTICIPANTS:
                logger.error(
                    f'League {self.league_id}: cannot start draft with {len(participants)} participant(s)'
                )
                return DraftResult(
                    accepted=False,
                    state=state,
                    rejection=PickRejection.NOT_ENOUGH_PARTICIPANTS,
                    message=f'At least {MIN_PARTICIPANTS} teams are required, found {len(participants)}',
                )

            if rounds is None:
                rounds = get_roster_size()

            order = generate_draft_order(participants, rounds)
            if not order:
                logger.error(f'League {self.league_id}: draft order is empty (rounds={rounds})')
                return DraftResult(
                    accepted=False,
                    state=state,
                    rejection=PickRejection.EMPTY_ORDER,
                    message=f'Draft order is empty (rounds={rounds})',
                )

            state.draft_order = order
            state.rounds = rounds
            state.current_pick = 0
            state.session += 1
            state.status = DraftStatus.IN_PROGRESS
            self.store.set_league_draft_state(state)

            logger.info(
                f'League {self.league_id}: draft started with {len(participants)} teams, '
                f'{rounds} rounds, {len(order)} picks'
            )
            return DraftResult(accepted=True, state=state)

    def make_pick(
        self, participant_id: str, player_id: str, now: Optional[datetime] = None
    ) -> PickResult:
        """
        Validate and commit one pick.

        Checks, in order: draft active, participant on the clock, player not
        already drafted, player known, a compatible slot has room. Any failure
        returns a rejected PickResult without touching state. On success the
        pick is recorded, the player lands in the chosen slot, and the cursor
        advances (completing the draft after the last pick).
        """
        with league_lock(self.league_id):
            state = self.state()
            self._discard_uncommitted(state)

            if state.status != DraftStatus.IN_PROGRESS:
                return _reject_pick(
                    PickRejection.DRAFT_NOT_ACTIVE, f'Draft is {state.status.value}'
                )

            on_clock = state.on_the_clock()
            if on_clock is None:
                return _reject_pick(PickRejection.DRAFT_NOT_ACTIVE, 'No pick is due')

            if on_clock.participant_id != participant_id:
                return _reject_pick(
                    PickRejection.NOT_YOUR_TURN,
                    f'Pick {on_clock.pick_number} belongs to {on_clock.participant_id}',
                )

            taken = {
                p.player_id
                for p in self.store.list_draft_picks(self.league_id, end=state.current_pick)
            }
            if player_id in taken:
                return _reject_pick(PickRejection.ALREADY_TAKEN, f'{player_id} was already drafted')

            player = self.store.get_player(state.tournament_id, player_id)
            if player is None:
                return _reject_pick(
                    PickRejection.UNKNOWN_PLAYER,
                    f'{player_id} is not in the player pool for {state.tournament_id}',
                )

            team = self.store.get_team(participant_id)
            slot = best_slot(player.position, slot_counts(team.roster), self.capacities)
            if slot is NO_SLOT:
                return _reject_pick(
                    PickRejection.NO_SLOT,
                    f'No open slot for a {player.position.value} on {team.name}',
                )

            timestamp = now or datetime.now(timezone.utc)
            pick = DraftPick(
                pick_number=state.current_pick + 1,
                round=on_clock.round,
                participant_id=participant_id,
                player_id=player_id,
                slot=slot,
                timestamp=timestamp,
            )
            self.store.record_draft_pick(self.league_id, pick)

            team.roster.append(
                RosterEntry(player_id=player_id, slot=slot, acquired_via='draft', acquired_at=timestamp)
            )
            self.store.update_team_roster(team)

            state.current_pick += 1
            if state.current_pick == state.total_picks:
                state.status = DraftStatus.COMPLETED
            self.store.set_league_draft_state(state)

            logger.info(
                f'League {self.league_id}: pick {pick.pick_number} (round {pick.round}) '
                f'{team.name} -> {player.name} [{slot.value}]'
            )
            if state.status == DraftStatus.COMPLETED:
                logger.info(f'League {self.league_id}: draft completed')

            return PickResult(accepted=True, pick=pick)

    def _discard_uncommitted(self, state: LeagueDraftState) -> None:
        """Roll back picks recorded past the cursor and their roster entries."""
        orphans = self.store.discard_draft_picks_after(self.league_id, state.current_pick)
        for pick in orphans:
            team = self.store.get_team(pick.participant_id)
            kept = [
                e for e in team.roster
                if not (e.player_id == pick.player_id and e.acquired_via == 'draft')
            ]
            if len(kept) != len(team.roster):
                team.roster = kept
                self.store.update_team_roster(team)
            logger.warning(
                f'League {self.league_id}: rolled back uncommitted pick {pick.pick_number} '
                f'({pick.participant_id} -> {pick.player_id})'
            )

    def reset_draft(self) -> DraftResult:
        """
        Clear every pick and draft-acquired roster entry for the league.

        Players picked up through free agency stay on their rosters. The
        session returns to pending with no order.
        """
        with league_lock(self.league_id):
            state = self.state()
            self.store.clear_draft_picks(self.league_id)

            for team in self.store.get_teams_for_league(self.league_id):
                kept = [e for e in team.roster if e.acquired_via != 'draft']
                if len(kept) != len(team.roster):
                    team.roster = kept
                    self.store.update_team_roster(team)

            state.status = DraftStatus.PENDING
            state.current_pick = 0
            state.rounds = 0
            state.draft_order = []
            self.store.set_league_draft_state(state)

            logger.warning(f'League {self.league_id}: draft reset')
            return DraftResult(accepted=True, state=state)

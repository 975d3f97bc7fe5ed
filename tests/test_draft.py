"""Tests for the draft state machine."""

import threading
from datetime import datetime
from unittest.mock import patch

import pytest

from fantasy_cricket.draft import DraftStateMachine
from fantasy_cricket.models import DraftStatus, PickRejection, RosterEntry, Slot
from fantasy_cricket.validators import validate_draft_history

from conftest import LEAGUE_ID, TEAM_IDS

SMALL_CAPACITY = {
    Slot.BATTERS: 1,
    Slot.KEEPERS: 1,
    Slot.BOWLERS: 1,
    Slot.FLEX: 1,
    Slot.BENCH: None,
}


@pytest.fixture
def machine(store):
    return DraftStateMachine(store, LEAGUE_ID)


@pytest.fixture
def started(machine):
    """Draft in progress: A, B, C, D over three rounds."""
    machine.open_registration()
    result = machine.start_draft(rounds=3)
    assert result.accepted
    return machine


class TestStartDraft:
    """Tests for opening and starting a draft."""

    def test_pending_requires_override(self, machine):
        """Test a pending league cannot start without admin override."""
        result = machine.start_draft(rounds=3)
        assert not result.accepted
        assert result.rejection == PickRejection.INVALID_STATE
        assert machine.state().status == DraftStatus.PENDING

    def test_admin_override_from_pending(self, machine):
        """Test admin override starts straight from pending."""
        result = machine.start_draft(rounds=3, admin_override=True)
        assert result.accepted
        assert machine.state().status == DraftStatus.IN_PROGRESS

    def test_start_after_registration(self, started):
        """Test the stored order is the snake order over league teams."""
        state = started.state()
        assert state.status == DraftStatus.IN_PROGRESS
        assert state.current_pick == 0
        assert state.rounds == 3
        assert [e.participant_id for e in state.draft_order] == [
            'A', 'B', 'C', 'D', 'D', 'C', 'B', 'A', 'A', 'B', 'C', 'D',
        ]

    def test_default_rounds_from_config(self, machine):
        """Test rounds default to the configured roster size."""
        machine.open_registration()
        result = machine.start_draft()
        assert result.accepted
        assert result.state.rounds == 12
        assert result.state.total_picks == 48

    def test_second_start_rejected(self, started):
        """Test starting again leaves order and cursor untouched."""
        started.make_pick('A', 'bat1')
        before = started.state()

        result = started.start_draft(participants=['D', 'C', 'B', 'A'], rounds=5)
        assert not result.accepted
        assert result.rejection == PickRejection.INVALID_STATE

        after = started.state()
        assert after.draft_order == before.draft_order
        assert after.current_pick == 1

    def test_start_after_completion_rejected(self, machine):
        """Test a completed draft cannot be restarted."""
        machine.start_draft(participants=['A', 'B'], rounds=1, admin_override=True)
        machine.make_pick('A', 'bat1')
        machine.make_pick('B', 'bat2')
        assert machine.state().status == DraftStatus.COMPLETED
        result = machine.start_draft(admin_override=True)
        assert result.rejection == PickRejection.INVALID_STATE

    def test_not_enough_participants(self, machine):
        """Test a single participant cannot draft."""
        result = machine.start_draft(participants=['A'], rounds=3, admin_override=True)
        assert not result.accepted
        assert result.rejection == PickRejection.NOT_ENOUGH_PARTICIPANTS
        assert machine.state().status == DraftStatus.PENDING

    def test_zero_rounds_is_empty_order(self, machine):
        """Test an empty order is refused."""
        result = machine.start_draft(rounds=0, admin_override=True)
        assert result.rejection == PickRejection.EMPTY_ORDER

    def test_duplicate_participants(self, machine):
        """Test the same team cannot appear twice in the order."""
        result = machine.start_draft(participants=['A', 'B', 'A'], rounds=2, admin_override=True)
        assert result.rejection == PickRejection.INVALID_STATE

    def test_open_registration_only_from_pending(self, started):
        """Test registration cannot reopen mid-draft."""
        result = started.open_registration()
        assert not result.accepted
        assert result.rejection == PickRejection.INVALID_STATE


class TestMakePick:
    """Tests for pick validation and commit."""

    def test_full_draft_round_trip(self, started, store, player_pool):
        """Test N*R in-order picks complete the draft."""
        order = started.state().draft_order
        for entry, player in zip(order, player_pool):
            result = started.make_pick(entry.participant_id, player.id)
            assert result.accepted, result.message
            assert result.pick.pick_number == entry.pick_number
            assert result.pick.round == entry.round

        state = started.state()
        assert state.status == DraftStatus.COMPLETED
        assert state.current_pick == 12
        assert started.current_turn() is None
        assert validate_draft_history(state, store.list_draft_picks(LEAGUE_ID)) == []
        for team_id in TEAM_IDS:
            assert len(store.get_team(team_id).roster) == 3

    def test_pick_lands_on_roster(self, started, store):
        """Test the picked player joins the team in the chosen slot."""
        now = datetime(2025, 4, 1, 19, 30)
        result = started.make_pick('A', 'ar1', now=now)
        assert result.pick.slot == Slot.BATTERS
        entry = store.get_team('A').entry_for('ar1')
        assert entry.slot == Slot.BATTERS
        assert entry.acquired_via == 'draft'
        assert entry.acquired_at == now

    def test_out_of_turn_rejected(self, started):
        """Test C picking while A is on the clock is rejected."""
        result = started.make_pick('C', 'bat1')
        assert not result.accepted
        assert result.rejection == PickRejection.NOT_YOUR_TURN
        assert started.state().current_pick == 0

    def test_out_of_turn_at_every_cursor(self, started, player_pool):
        """Test every wrong participant is rejected at every cursor position."""
        order = started.state().draft_order
        for entry, player in zip(order, player_pool):
            for other in TEAM_IDS:
                if other == entry.participant_id:
                    continue
                result = started.make_pick(other, player.id)
                assert result.rejection == PickRejection.NOT_YOUR_TURN
                assert started.state().current_pick == entry.pick_number - 1
            assert started.make_pick(entry.participant_id, player.id).accepted

    def test_snake_turn_picks_twice(self, started):
        """Test D picks at the end of round 1 and start of round 2."""
        for team_id, player_id in zip('ABC', ['bat1', 'bat2', 'bat3']):
            assert started.make_pick(team_id, player_id).accepted
        assert started.make_pick('D', 'bat4').accepted
        assert started.current_turn().participant_id == 'D'
        assert started.make_pick('D', 'bat5').pick.round == 2

    def test_not_active_before_start(self, machine):
        """Test picks are refused before the draft starts."""
        result = machine.make_pick('A', 'bat1')
        assert result.rejection == PickRejection.DRAFT_NOT_ACTIVE

    def test_already_taken(self, started):
        """Test the same player cannot be drafted twice."""
        started.make_pick('A', 'bat1')
        result = started.make_pick('B', 'bat1')
        assert result.rejection == PickRejection.ALREADY_TAKEN
        assert started.state().current_pick == 1

    def test_unknown_player(self, started):
        """Test players outside the pool are refused."""
        result = started.make_pick('A', 'nobody')
        assert result.rejection == PickRejection.UNKNOWN_PLAYER
        assert started.state().current_pick == 0

    def test_no_slot(self, store):
        """Test a pick with every compatible slot full is refused."""
        machine = DraftStateMachine(store, LEAGUE_ID, capacities=SMALL_CAPACITY)
        machine.start_draft(participants=['A', 'B'], rounds=3, admin_override=True)
        # Order: A, B, B, A, A, B
        assert machine.make_pick('A', 'bat1').pick.slot == Slot.BATTERS
        assert machine.make_pick('B', 'bowl1').pick.slot == Slot.BOWLERS
        assert machine.make_pick('B', 'bowl2').pick.slot == Slot.FLEX
        assert machine.make_pick('A', 'bat2').pick.slot == Slot.FLEX

        result = machine.make_pick('A', 'bat3')
        assert result.rejection == PickRejection.NO_SLOT
        assert machine.state().current_pick == 4

        # A different position still fits
        assert machine.make_pick('A', 'bowl3').accepted

    def test_racing_clients_only_one_wins(self, started):
        """Test two submissions for the same turn commit exactly one pick."""
        barrier = threading.Barrier(2)
        results = []

        def submit(player_id):
            barrier.wait()
            results.append(started.make_pick('A', player_id))

        threads = [threading.Thread(target=submit, args=(pid,)) for pid in ('bat1', 'bat2')]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(r.accepted for r in results) == 1
        assert [r.rejection for r in results if not r.accepted] == [PickRejection.NOT_YOUR_TURN]
        assert started.state().current_pick == 1

    def test_failed_roster_write_can_be_retried(self, started, store):
        """Test a pick interrupted after its record was written does not block the turn."""
        with patch.object(store, 'update_team_roster', side_effect=OSError('disk full')):
            with pytest.raises(OSError):
                started.make_pick('A', 'bat1')
        assert started.state().current_pick == 0

        result = started.make_pick('A', 'bat2')
        assert result.accepted
        assert result.pick.pick_number == 1
        assert [p.player_id for p in store.list_draft_picks(LEAGUE_ID)] == ['bat2']
        assert [e.player_id for e in store.get_team('A').roster] == ['bat2']

    def test_failed_cursor_write_rolls_back_roster(self, started, store):
        """Test a pick whose cursor advance failed is undone, roster entry included."""
        with patch.object(store, 'set_league_draft_state', side_effect=OSError('disk full')):
            with pytest.raises(OSError):
                started.make_pick('A', 'bat1')
        assert [e.player_id for e in store.get_team('A').roster] == ['bat1']

        result = started.make_pick('A', 'bat1')
        assert result.accepted
        assert [p.player_id for p in store.list_draft_picks(LEAGUE_ID)] == ['bat1']
        assert [e.player_id for e in store.get_team('A').roster] == ['bat1']
        assert started.state().current_pick == 1
        assert started.make_pick('B', 'bat2').accepted


class TestResetDraft:
    """Tests for resetting a draft."""

    def test_reset_clears_picks_and_order(self, started, store):
        """Test reset returns to pending with nothing drafted."""
        started.make_pick('A', 'bat1')
        started.make_pick('B', 'bat2')

        result = started.reset_draft()
        assert result.accepted

        state = started.state()
        assert state.status == DraftStatus.PENDING
        assert state.current_pick == 0
        assert state.draft_order == []
        assert store.list_draft_picks(LEAGUE_ID) == []
        assert store.get_team('A').roster == []

    def test_reset_keeps_free_agent_pickups(self, started, store):
        """Test players acquired outside the draft survive a reset."""
        team = store.get_team('C')
        team.roster.append(RosterEntry('ar4', Slot.BENCH, acquired_via='free_agency'))
        store.update_team_roster(team)
        started.make_pick('A', 'bat1')

        started.reset_draft()
        assert [e.player_id for e in store.get_team('C').roster] == ['ar4']

    def test_draft_can_restart_after_reset(self, started):
        """Test a reset league can be started again."""
        started.make_pick('A', 'bat1')
        started.reset_draft()
        result = started.start_draft(participants=['B', 'A'], rounds=2, admin_override=True)
        assert result.accepted
        assert started.make_pick('B', 'bat1').accepted

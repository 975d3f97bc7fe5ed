"""Tests for scorecard parsing, the live stats client and point application."""

import os
from unittest.mock import MagicMock, patch

import pytest
import requests

from fantasy_cricket.errors import CricketApiError, MatchAlreadyAppliedError, PointsNotConfirmedError
from fantasy_cricket.live_scoring import (
    CricketDataClient,
    match_player,
    parse_scorecard,
    performance_from_stats,
    preview_scorecard,
    apply_points,
)
from fantasy_cricket.models import MatchPerformance, RosterEntry, Slot

from conftest import TOURNAMENT_ID

SCORECARD = [
    {
        'inning': 'Royal Challengers Bengaluru Inning 1',
        'batting': [
            {'batsman': {'id': 'c-101', 'name': 'Virat Kohli'}, 'r': 45, 'b': 30},
            {'batsman': {'id': 'c-999', 'name': 'Unknown Bloke'}, 'r': 10, 'b': 12},
        ],
        'bowling': [
            {'bowler': {'id': 'c-201', 'name': 'Jasprit Bumrah'}, 'o': '4', 'm': 1, 'r': 20, 'w': 2},
            {'bowler': {'id': 'c-202', 'name': 'Hardik Pandya'}, 'o': '3.3', 'm': 0, 'r': 28, 'w': 1},
        ],
        'catching': [
            {'catcher': {'name': 'Rishabh Pant'}, 'catch': 1, 'stumped': 1, 'runout': 0},
        ],
    },
    {
        'inning': 'Mumbai Indians Inning 1',
        'batting': [
            {'batsman': {'id': 'c-201', 'name': 'Jasprit Bumrah'}, 'r': 5, 'b': 4},
        ],
        'bowling': [],
    },
]


def by_name(performances):
    return {p.player_name: p for p in performances}


class TestParseScorecard:
    """Tests for converting API innings into performances."""

    def test_batting_and_bowling_merged(self):
        """Test a player who batted and bowled gets one record."""
        perfs = by_name(parse_scorecard(SCORECARD))
        bumrah = perfs['Jasprit Bumrah']
        assert bumrah.runs == 5
        assert bumrah.balls_faced == 4
        assert bumrah.wickets == 2
        assert bumrah.maidens == 1
        assert bumrah.overs_bowled == 4
        assert bumrah.runs_conceded == 20
        assert bumrah.player_id == 'c-201'

    def test_partial_overs(self):
        """Test 3.3 overs is three overs and three balls."""
        hardik = by_name(parse_scorecard(SCORECARD))['Hardik Pandya']
        assert hardik.overs_bowled == pytest.approx(3.5)

    def test_stumping_marks_keeper(self):
        """Test a stumping in the catching table flags the keeper."""
        pant = by_name(parse_scorecard(SCORECARD))['Rishabh Pant']
        assert pant.catches == 1
        assert pant.stumpings == 1
        assert pant.is_keeper

    def test_empty_scorecard(self):
        """Test no innings means no performances."""
        assert parse_scorecard([]) == []


class TestPerformanceFromStats:
    """Tests for manually entered stats."""

    def test_short_keys(self):
        """Test scorecard abbreviations are understood."""
        perf = performance_from_stats('Virat Kohli', {'runs': 45, 'SR': 150})
        assert perf.runs == 45
        assert perf.strike_rate == 150.0

    def test_long_keys_and_overs(self):
        """Test long names and overs notation."""
        perf = performance_from_stats(
            'Rashid Khan', {'wickets': 3, 'overs_bowled': '3.4', 'economy_rate': 5.5, 'maidens': 0}
        )
        assert perf.overs_bowled == pytest.approx(3 + 4 / 6)
        assert perf.economy_rate == 5.5

    def test_missing_keys_default(self):
        """Test absent stats are zero or not supplied."""
        perf = performance_from_stats('Nobody', {})
        assert perf.runs == 0
        assert perf.strike_rate is None
        assert perf.runs_conceded is None


class TestMatchPlayer:
    """Tests for matching feed names to the pool."""

    def test_exact_name(self, player_pool):
        """Test exact names match regardless of case and punctuation."""
        perf = MatchPerformance(player_name='virat kohli')
        assert match_player(perf, player_pool).id == 'bat1'

    def test_surname_only(self, player_pool):
        """Test a unique partial name matches."""
        assert match_player(MatchPerformance(player_name='Bumrah'), player_pool).id == 'bowl1'

    def test_ambiguous_partial(self, player_pool):
        """Test an ambiguous partial name does not match."""
        # Suryakumar Yadav and Kuldeep Yadav
        assert match_player(MatchPerformance(player_name='Yadav'), player_pool) is None

    def test_player_id_wins(self, player_pool):
        """Test a pool id in the record takes precedence."""
        perf = MatchPerformance(player_name='Someone Else', player_id='bowl2')
        assert match_player(perf, player_pool).id == 'bowl2'


class TestPreviewAndApply:
    """Tests for the preview -> confirm -> apply flow."""

    @pytest.fixture
    def preview(self, player_pool):
        return preview_scorecard(TOURNAMENT_ID, 'm-1', parse_scorecard(SCORECARD), player_pool)

    def test_preview_points(self, preview):
        """Test points for each matched player."""
        points = preview.points_by_player()
        assert points['bat1'] == 65   # 45 + SR 150
        assert points['bowl1'] == 100  # 5 + 2 wkts + maiden + ER 5.00
        assert points['ar1'] == 35    # 1 wkt + ER 8.00
        assert points['wk1'] == 27    # catch + stumping

    def test_unmatched_reported(self, preview):
        """Test players missing from the pool are listed with a warning."""
        assert [r.performance.player_name for r in preview.unmatched] == ['Unknown Bloke']
        assert preview.unmatched[0].warnings

    def test_pool_keeper_gets_stumping_credit(self, player_pool):
        """Test a keeper in the pool is credited even if the feed omits the flag."""
        perf = MatchPerformance(player_name='Sanju Samson', stumpings=2)
        preview = preview_scorecard(TOURNAMENT_ID, 'm-2', [perf], player_pool)
        assert preview.points_by_player()['wk2'] == 30

    def test_preview_leaves_performances_unchanged(self, player_pool):
        """Test the keeper flag is set on the preview row, not the caller's object."""
        perf = MatchPerformance(player_name='Sanju Samson', stumpings=2)
        preview = preview_scorecard(TOURNAMENT_ID, 'm-2', [perf], player_pool)
        assert perf.is_keeper is False
        assert preview.rows[0].performance.is_keeper is True

    def test_preview_writes_nothing(self, store, preview):
        """Test previewing leaves the store untouched."""
        assert store.get_player(TOURNAMENT_ID, 'bat1').total_points == 0

    def test_apply_requires_confirmation(self, store, preview):
        """Test unconfirmed points are refused."""
        with pytest.raises(PointsNotConfirmedError):
            apply_points(store, preview)
        with pytest.raises(PointsNotConfirmedError):
            apply_points(store, preview, confirmed='yes')
        assert store.get_player(TOURNAMENT_ID, 'bat1').total_points == 0

    def test_apply_updates_players_and_teams(self, store, preview):
        """Test confirmed points reach players and playing-slot team totals."""
        team = store.get_team('A')
        team.roster = [RosterEntry('bat1', Slot.BATTERS), RosterEntry('bowl1', Slot.BENCH)]
        store.update_team_roster(team)

        updated = apply_points(store, preview, confirmed=True)
        assert len(updated) == 4

        kohli = store.get_player(TOURNAMENT_ID, 'bat1')
        assert kohli.total_points == 65
        assert kohli.matches_played == 1
        assert store.get_team('A').total_points == 65
        assert store.get_team('B').total_points == 0

    def test_points_accumulate(self, store, preview, player_pool):
        """Test applying two different matches adds up."""
        second = preview_scorecard(TOURNAMENT_ID, 'm-2', parse_scorecard(SCORECARD), player_pool)
        apply_points(store, preview, confirmed=True)
        apply_points(store, second, confirmed=True)
        kohli = store.get_player(TOURNAMENT_ID, 'bat1')
        assert kohli.total_points == 130
        assert kohli.matches_played == 2

    def test_apply_records_match_stats(self, store, preview):
        """Test the applied points are kept per player for the match."""
        apply_points(store, preview, confirmed=True)
        stats = store.get_match_stats(TOURNAMENT_ID, 'm-1')
        assert {r.player_id: r.points for r in stats.players} == {
            'bat1': 65, 'bowl1': 100, 'ar1': 35, 'wk1': 27,
        }

    def test_same_match_applied_once(self, store, preview):
        """Test a second apply of one match is refused and changes nothing."""
        team = store.get_team('A')
        team.roster = [RosterEntry('bat1', Slot.BATTERS)]
        store.update_team_roster(team)
        apply_points(store, preview, confirmed=True)

        with pytest.raises(MatchAlreadyAppliedError):
            apply_points(store, preview, confirmed=True)

        kohli = store.get_player(TOURNAMENT_ID, 'bat1')
        assert kohli.total_points == 65
        assert kohli.matches_played == 1
        assert store.get_team('A').total_points == 65

    def test_force_reapplies(self, store, preview):
        """Test force applies a match that already has a record."""
        apply_points(store, preview, confirmed=True)
        apply_points(store, preview, confirmed=True, force=True)
        assert store.get_player(TOURNAMENT_ID, 'bat1').matches_played == 2


class TestCricketDataClient:
    """Tests for the HTTP client (requests mocked)."""

    def make_client(self, payload):
        session = MagicMock()
        session.get.return_value.json.return_value = payload
        client = CricketDataClient(
            api_key='test-key', base_url='https://api.example.test/v1', session=session
        )
        return client, session

    def test_fetch_performances(self):
        """Test a successful scorecard request is parsed."""
        client, session = self.make_client({'status': 'success', 'data': {'scorecard': SCORECARD}})
        perfs = client.fetch_performances('m-1')

        assert len(perfs) == 5
        url = session.get.call_args[0][0]
        params = session.get.call_args[1]['params']
        assert url == 'https://api.example.test/v1/match_scorecard'
        assert params == {'apikey': 'test-key', 'id': 'm-1'}

    def test_api_failure_status(self):
        """Test a failure payload raises with the reason."""
        client, _ = self.make_client({'status': 'failure', 'reason': 'Invalid API Key'})
        with pytest.raises(CricketApiError, match='Invalid API Key'):
            client.get_match_scorecard('m-1')

    def test_network_error(self):
        """Test transport errors become CricketApiError."""
        client, session = self.make_client({})
        session.get.side_effect = requests.ConnectionError('unreachable')
        with pytest.raises(CricketApiError):
            client.get_match_scorecard('m-1')

    def test_missing_api_key(self):
        """Test requests are refused without a key."""
        with patch.dict(os.environ, {}, clear=True):
            client = CricketDataClient(base_url='https://api.example.test/v1', session=MagicMock())
            with pytest.raises(CricketApiError, match='CRICKET_API_KEY'):
                client.get_match_scorecard('m-1')

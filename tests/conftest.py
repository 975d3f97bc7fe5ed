"""Shared fixtures: a small IPL player pool and a four-team league on disk."""

import pytest

from fantasy_cricket.models import Player, Position, Team
from fantasy_cricket.store import JsonLeagueStore

TOURNAMENT_ID = 'ipl-2025'
LEAGUE_ID = 'league-1'
TEAM_IDS = ['A', 'B', 'C', 'D']


def make_player(player_id, name, position, team='MI'):
    return Player(id=player_id, name=name, team=team, position=position)


@pytest.fixture
def player_pool():
    """Twenty players: enough for a four-team, three-round draft with room to spare."""
    return [
        make_player('bat1', 'Virat Kohli', Position.BATTER, 'RCB'),
        make_player('bat2', 'Rohit Sharma', Position.BATTER, 'MI'),
        make_player('bat3', 'Shubman Gill', Position.BATTER, 'GT'),
        make_player('bat4', 'Yashasvi Jaiswal', Position.BATTER, 'RR'),
        make_player('bat5', 'Suryakumar Yadav', Position.BATTER, 'MI'),
        make_player('bat6', 'Ruturaj Gaikwad', Position.BATTER, 'CSK'),
        make_player('wk1', 'Rishabh Pant', Position.KEEPER, 'LSG'),
        make_player('wk2', 'Sanju Samson', Position.KEEPER, 'RR'),
        make_player('wk3', 'Heinrich Klaasen', Position.KEEPER, 'SRH'),
        make_player('bowl1', 'Jasprit Bumrah', Position.BOWLER, 'MI'),
        make_player('bowl2', 'Rashid Khan', Position.BOWLER, 'GT'),
        make_player('bowl3', 'Yuzvendra Chahal', Position.BOWLER, 'PBKS'),
        make_player('bowl4', 'Mohammed Siraj', Position.BOWLER, 'GT'),
        make_player('bowl5', 'Arshdeep Singh', Position.BOWLER, 'PBKS'),
        make_player('bowl6', 'Kuldeep Yadav', Position.BOWLER, 'DC'),
        make_player('bowl7', 'Trent Boult', Position.BOWLER, 'MI'),
        make_player('ar1', 'Hardik Pandya', Position.ALLROUNDER, 'MI'),
        make_player('ar2', 'Ravindra Jadeja', Position.ALLROUNDER, 'CSK'),
        make_player('ar3', 'Axar Patel', Position.ALLROUNDER, 'DC'),
        make_player('ar4', 'Sunil Narine', Position.ALLROUNDER, 'KKR'),
    ]


@pytest.fixture
def store(tmp_path, player_pool):
    """JSON store with one pending league, four teams (A-D) and the player pool."""
    league_store = JsonLeagueStore(tmp_path / 'data')
    league_store.save_players(TOURNAMENT_ID, player_pool)
    league_store.create_league(LEAGUE_ID, TOURNAMENT_ID)
    for position, team_id in enumerate(TEAM_IDS, start=1):
        league_store.create_team(
            Team(
                id=team_id,
                name=f'Team {team_id}',
                owner=f'Owner {team_id}',
                user_id=f'user-{team_id}',
                tournament_id=TOURNAMENT_ID,
                league_id=LEAGUE_ID,
                draft_position=position,
            )
        )
    return league_store

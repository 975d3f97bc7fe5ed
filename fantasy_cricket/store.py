"""League persistence.

The draft and roster engines only talk to storage through the LeagueStore
protocol. JsonLeagueStore keeps each document as a pydantic-validated JSON
file under a data directory:

    data/
        leagues.json
        teams.json
        players/<tournament_id>.json
        draft_picks/<league_id>.json
        match_stats/<tournament_id>/<match_id>.json
"""

import logging
from pathlib import Path
from typing import List, Optional, Protocol

from .errors import DuplicateTeamError, LeagueNotFoundError, TeamNotFoundError
from .models import (
    DraftOrderEntry,
    DraftPick,
    DraftStatus,
    LeagueDraftState,
    Player,
    Position,
    RosterEntry,
    Slot,
    Team,
)
from .schemas import (
    DraftOrderRecord,
    DraftPickRecord,
    DraftPicksFile,
    LeagueRecord,
    LeaguesFile,
    MatchStatsFile,
    PlayerRecord,
    PlayersFile,
    RosterEntryRecord,
    TeamRecord,
    TeamsFile,
)
from .utils import format_timestamp, load_json, parse_timestamp, save_json

logger = logging.getLogger('fantasy_cricket.store')


class LeagueStore(Protocol):
    """Persistence operations the engines rely on."""

    def get_players_for_tournament(self, tournament_id: str) -> List[Player]: ...

    def get_player(self, tournament_id: str, player_id: str) -> Optional[Player]: ...

    def create_team(self, team: Team) -> Team: ...

    def get_team(self, team_id: str) -> Team: ...

    def update_team_roster(self, team: Team) -> None: ...

    def get_teams_for_tournament(self, tournament_id: str) -> List[Team]: ...

    def get_teams_for_league(self, league_id: str) -> List[Team]: ...

    def get_league_draft_state(self, league_id: str) -> LeagueDraftState: ...

    def set_league_draft_state(self, state: LeagueDraftState) -> None: ...

    def record_draft_pick(self, league_id: str, pick: DraftPick) -> None: ...

    def list_draft_picks(
        self, league_id: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> List[DraftPick]: ...

    def discard_draft_picks_after(self, league_id: str, pick_number: int) -> List[DraftPick]: ...

    def clear_draft_picks(self, league_id: str) -> None: ...

    def update_player_points(
        self, tournament_id: str, player_id: str, points: int, matches: int = 1
    ) -> Player: ...

    def get_match_stats(self, tournament_id: str, match_id: str) -> Optional[MatchStatsFile]: ...

    def record_match_stats(self, stats: MatchStatsFile) -> None: ...


# ---------------------------------------------------------------------------
# Record <-> model conversion
# ---------------------------------------------------------------------------

def player_from_record(record: PlayerRecord) -> Player:
    return Player(
        id=record.id,
        name=record.name,
        team=record.team,
        position=Position(record.position),
        total_points=record.total_points,
        matches_played=record.matches_played,
    )


def player_to_record(player: Player) -> PlayerRecord:
    return PlayerRecord(
        id=player.id,
        name=player.name,
        team=player.team,
        position=Position(player.position).value,
        total_points=player.total_points,
        matches_played=player.matches_played,
    )


def team_from_record(record: TeamRecord) -> Team:
    return Team(
        id=record.id,
        name=record.name,
        owner=record.owner,
        user_id=record.user_id,
        tournament_id=record.tournament_id,
        league_id=record.league_id,
        draft_position=record.draft_position,
        weekly_pickups=record.weekly_pickups,
        last_pickup_reset=parse_timestamp(record.last_pickup_reset),
        total_points=record.total_points,
        roster=[
            RosterEntry(
                player_id=e.player_id,
                slot=Slot(e.slot),
                acquired_via=e.acquired_via,
                acquired_at=parse_timestamp(e.acquired_at),
            )
            for e in record.roster
        ],
    )


def team_to_record(team: Team) -> TeamRecord:
    return TeamRecord(
        id=team.id,
        name=team.name,
        owner=team.owner,
        user_id=team.user_id,
        tournament_id=team.tournament_id,
        league_id=team.league_id,
        draft_position=team.draft_position,
        weekly_pickups=team.weekly_pickups,
        last_pickup_reset=format_timestamp(team.last_pickup_reset),
        total_points=team.total_points,
        roster=[
            RosterEntryRecord(
                player_id=e.player_id,
                slot=Slot(e.slot).value,
                acquired_via=e.acquired_via,
                acquired_at=format_timestamp(e.acquired_at),
            )
            for e in team.roster
        ],
    )


def league_from_record(record: LeagueRecord) -> LeagueDraftState:
    return LeagueDraftState(
        league_id=record.league_id,
        tournament_id=record.tournament_id,
        status=DraftStatus(record.draft_status),
        current_pick=record.current_pick,
        rounds=record.rounds,
        session=record.session,
        draft_order=[
            DraftOrderEntry(e.pick_number, e.round, e.participant_id) for e in record.draft_order
        ],
    )


def league_to_record(state: LeagueDraftState) -> LeagueRecord:
    return LeagueRecord(
        league_id=state.league_id,
        tournament_id=state.tournament_id,
        draft_status=DraftStatus(state.status).value,
        current_pick=state.current_pick,
        rounds=state.rounds,
        session=state.session,
        draft_order=[
            DraftOrderRecord(
                pick_number=e.pick_number, round=e.round, participant_id=e.participant_id
            )
            for e in state.draft_order
        ],
    )


def pick_from_record(record: DraftPickRecord) -> DraftPick:
    return DraftPick(
        pick_number=record.pick_number,
        round=record.round,
        participant_id=record.participant_id,
        player_id=record.player_id,
        slot=Slot(record.slot),
        timestamp=parse_timestamp(record.timestamp),
    )


def pick_to_record(pick: DraftPick) -> DraftPickRecord:
    return DraftPickRecord(
        pick_number=pick.pick_number,
        round=pick.round,
        participant_id=pick.participant_id,
        player_id=pick.player_id,
        slot=Slot(pick.slot).value,
        timestamp=format_timestamp(pick.timestamp),
    )


class JsonLeagueStore:
    """LeagueStore backed by JSON files in a data directory."""

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir)

    # -- paths ---------------------------------------------------------------

    @property
    def leagues_path(self) -> Path:
        return self.data_dir / 'leagues.json'

    @property
    def teams_path(self) -> Path:
        return self.data_dir / 'teams.json'

    def players_path(self, tournament_id: str) -> Path:
        return self.data_dir / 'players' / f'{tournament_id}.json'

    def picks_path(self, league_id: str) -> Path:
        return self.data_dir / 'draft_picks' / f'{league_id}.json'

    def match_stats_path(self, tournament_id: str, match_id: str) -> Path:
        return self.data_dir / 'match_stats' / tournament_id / f'{match_id}.json'

    # -- file helpers --------------------------------------------------------

    def _load_leagues(self) -> LeaguesFile:
        return load_json(self.leagues_path, schema=LeaguesFile, default=LeaguesFile)

    def _load_teams(self) -> TeamsFile:
        return load_json(self.teams_path, schema=TeamsFile, default=TeamsFile)

    def _load_players(self, tournament_id: str) -> PlayersFile:
        return load_json(
            self.players_path(tournament_id),
            schema=PlayersFile,
            default=lambda: PlayersFile(tournament_id=tournament_id),
        )

    def _load_picks(self, league_id: str) -> DraftPicksFile:
        return load_json(
            self.picks_path(league_id),
            schema=DraftPicksFile,
            default=lambda: DraftPicksFile(league_id=league_id),
        )

    # -- players -------------------------------------------------------------

    def save_players(self, tournament_id: str, players: List[Player]) -> None:
        """Seed or replace a tournament's player pool."""
        data = PlayersFile(
            tournament_id=tournament_id, players=[player_to_record(p) for p in players]
        )
        save_json(self.players_path(tournament_id), data)
        logger.info(f'Saved {len(players)} players for tournament {tournament_id}')

    def get_players_for_tournament(self, tournament_id: str) -> List[Player]:
        return [player_from_record(r) for r in self._load_players(tournament_id).players]

    def get_player(self, tournament_id: str, player_id: str) -> Optional[Player]:
        for record in self._load_players(tournament_id).players:
            if record.id == player_id:
                return player_from_record(record)
        return None

    def update_player_points(
        self, tournament_id: str, player_id: str, points: int, matches: int = 1
    ) -> Player:
        """Add points (and matches played) to a player's cumulative totals."""
        data = self._load_players(tournament_id)
        for record in data.players:
            if record.id == player_id:
                record.total_points += points
                record.matches_played += matches
                save_json(self.players_path(tournament_id), data)
                return player_from_record(record)
        raise KeyError(f'Player {player_id} not found in tournament {tournament_id}')

    # -- match stats ---------------------------------------------------------

    def get_match_stats(self, tournament_id: str, match_id: str) -> Optional[MatchStatsFile]:
        """Per-player points saved when a match was applied, or None."""
        path = self.match_stats_path(tournament_id, match_id)
        if not path.exists():
            return None
        return load_json(path, schema=MatchStatsFile)

    def record_match_stats(self, stats: MatchStatsFile) -> None:
        save_json(self.match_stats_path(stats.tournament_id, stats.match_id), stats)
        logger.info(
            f'Recorded stats for match {stats.match_id} ({len(stats.players)} players)'
        )

    # -- teams ---------------------------------------------------------------

    def create_team(self, team: Team) -> Team:
        """
        Persist a new team.

        Raises:
            DuplicateTeamError: If the user already has a team in the tournament
                or the team id is taken
        """
        data = self._load_teams()
        for existing in data.teams:
            if existing.user_id == team.user_id and existing.tournament_id == team.tournament_id:
                raise DuplicateTeamError(
                    f'User {team.user_id} already has team {existing.id} '
                    f'in tournament {team.tournament_id}'
                )
            if existing.id == team.id:
                raise DuplicateTeamError(f'Team id {team.id} already exists')
        data.teams.append(team_to_record(team))
        save_json(self.teams_path, data)
        logger.info(f'Created team {team.id} ({team.name}) for user {team.user_id}')
        return team

    def get_team(self, team_id: str) -> Team:
        for record in self._load_teams().teams:
            if record.id == team_id:
                return team_from_record(record)
        raise TeamNotFoundError(f'Team not found: {team_id}')

    def update_team_roster(self, team: Team) -> None:
        """Persist a team's roster, pickup counter and points."""
        data = self._load_teams()
        for idx, record in enumerate(data.teams):
            if record.id == team.id:
                data.teams[idx] = team_to_record(team)
                save_json(self.teams_path, data)
                return
        raise TeamNotFoundError(f'Team not found: {team.id}')

    def get_teams_for_tournament(self, tournament_id: str) -> List[Team]:
        return [
            team_from_record(r) for r in self._load_teams().teams if r.tournament_id == tournament_id
        ]

    def get_teams_for_league(self, league_id: str) -> List[Team]:
        teams = [team_from_record(r) for r in self._load_teams().teams if r.league_id == league_id]
        return sorted(teams, key=lambda t: t.draft_position)

    # -- leagues -------------------------------------------------------------

    def create_league(self, league_id: str, tournament_id: str) -> LeagueDraftState:
        """Create a league in the pending state (no-op if it already exists)."""
        data = self._load_leagues()
        for record in data.leagues:
            if record.league_id == league_id:
                return league_from_record(record)
        state = LeagueDraftState(league_id=league_id, tournament_id=tournament_id)
        data.leagues.append(league_to_record(state))
        save_json(self.leagues_path, data)
        logger.info(f'Created league {league_id} for tournament {tournament_id}')
        return state

    def get_league_draft_state(self, league_id: str) -> LeagueDraftState:
        for record in self._load_leagues().leagues:
            if record.league_id == league_id:
                return league_from_record(record)
        raise LeagueNotFoundError(f'League not found: {league_id}')

    def set_league_draft_state(self, state: LeagueDraftState) -> None:
        data = self._load_leagues()
        for idx, record in enumerate(data.leagues):
            if record.league_id == state.league_id:
                data.leagues[idx] = league_to_record(state)
                save_json(self.leagues_path, data)
                return
        raise LeagueNotFoundError(f'League not found: {state.league_id}')

    # -- draft picks ---------------------------------------------------------

    def record_draft_pick(self, league_id: str, pick: DraftPick) -> None:
        data = self._load_picks(league_id)
        if any(p.pick_number == pick.pick_number for p in data.picks):
            raise ValueError(f'Pick {pick.pick_number} already recorded for league {league_id}')
        data.picks.append(pick_to_record(pick))
        save_json(self.picks_path(league_id), data)

    def list_draft_picks(
        self, league_id: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> List[DraftPick]:
        """
        Recorded picks ordered by pick number.

        Args:
            league_id: League id
            start: First pick number to include (inclusive)
            end: Last pick number to include (inclusive)
        """
        picks = [pick_from_record(r) for r in self._load_picks(league_id).picks]
        if start is not None:
            picks = [p for p in picks if p.pick_number >= start]
        if end is not None:
            picks = [p for p in picks if p.pick_number <= end]
        return sorted(picks, key=lambda p: p.pick_number)

    def discard_draft_picks_after(self, league_id: str, pick_number: int) -> List[DraftPick]:
        """
        Delete picks numbered above pick_number and return them.

        Used to drop a pick that was written but never committed by a cursor
        advance.
        """
        data = self._load_picks(league_id)
        kept = [r for r in data.picks if r.pick_number <= pick_number]
        if len(kept) == len(data.picks):
            return []
        removed = [pick_from_record(r) for r in data.picks if r.pick_number > pick_number]
        data.picks = kept
        save_json(self.picks_path(league_id), data)
        logger.warning(
            f'League {league_id}: discarded uncommitted pick(s) '
            f'{[p.pick_number for p in removed]}'
        )
        return sorted(removed, key=lambda p: p.pick_number)

    def clear_draft_picks(self, league_id: str) -> None:
        save_json(self.picks_path(league_id), DraftPicksFile(league_id=league_id))

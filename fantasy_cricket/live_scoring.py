"""Live match stats: fetching, parsing, and the preview -> apply flow.

Points never reach cumulative totals automatically. An admin first builds a
preview (pure computation, nothing written), reviews it, then calls
apply_points with confirmed=True. Manually entered stats go through the
same two steps. Each applied match is recorded per player in the store, and
a match that already has a record is not applied again.

API flow (cricapi.com / CricketData.org v1):
    match_scorecard?id=MATCH_ID -> innings with batting, bowling, catching
"""

import logging
import os
import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

import requests

from .config import get_config
from .errors import CricketApiError, MatchAlreadyAppliedError, PointsNotConfirmedError
from .models import MatchPerformance, Player, PointsResult, Position
from .roster import team_points
from .schemas import MatchStatRecord, MatchStatsFile
from .scoring import parse_overs, score_performance
from .store import LeagueStore
from .utils import format_timestamp
from .validators import validate_points

logger = logging.getLogger('fantasy_cricket.live_scoring')


class CricketDataClient:
    """Thin client for the CricketData.org scorecard API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ):
        self.api_key = api_key or os.environ.get('CRICKET_API_KEY')
        self.base_url = (base_url or get_config().cricket_api_base).rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, endpoint: str, **params: Any) -> dict:
        if not self.api_key:
            raise CricketApiError('CRICKET_API_KEY not configured')

        query = {'apikey': self.api_key, **{k: v for k, v in params.items() if v is not None}}
        url = f'{self.base_url}/{endpoint}'
        logger.debug(f'Cricket API request: {endpoint}')

        try:
            response = self.session.get(url, params=query, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.error(f'Cricket API request failed for {endpoint}: {e}')
            raise CricketApiError(f'Request to {endpoint} failed: {e}') from e
        except ValueError as e:
            raise CricketApiError(f'{endpoint} returned a non-JSON response') from e

        if payload.get('status') != 'success':
            reason = payload.get('reason') or payload.get('status') or 'API error'
            raise CricketApiError(f'{endpoint}: {reason}')

        return payload.get('data') or {}

    def get_match_scorecard(self, match_id: str) -> dict:
        """Fetch the scorecard for one match (innings list under 'scorecard')."""
        return self._request('match_scorecard', id=match_id)

    def fetch_performances(self, match_id: str) -> List[MatchPerformance]:
        data = self.get_match_scorecard(match_id)
        performances = parse_scorecard(data.get('scorecard') or [])
        logger.info(f'Match {match_id}: parsed {len(performances)} player performances')
        return performances


def _name_of(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return value.get('name')
    return value or None


def _id_of(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return value.get('id')
    return None


def _int(value: Any) -> int:
    try:
        return int(float(value or 0))
    except (TypeError, ValueError):
        return 0


def parse_scorecard(scorecard: Iterable[dict]) -> List[MatchPerformance]:
    """
    Convert API innings data into one MatchPerformance per player.

    Players who both batted and bowled (or fielded) are merged by name,
    case-insensitively.
    """
    by_name: dict[str, MatchPerformance] = {}

    def get(name: str, player_id: Optional[str] = None) -> MatchPerformance:
        key = name.strip().lower()
        perf = by_name.get(key)
        if perf is None:
            perf = MatchPerformance(player_name=name.strip(), player_id=player_id)
            by_name[key] = perf
        elif player_id and not perf.player_id:
            perf.player_id = player_id
        return perf

    for innings in scorecard:
        for row in innings.get('batting') or []:
            name = _name_of(row.get('batsman'))
            if not name:
                continue
            perf = get(name, _id_of(row.get('batsman')))
            perf.runs += _int(row.get('r'))
            perf.balls_faced += _int(row.get('b'))

        for row in innings.get('bowling') or []:
            name = _name_of(row.get('bowler'))
            if not name:
                continue
            perf = get(name, _id_of(row.get('bowler')))
            perf.wickets += _int(row.get('w'))
            perf.maidens += _int(row.get('m'))
            perf.overs_bowled += parse_overs(row.get('o'))
            perf.runs_conceded = (perf.runs_conceded or 0) + _int(row.get('r'))

        for row in innings.get('catching') or innings.get('fielding') or []:
            name = _name_of(row.get('catcher')) or _name_of(row.get('fielder')) or row.get('name')
            if not name:
                continue
            perf = get(name)
            perf.catches += _int(row.get('catch', row.get('catches', 0)))
            perf.stumpings += _int(row.get('stumped', 0))
            perf.run_outs += _int(row.get('runout', row.get('runOut', 0)))
            if perf.stumpings:
                perf.is_keeper = True

    return list(by_name.values())


def performance_from_stats(name: str, stats: dict) -> MatchPerformance:
    """
    Build a MatchPerformance from manually entered stats.

    Accepts the short scorecard keys (SR, ER, overs, runouts) as well as the
    long names. Missing keys default to zero / not supplied.
    """
    def first(*keys):
        for key in keys:
            if stats.get(key) is not None:
                return stats[key]
        return None

    strike_rate = first('strike_rate', 'strikeRate', 'SR')
    economy = first('economy_rate', 'economyRate', 'economy', 'ER')
    runs_conceded = first('runs_conceded', 'runsConceded')

    return MatchPerformance(
        player_name=name,
        player_id=stats.get('player_id'),
        runs=_int(first('runs')),
        balls_faced=_int(first('balls_faced', 'ballsFaced', 'balls')),
        strike_rate=float(strike_rate) if strike_rate is not None else None,
        wickets=_int(first('wickets')),
        overs_bowled=parse_overs(first('overs_bowled', 'oversBowled', 'overs')),
        runs_conceded=_int(runs_conceded) if runs_conceded is not None else None,
        economy_rate=float(economy) if economy is not None else None,
        maidens=_int(first('maidens', 'maidenOvers')),
        catches=_int(first('catches')),
        run_outs=_int(first('run_outs', 'runOuts', 'runouts')),
        stumpings=_int(first('stumpings')),
        is_keeper=bool(first('is_keeper', 'isWicketkeeper')),
    )


def normalize_name(name: str) -> str:
    return re.sub(r'[^a-z]', '', (name or '').lower())


def match_player(perf: MatchPerformance, players: List[Player]) -> Optional[Player]:
    """
    Find the pool player a performance belongs to.

    Tries player id, then exact normalized name, then a unique containment
    match ("Kohli" -> "Virat Kohli").
    """
    if perf.player_id:
        for player in players:
            if player.id == perf.player_id:
                return player

    target = normalize_name(perf.player_name)
    if not target:
        return None

    for player in players:
        if normalize_name(player.name) == target:
            return player

    candidates = [
        p for p in players
        if target in normalize_name(p.name) or normalize_name(p.name) in target
    ]
    if len(candidates) == 1:
        return candidates[0]
    return None


@dataclass
class PreviewRow:
    performance: MatchPerformance
    player: Optional[Player]
    points: PointsResult
    warnings: List[str] = field(default_factory=list)


@dataclass
class ScorecardPreview:
    """Computed points for one match, not yet persisted."""
    tournament_id: str
    match_id: str
    rows: List[PreviewRow] = field(default_factory=list)

    @property
    def matched(self) -> List[PreviewRow]:
        return [r for r in self.rows if r.player is not None]

    @property
    def unmatched(self) -> List[PreviewRow]:
        return [r for r in self.rows if r.player is None]

    def points_by_player(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for row in self.matched:
            totals[row.player.id] = totals.get(row.player.id, 0) + row.points.total
        return totals


def preview_scorecard(
    tournament_id: str,
    match_id: str,
    performances: Iterable[MatchPerformance],
    players: List[Player],
) -> ScorecardPreview:
    """
    Score a match without writing anything.

    A player listed as a keeper in the pool gets stumping credit even when
    the feed does not flag them.
    """
    preview = ScorecardPreview(tournament_id=tournament_id, match_id=match_id)

    for perf in performances:
        player = match_player(perf, players)
        warnings: List[str] = []
        if player is None:
            warnings.append(f'No pool player matches "{perf.player_name}"')
        elif player.position == Position.KEEPER:
            perf = replace(perf, is_keeper=True)

        points = score_performance(perf)
        warnings.extend(validate_points(perf.player_name, points))
        preview.rows.append(PreviewRow(performance=perf, player=player, points=points, warnings=warnings))

    logger.info(
        f'Preview for match {match_id}: {len(preview.matched)} matched, '
        f'{len(preview.unmatched)} unmatched'
    )
    return preview


def apply_points(
    store: LeagueStore,
    preview: ScorecardPreview,
    confirmed: bool = False,
    force: bool = False,
) -> List[Player]:
    """
    Persist a reviewed preview.

    Records the match's per-player points, adds each matched player's points
    to their cumulative total (one match played each), then adds to every
    fantasy team in the tournament the points of its players in playing slots.

    The match record is written first, so an apply that fails part way is not
    silently repeated; re-running it needs force=True after the totals have
    been checked by hand.

    Args:
        store: League store
        preview: Reviewed preview from preview_scorecard
        confirmed: Must be True; guards against applying an unreviewed preview
        force: Apply even though the match was already applied

    Raises:
        PointsNotConfirmedError: If confirmed is not True
        MatchAlreadyAppliedError: If the match was already applied and force is not set
    """
    if confirmed is not True:
        raise PointsNotConfirmedError(
            f'Points for match {preview.match_id} must be confirmed before they are applied'
        )

    previous = store.get_match_stats(preview.tournament_id, preview.match_id)
    if previous is not None:
        if not force:
            raise MatchAlreadyAppliedError(
                f'Match {preview.match_id} was already applied at {previous.applied_at}'
            )
        logger.warning(f'Re-applying match {preview.match_id} (first applied {previous.applied_at})')

    store.record_match_stats(
        MatchStatsFile(
            tournament_id=preview.tournament_id,
            match_id=preview.match_id,
            applied_at=format_timestamp(datetime.now(timezone.utc)),
            players=[
                MatchStatRecord(
                    player_id=row.player.id,
                    player_name=row.player.name,
                    points=row.points.total,
                    breakdown=list(row.points.breakdown),
                )
                for row in preview.matched
            ],
        )
    )

    points_by_player = preview.points_by_player()
    updated = [
        store.update_player_points(preview.tournament_id, player_id, points)
        for player_id, points in points_by_player.items()
    ]

    for team in store.get_teams_for_tournament(preview.tournament_id):
        gained = team_points(team, points_by_player)
        if gained:
            team.total_points += gained
            store.update_team_roster(team)
            logger.info(f'{team.name}: +{gained} pts from match {preview.match_id}')

    logger.info(f'Applied points for match {preview.match_id} to {len(updated)} players')
    return updated

"""Roster management: pickups, slot moves, drops and team scoring."""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Mapping, Optional

from .config import get_weekly_pickup_limit
from .constants import PLAYING_SLOTS
from .models import RosterEntry, RosterRejection, RosterResult, Slot, Team
from .slots import can_place, has_room, slot_counts
from .store import LeagueStore

logger = logging.getLogger('fantasy_cricket.roster')


def _as_local_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def week_start(now: datetime) -> datetime:
    """Monday 00:00 (local time) of the ISO week containing ``now``."""
    local = _as_local_naive(now)
    monday = local - timedelta(days=local.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def is_new_week(last_reset: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """True when ``last_reset`` falls before the start of the current week."""
    if last_reset is None:
        return True
    now = now or datetime.now()
    return _as_local_naive(last_reset) < week_start(now)


def lineup_by_slot(team: Team) -> Dict[Slot, List[str]]:
    """Player ids grouped by slot, in roster order."""
    lineup: Dict[Slot, List[str]] = {slot: [] for slot in Slot}
    for entry in team.roster:
        lineup[Slot(entry.slot)].append(entry.player_id)
    return lineup


def active_players(team: Team) -> List[str]:
    """Player ids in playing slots (bench excluded)."""
    return [e.player_id for e in team.roster if Slot(e.slot) in PLAYING_SLOTS]


def team_points(team: Team, points_by_player: Mapping[str, int]) -> int:
    """Sum points for players in playing slots; bench players never count."""
    return sum(points_by_player.get(player_id, 0) for player_id in active_players(team))


def _reject(rejection: RosterRejection, message: str, team: Optional[Team] = None) -> RosterResult:
    logger.info(f'Roster change rejected ({rejection.value}): {message}')
    return RosterResult(accepted=False, team=team, rejection=rejection, message=message)


class RosterManager:
    """Applies roster operations for teams in the store."""

    def __init__(
        self,
        store: LeagueStore,
        weekly_pickup_limit: Optional[int] = None,
        capacities: Optional[Mapping[Slot, Optional[int]]] = None,
    ):
        self.store = store
        self.weekly_pickup_limit = (
            weekly_pickup_limit if weekly_pickup_limit is not None else get_weekly_pickup_limit()
        )
        self.capacities = capacities

    def reset_pickups_if_new_week(self, team: Team, now: Optional[datetime] = None) -> bool:
        """Zero the weekly pickup counter if a new week started since the last reset."""
        now = now or datetime.now()
        if is_new_week(team.last_pickup_reset, now):
            if team.weekly_pickups:
                logger.info(f'{team.name}: weekly pickups reset ({team.weekly_pickups} -> 0)')
            team.weekly_pickups = 0
            team.last_pickup_reset = now
            return True
        return False

    def pickups_remaining(self, team: Team, now: Optional[datetime] = None) -> int:
        used = 0 if is_new_week(team.last_pickup_reset, now) else team.weekly_pickups
        return max(0, self.weekly_pickup_limit - used)

    def add_to_bench(self, team_id: str, player_id: str, now: Optional[datetime] = None) -> RosterResult:
        """
        Pick up a free agent onto the bench.

        New acquisitions never go straight into an active slot; the owner
        moves them with move_to_slot. Consumes one weekly pickup.

        Rejections: PICKUP_LIMIT_REACHED, UNKNOWN_PLAYER, ALREADY_ROSTERED
        """
        now = now or datetime.now()
        team = self.store.get_team(team_id)
        self.reset_pickups_if_new_week(team, now)

        if team.weekly_pickups >= self.weekly_pickup_limit:
            return _reject(
                RosterRejection.PICKUP_LIMIT_REACHED,
                f'{team.name} has used {team.weekly_pickups}/{self.weekly_pickup_limit} pickups this week',
                team,
            )

        player = self.store.get_player(team.tournament_id, player_id)
        if player is None:
            return _reject(RosterRejection.UNKNOWN_PLAYER, f'Unknown player {player_id}', team)

        for other in self.store.get_teams_for_league(team.league_id):
            if other.entry_for(player_id) is not None:
                return _reject(
                    RosterRejection.ALREADY_ROSTERED,
                    f'{player.name} is already on {other.name}',
                    team,
                )

        team.roster.append(
            RosterEntry(player_id=player_id, slot=Slot.BENCH, acquired_via='free_agency', acquired_at=now)
        )
        team.weekly_pickups += 1
        self.store.update_team_roster(team)

        logger.info(
            f'{team.name}: picked up {player.name} '
            f'({team.weekly_pickups}/{self.weekly_pickup_limit} this week)'
        )
        return RosterResult(accepted=True, team=team, message=f'{player.name} added to bench')

    def move_to_slot(self, team_id: str, player_id: str, target_slot: Slot) -> RosterResult:
        """
        Move a rostered player into another slot.

        Rejections: NOT_ON_ROSTER, INCOMPATIBLE_SLOT, SLOT_FULL
        """
        target_slot = Slot(target_slot)
        team = self.store.get_team(team_id)
        entry = team.entry_for(player_id)
        if entry is None:
            return _reject(RosterRejection.NOT_ON_ROSTER, f'{player_id} is not on {team.name}', team)

        player = self.store.get_player(team.tournament_id, player_id)
        if player is None:
            return _reject(RosterRejection.UNKNOWN_PLAYER, f'Unknown player {player_id}', team)

        if not can_place(player.position, target_slot):
            return _reject(
                RosterRejection.INCOMPATIBLE_SLOT,
                f'A {player.position.value} cannot play in {target_slot.value}',
                team,
            )

        if Slot(entry.slot) == target_slot:
            return RosterResult(accepted=True, team=team, message=f'{player.name} already in {target_slot.value}')

        if not has_room(target_slot, slot_counts(team.roster), self.capacities):
            return _reject(RosterRejection.SLOT_FULL, f'{target_slot.value} is full on {team.name}', team)

        entry.slot = target_slot
        self.store.update_team_roster(team)
        logger.info(f'{team.name}: moved {player.name} to {target_slot.value}')
        return RosterResult(accepted=True, team=team, message=f'{player.name} moved to {target_slot.value}')

    def drop(self, team_id: str, player_id: str) -> RosterResult:
        """Release a player back to the free-agent pool."""
        team = self.store.get_team(team_id)
        before = len(team.roster)
        team.roster = [e for e in team.roster if e.player_id != player_id]
        if len(team.roster) == before:
            return RosterResult(accepted=True, team=team, message=f'{player_id} was not on the roster')

        self.store.update_team_roster(team)
        logger.info(f'{team.name}: dropped {player_id}')
        return RosterResult(accepted=True, team=team, message=f'{player_id} dropped')

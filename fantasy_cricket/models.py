"""Data models for the fantasy cricket league manager."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple


class Position(str, Enum):
    BATTER = 'batter'
    KEEPER = 'keeper'
    BOWLER = 'bowler'
    ALLROUNDER = 'allrounder'


class Slot(str, Enum):
    BATTERS = 'batters'
    KEEPERS = 'keepers'
    BOWLERS = 'bowlers'
    FLEX = 'flex'
    BENCH = 'bench'


class DraftStatus(str, Enum):
    PENDING = 'pending'
    OPEN = 'open'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'


class PickRejection(str, Enum):
    """Reasons a draft pick or draft transition is refused."""
    DRAFT_NOT_ACTIVE = 'draft_not_active'
    NOT_YOUR_TURN = 'not_your_turn'
    ALREADY_TAKEN = 'already_taken'
    NO_SLOT = 'no_slot'
    UNKNOWN_PLAYER = 'unknown_player'
    INVALID_STATE = 'invalid_state'
    NOT_ENOUGH_PARTICIPANTS = 'not_enough_participants'
    EMPTY_ORDER = 'empty_order'


class RosterRejection(str, Enum):
    """Reasons a roster operation is refused."""
    PICKUP_LIMIT_REACHED = 'pickup_limit_reached'
    ALREADY_ROSTERED = 'already_rostered'
    NOT_ON_ROSTER = 'not_on_roster'
    INCOMPATIBLE_SLOT = 'incompatible_slot'
    SLOT_FULL = 'slot_full'
    UNKNOWN_PLAYER = 'unknown_player'


@dataclass
class Player:
    """A real cricketer available in a tournament's player pool."""
    id: str
    name: str
    team: str
    position: Position
    total_points: int = 0
    matches_played: int = 0


@dataclass
class RosterEntry:
    """One player on a fantasy team, tagged with exactly one slot."""
    player_id: str
    slot: Slot
    acquired_via: str = 'draft'  # 'draft' or 'free_agency'
    acquired_at: Optional[datetime] = None


@dataclass
class Team:
    """A fantasy team (draft participant)."""
    id: str
    name: str
    owner: str
    user_id: str
    tournament_id: str
    league_id: str
    draft_position: int = 0
    weekly_pickups: int = 0
    last_pickup_reset: Optional[datetime] = None
    total_points: int = 0
    roster: List[RosterEntry] = field(default_factory=list)

    def entry_for(self, player_id: str) -> Optional[RosterEntry]:
        return next((e for e in self.roster if e.player_id == player_id), None)


@dataclass(frozen=True)
class DraftOrderEntry:
    pick_number: int  # 1-based
    round: int
    participant_id: str


@dataclass(frozen=True)
class DraftPick:
    pick_number: int
    round: int
    participant_id: str
    player_id: str
    slot: Slot
    timestamp: datetime


@dataclass
class LeagueDraftState:
    """Authoritative draft session for a league."""
    league_id: str
    tournament_id: str
    status: DraftStatus = DraftStatus.PENDING
    current_pick: int = 0  # count of committed picks
    rounds: int = 0
    session: int = 0  # bumped each time a draft starts
    draft_order: List[DraftOrderEntry] = field(default_factory=list)

    @property
    def total_picks(self) -> int:
        return len(self.draft_order)

    def on_the_clock(self) -> Optional[DraftOrderEntry]:
        """Order entry whose turn it is, or None when no pick is due."""
        if self.status != DraftStatus.IN_PROGRESS:
            return None
        if 0 <= self.current_pick < len(self.draft_order):
            return self.draft_order[self.current_pick]
        return None


@dataclass
class MatchPerformance:
    """Raw statistics for one player in one match.

    Every count defaults to zero. strike_rate, economy_rate and runs_conceded
    default to None meaning "not supplied".
    """
    player_name: str = ''
    player_id: Optional[str] = None
    runs: int = 0
    balls_faced: int = 0
    strike_rate: Optional[float] = None
    wickets: int = 0
    overs_bowled: float = 0.0
    runs_conceded: Optional[int] = None
    economy_rate: Optional[float] = None
    maidens: int = 0
    catches: int = 0
    run_outs: int = 0
    stumpings: int = 0
    is_keeper: bool = False


@dataclass
class PointsResult:
    """Fantasy points for one performance with a display breakdown."""
    total: int = 0
    breakdown: List[Tuple[str, int]] = field(default_factory=list)


@dataclass
class PickResult:
    accepted: bool
    pick: Optional[DraftPick] = None
    rejection: Optional[PickRejection] = None
    message: str = ''


@dataclass
class DraftResult:
    accepted: bool
    state: Optional[LeagueDraftState] = None
    rejection: Optional[PickRejection] = None
    message: str = ''


@dataclass
class RosterResult:
    accepted: bool
    team: Optional[Team] = None
    rejection: Optional[RosterRejection] = None
    message: str = ''

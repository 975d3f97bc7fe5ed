from .models import (
    Position,
    Slot,
    DraftStatus,
    PickRejection,
    RosterRejection,
    Player,
    Team,
    RosterEntry,
    DraftPick,
    DraftOrderEntry,
    LeagueDraftState,
    MatchPerformance,
    PointsResult,
    PickResult,
    DraftResult,
    RosterResult,
)
from .snake_order import generate_draft_order, participant_for_pick
from .slots import NO_SLOT, best_slot, can_place, compatible_slots, slot_counts
from .scoring import score_performance, score_batting, score_bowling, score_fielding
from .draft import DraftStateMachine
from .sync import DraftSyncClient, SyncUpdate
from .roster import RosterManager, is_new_week, team_points
from .store import JsonLeagueStore, LeagueStore
from .live_scoring import (
    CricketDataClient,
    parse_scorecard,
    performance_from_stats,
    preview_scorecard,
    apply_points,
)

__all__ = [
    # Models
    'Position',
    'Slot',
    'DraftStatus',
    'PickRejection',
    'RosterRejection',
    'Player',
    'Team',
    'RosterEntry',
    'DraftPick',
    'DraftOrderEntry',
    'LeagueDraftState',
    'MatchPerformance',
    'PointsResult',
    'PickResult',
    'DraftResult',
    'RosterResult',
    # Draft order and slots
    'generate_draft_order',
    'participant_for_pick',
    'NO_SLOT',
    'best_slot',
    'can_place',
    'compatible_slots',
    'slot_counts',
    # Scoring
    'score_performance',
    'score_batting',
    'score_bowling',
    'score_fielding',
    # Draft engine
    'DraftStateMachine',
    'DraftSyncClient',
    'SyncUpdate',
    # Rosters
    'RosterManager',
    'is_new_week',
    'team_points',
    # Storage
    'JsonLeagueStore',
    'LeagueStore',
    # Live scoring
    'CricketDataClient',
    'parse_scorecard',
    'performance_from_stats',
    'preview_scorecard',
    'apply_points',
]

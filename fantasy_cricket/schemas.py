"""Pydantic schemas for JSON data validation."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

VALID_SLOTS = {'batters', 'keepers', 'bowlers', 'flex', 'bench'}


class PlayerRecord(BaseModel):
    """Player in a tournament pool."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    team: str = ''
    position: str = Field(..., pattern=r'^(batter|keeper|bowler|allrounder)$')
    total_points: int = 0
    matches_played: int = Field(default=0, ge=0)

    class Config:
        extra = 'forbid'


class PlayersFile(BaseModel):
    """Complete players/<tournament>.json file structure."""

    tournament_id: str
    players: list[PlayerRecord] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class RosterEntryRecord(BaseModel):
    """Roster entry on a fantasy team."""

    player_id: str = Field(..., min_length=1)
    slot: str = Field(..., pattern=r'^(batters|keepers|bowlers|flex|bench)$')
    acquired_via: str = Field(default='draft', pattern=r'^(draft|free_agency)$')
    acquired_at: str | None = None

    class Config:
        extra = 'forbid'


class TeamRecord(BaseModel):
    """Fantasy team metadata and roster."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    owner: str = ''
    user_id: str = Field(..., min_length=1)
    tournament_id: str = Field(..., min_length=1)
    league_id: str = Field(..., min_length=1)
    draft_position: int = Field(default=0, ge=0)
    weekly_pickups: int = Field(default=0, ge=0)
    last_pickup_reset: str | None = None
    total_points: int = 0
    roster: list[RosterEntryRecord] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class TeamsFile(BaseModel):
    """Complete teams.json file structure."""

    teams: list[TeamRecord] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class DraftOrderRecord(BaseModel):
    """One slot in the precomputed draft order."""

    pick_number: int = Field(..., ge=1)
    round: int = Field(..., ge=1)
    participant_id: str

    class Config:
        extra = 'forbid'


class LeagueRecord(BaseModel):
    """League draft session."""

    league_id: str = Field(..., min_length=1)
    tournament_id: str = Field(..., min_length=1)
    draft_status: str = Field(default='pending', pattern=r'^(pending|open|in_progress|completed)$')
    current_pick: int = Field(default=0, ge=0)
    rounds: int = Field(default=0, ge=0)
    session: int = Field(default=0, ge=0)
    draft_order: list[DraftOrderRecord] = Field(default_factory=list)

    @field_validator('draft_order')
    @classmethod
    def validate_order_numbering(cls, v):
        """Ensure pick numbers run 1..N without gaps."""
        for idx, entry in enumerate(v, start=1):
            if entry.pick_number != idx:
                raise ValueError(f'Draft order pick {entry.pick_number} found at position {idx}')
        return v

    class Config:
        extra = 'forbid'


class LeaguesFile(BaseModel):
    """Complete leagues.json file structure."""

    leagues: list[LeagueRecord] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class DraftPickRecord(BaseModel):
    """Committed draft pick."""

    pick_number: int = Field(..., ge=1)
    round: int = Field(..., ge=1)
    participant_id: str
    player_id: str
    slot: str = Field(..., pattern=r'^(batters|keepers|bowlers|flex|bench)$')
    timestamp: str

    class Config:
        extra = 'forbid'


class DraftPicksFile(BaseModel):
    """Complete draft_picks/<league>.json file structure."""

    league_id: str
    picks: list[DraftPickRecord] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class MatchStatRecord(BaseModel):
    """Points one player earned in one applied match."""

    player_id: str
    player_name: str
    points: int
    breakdown: list[tuple[str, int]] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class MatchStatsFile(BaseModel):
    """Complete match_stats/<tournament>/<match_id>.json file structure."""

    tournament_id: str = Field(..., min_length=1)
    match_id: str = Field(..., min_length=1)
    applied_at: str
    players: list[MatchStatRecord] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class ManualStatsFile(BaseModel):
    """Hand-entered scorecard: player name -> stat line."""

    players: dict[str, dict[str, Any]] = Field(default_factory=dict)

    class Config:
        extra = 'forbid'


class LeagueConfig(BaseModel):
    """League configuration settings."""

    slot_capacity: dict[str, int | None]
    roster_size: int = Field(..., ge=1, le=30)
    weekly_pickup_limit: int = Field(..., ge=0, le=20)
    poll_interval_seconds: float = Field(..., gt=0, le=60)
    cricket_api_base: str = 'https://api.cricapi.com/v1'

    @field_validator('slot_capacity')
    @classmethod
    def validate_slot_capacity(cls, v):
        """Ensure all slots are known and capacities are sane."""
        for slot, capacity in v.items():
            if slot not in VALID_SLOTS:
                raise ValueError(f'Invalid slot: {slot}')
            if capacity is not None and (capacity < 0 or capacity > 20):
                raise ValueError(f'Invalid capacity for {slot}: {capacity}')
        return v

    class Config:
        extra = 'forbid'

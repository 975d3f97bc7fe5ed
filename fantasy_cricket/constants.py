"""Constants and rule tables for the fantasy cricket league manager."""

from .models import Position, Slot

# Maximum players per slot. None means unbounded.
SLOT_CAPACITY = {
    Slot.BATTERS: 5,
    Slot.KEEPERS: 1,
    Slot.BOWLERS: 5,
    Slot.FLEX: 1,
    Slot.BENCH: None,
}

# Slots a position may occupy, in preference order. Flex always comes last
# so it is only used once the primary slots are full.
POSITION_COMPATIBILITY = {
    Position.BATTER: (Slot.BATTERS, Slot.FLEX),
    Position.KEEPER: (Slot.BATTERS, Slot.KEEPERS, Slot.FLEX),
    Position.BOWLER: (Slot.BOWLERS, Slot.FLEX),
    Position.ALLROUNDER: (Slot.BATTERS, Slot.BOWLERS, Slot.FLEX),
}

# Slots whose players contribute to a team's score
PLAYING_SLOTS = (Slot.BATTERS, Slot.KEEPERS, Slot.BOWLERS, Slot.FLEX)

# Playing slots only: 5 + 1 + 5 + 1
ROSTER_SIZE = 12

WEEKLY_PICKUP_LIMIT = 4

POLL_INTERVAL_SECONDS = 3.0

# Batting
RUN_POINTS = 1
MIN_RUNS_FOR_SR_BONUS = 20
# (minimum strike rate, bonus), highest threshold first
STRIKE_RATE_BONUS = [
    (160, 25),
    (150, 20),
    (140, 15),
    (130, 10),
    (120, 5),
]

# Bowling
WICKET_POINTS = 25
MAIDEN_POINTS = 20
MIN_OVERS_FOR_ER_BONUS = 3
# (maximum economy rate, bonus), lowest threshold first
ECONOMY_RATE_BONUS = [
    (5, 25),
    (6, 20),
    (7, 15),
    (8, 10),
]

# Fielding
CATCH_POINTS = 12
RUN_OUT_POINTS = 20
STUMPING_POINTS = 15

CRICKET_API_BASE = 'https://api.cricapi.com/v1'

"""League configuration management."""

import logging
import os
from functools import lru_cache
from pathlib import Path

from .constants import (
    CRICKET_API_BASE,
    POLL_INTERVAL_SECONDS,
    ROSTER_SIZE,
    SLOT_CAPACITY,
    WEEKLY_PICKUP_LIMIT,
)
from .models import Slot
from .schemas import LeagueConfig
from .utils import load_json

logger = logging.getLogger('fantasy_cricket.config')

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / 'data' / 'league_config.json'


def _default_config() -> LeagueConfig:
    return LeagueConfig(
        slot_capacity={slot.value: capacity for slot, capacity in SLOT_CAPACITY.items()},
        roster_size=ROSTER_SIZE,
        weekly_pickup_limit=WEEKLY_PICKUP_LIMIT,
        poll_interval_seconds=POLL_INTERVAL_SECONDS,
        cricket_api_base=CRICKET_API_BASE,
    )


@lru_cache(maxsize=1)
def get_config() -> LeagueConfig:
    """
    Load league configuration.

    Reads the file named by the FANTASY_CRICKET_CONFIG environment variable,
    or data/league_config.json next to the package. Built-in defaults are used
    when neither exists. Configuration is cached after first load.

    Raises:
        ValueError: If the config file has invalid structure

    Example:
        from fantasy_cricket.config import get_config
        config = get_config()
        print(f"Pickups per week: {config.weekly_pickup_limit}")
    """
    config_path = Path(os.environ.get('FANTASY_CRICKET_CONFIG', DEFAULT_CONFIG_PATH))
    logger.debug(f'Loading league config from {config_path}')
    return load_json(config_path, schema=LeagueConfig, default=_default_config)


def get_slot_capacity() -> dict[Slot, int | None]:
    """Get maximum players per slot; slots missing from the file keep their default."""
    configured = get_config().slot_capacity
    capacity = dict(SLOT_CAPACITY)
    for slot_name, value in configured.items():
        capacity[Slot(slot_name)] = value
    return capacity


def get_roster_size() -> int:
    """Get the number of draft rounds (one player per round per team)."""
    return get_config().roster_size


def get_weekly_pickup_limit() -> int:
    return get_config().weekly_pickup_limit


def get_poll_interval() -> float:
    return get_config().poll_interval_seconds


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime
    and you need to reload it.
    """
    get_config.cache_clear()

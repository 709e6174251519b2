"""
Engine configuration parameters for slotbid.

Defines auction policy (bid increments, winner limits) and allocation defaults.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "SLOTBID_"


@dataclass
class EngineConfig:
    """Engine-wide configuration parameters"""

    # Allocation parameters
    default_total_duration: int = 3600  # Fallback artifact length in seconds

    # Bidding parameters
    min_bid_increment: int = 1  # A bid must reach current price + increment
    max_winners_limit: int = 100  # Upper bound on maxWinners at listing time

    def __post_init__(self):
        """Reject nonsensical policy values"""
        if self.default_total_duration < 1:
            raise ValueError("default_total_duration must be >= 1")
        if self.min_bid_increment < 1:
            raise ValueError("min_bid_increment must be >= 1")
        if self.max_winners_limit < 1:
            raise ValueError("max_winners_limit must be >= 1")


# Global config instance (can be overridden)
config = EngineConfig()


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}")


def load_config(env_file: Optional[str] = None) -> EngineConfig:
    """
    Load configuration from the environment.

    Variables are read with the SLOTBID_ prefix (SLOTBID_DEFAULT_TOTAL_DURATION,
    SLOTBID_MIN_BID_INCREMENT, SLOTBID_MAX_WINNERS_LIMIT). Values from a .env
    file fill in anything not already set in the process environment.

    Args:
        env_file: Optional path to a .env file

    Returns:
        EngineConfig instance
    """
    if env_file:
        load_dotenv(env_file, override=False)

    defaults = EngineConfig()
    return EngineConfig(
        default_total_duration=_env_int("DEFAULT_TOTAL_DURATION", defaults.default_total_duration),
        min_bid_increment=_env_int("MIN_BID_INCREMENT", defaults.min_bid_increment),
        max_winners_limit=_env_int("MAX_WINNERS_LIMIT", defaults.max_winners_limit),
    )

"""Game configuration."""

from typing import Optional
from pydantic import BaseModel, Field

from nightfall.models.player import RoleConfig, STANDARD_6_PLAYER_CONFIG


DEFAULT_PLAYER_COUNT = 6
DEFAULT_HUMAN_NAME = "Visitor"
DEFAULT_AI_NAMES = ["Alex", "Billy", "Chris", "Danny", "Emerson"]

# Durations are measured in time units; see GameConfig.time_unit
DEFAULT_DAY_DURATION = 180
DEFAULT_DISCUSSION_INTERVAL = 15

# Seconds
DEFAULT_TIME_UNIT = 1.0
DEFAULT_AI_TIMEOUT = 30.0


class GameConfig(BaseModel):
    """Settings for a game session.

    time_unit scales every timer in the engine, so tests can run a full
    day in milliseconds by passing a tiny value.
    """

    player_count: int = DEFAULT_PLAYER_COUNT
    roles: list[RoleConfig] = Field(default_factory=lambda: list(STANDARD_6_PLAYER_CONFIG))
    human_name: str = DEFAULT_HUMAN_NAME
    ai_names: list[str] = Field(default_factory=lambda: list(DEFAULT_AI_NAMES))
    include_human: bool = True

    day_duration: int = Field(default=DEFAULT_DAY_DURATION, gt=0)
    discussion_interval: int = Field(default=DEFAULT_DISCUSSION_INTERVAL, gt=0)
    time_unit: float = Field(default=DEFAULT_TIME_UNIT, gt=0)
    ai_timeout: Optional[float] = DEFAULT_AI_TIMEOUT

    seed: Optional[int] = None

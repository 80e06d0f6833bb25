"""Player and Role models."""

from enum import Enum
from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    """Player roles in the game."""

    WEREWOLF = "werewolf"
    VILLAGER = "villager"
    SEER = "seer"
    KNIGHT = "knight"
    MEDIUM = "medium"


class Faction(str, Enum):
    """Winning sides."""

    VILLAGERS = "villagers"
    WEREWOLVES = "werewolves"


class Player(BaseModel):
    """Represents a player in the game.

    Uses id (int) as primary identifier; the id also equals the seat index
    for rosters built by the engine. Name is stored for display purposes.
    """

    id: int
    name: str
    role: Role
    is_ai: bool = True
    is_alive: bool = True
    is_protected: bool = False  # Cleared at the end of every night

    @property
    def faction(self) -> Faction:
        """Faction the player wins with."""
        if self.role == Role.WEREWOLF:
            return Faction.WEREWOLVES
        return Faction.VILLAGERS

    @property
    def is_werewolf(self) -> bool:
        return self.role == Role.WEREWOLF


class RoleConfig(BaseModel):
    """Role configuration for game setup."""

    role: Role
    count: int = 0
    description: str = ""

    model_config = ConfigDict(use_enum_values=True)


# Canonical 6-player game configuration
STANDARD_6_PLAYER_CONFIG = [
    RoleConfig(role=Role.WEREWOLF, count=2, description="Kill villagers at night, blend in by day"),
    RoleConfig(role=Role.VILLAGER, count=1, description="Find the werewolves and vote them out"),
    RoleConfig(role=Role.SEER, count=1, description="Learn whether a player is a werewolf each night"),
    RoleConfig(role=Role.KNIGHT, count=1, description="Protect one player from the werewolves each night"),
    RoleConfig(role=Role.MEDIUM, count=1, description="Learn the true role of each banished player"),
]


def build_role_pool(configs: list[RoleConfig]) -> list[Role]:
    """Expand role configs into a flat, unshuffled list of roles."""
    roles: list[Role] = []
    for role_config in configs:
        roles.extend([Role(role_config.role)] * role_config.count)
    return roles

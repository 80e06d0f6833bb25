"""Models package."""

from nightfall.models.player import (
    Role,
    Faction,
    Player,
    RoleConfig,
    STANDARD_6_PLAYER_CONFIG,
    build_role_pool,
)

__all__ = [
    "Role",
    "Faction",
    "Player",
    "RoleConfig",
    "STANDARD_6_PLAYER_CONFIG",
    "build_role_pool",
]

"""Victory check.

- Villagers win when no werewolf is alive
- Werewolves win when living werewolves are at least as many as everyone else
"""

from typing import Optional, Sequence

from nightfall.models.player import Faction, Player, Role


def check_winner(players: Sequence[Player]) -> Optional[Faction]:
    """Check if the game has ended and return the winning faction.

    Args:
        players: All players, alive or dead.

    Returns:
        Faction.VILLAGERS, Faction.WEREWOLVES, or None while the game goes on.
    """
    werewolf_count = sum(1 for p in players if p.is_alive and p.role == Role.WEREWOLF)
    others_count = sum(1 for p in players if p.is_alive and p.role != Role.WEREWOLF)

    if werewolf_count == 0:
        return Faction.VILLAGERS
    if werewolf_count >= others_count:
        return Faction.WEREWOLVES
    return None

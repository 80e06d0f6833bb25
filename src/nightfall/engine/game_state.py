"""Game state for a Nightfall session."""

from typing import Optional
from pydantic import BaseModel, Field

from nightfall.events.game_events import Phase
from nightfall.models.player import Faction, Player, Role


class GameState(BaseModel):
    """Represents the current state of the game.

    Players are kept in seat order. Ids are stable for the whole session.
    Only the engine mutates a GameState; everything handed to the UI or to
    AI collaborators is a copy.
    """

    phase: Phase = Phase.SETUP
    players: list[Player] = Field(default_factory=list)
    day_number: int = 1
    winner: Optional[Faction] = None
    selected_player_id: Optional[int] = None  # UI targeting aid only
    game_started: bool = False
    votes: dict[int, int] = Field(default_factory=dict)  # voter id -> target id

    def get_player(self, player_id: Optional[int]) -> Optional[Player]:
        """Get player by id.

        Args:
            player_id: The player's id

        Returns:
            Player if found, None otherwise
        """
        if player_id is None:
            return None
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    @property
    def alive_players(self) -> list[Player]:
        return get_alive_players(self.players)

    @property
    def dead_players(self) -> list[Player]:
        return get_dead_players(self.players)

    @property
    def werewolves(self) -> list[Player]:
        """Living werewolves."""
        return get_werewolves(self.players)

    @property
    def villagers(self) -> list[Player]:
        """Living non-werewolves."""
        return get_villagers(self.players)

    @property
    def human_player(self) -> Optional[Player]:
        return get_human_player(self.players)

    @property
    def is_game_over(self) -> bool:
        return self.phase == Phase.GAME_OVER


def get_human_player(players: list[Player]) -> Optional[Player]:
    """Get the first non-AI player, or None."""
    for player in players:
        if not player.is_ai:
            return player
    return None


def get_alive_players(players: list[Player]) -> list[Player]:
    return [p for p in players if p.is_alive]


def get_dead_players(players: list[Player]) -> list[Player]:
    return [p for p in players if not p.is_alive]


def get_werewolves(players: list[Player]) -> list[Player]:
    """Get all living werewolves."""
    return [p for p in players if p.role == Role.WEREWOLF and p.is_alive]


def get_villagers(players: list[Player]) -> list[Player]:
    """Get all living non-werewolf players."""
    return [p for p in players if p.role != Role.WEREWOLF and p.is_alive]

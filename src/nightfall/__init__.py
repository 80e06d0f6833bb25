"""Nightfall - a Werewolf game where one human plays against AI opponents."""

# The engine is loaded first so the handlers always find it fully initialized
from nightfall.engine import GameSetupError, GameState, WerewolfGame
from nightfall.config import GameConfig
from nightfall.events import ActionType, GameAction, GameMessage, MessageKind, Phase
from nightfall.models import Faction, Player, Role, RoleConfig
from nightfall.ai import DecisionContext, DecisionProvider, PlayerView, StubDecisionProvider

__all__ = [
    "WerewolfGame",
    "GameConfig",
    "GameSetupError",
    "GameState",
    "ActionType",
    "GameAction",
    "GameMessage",
    "MessageKind",
    "Phase",
    "Faction",
    "Player",
    "Role",
    "RoleConfig",
    "DecisionContext",
    "DecisionProvider",
    "PlayerView",
    "StubDecisionProvider",
]

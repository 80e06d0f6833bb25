"""Engine package - game orchestration components."""

from .errors import GameSetupError, SetupViolation
from .game_state import (
    GameState,
    get_alive_players,
    get_dead_players,
    get_human_player,
    get_villagers,
    get_werewolves,
)
from .roster import HUMAN_SEAT, create_players, validate_players, validate_roster
from .night_action_queue import NightActionQueue
from .night_action_resolver import (
    Investigation,
    NightActionResolver,
    NightResolution,
    Protection,
    resolve_night,
)
from .vote_resolver import VoteResolution, VoteResolver, resolve_votes
from .victory import check_winner
from .phase_machine import (
    NIGHT_ACTIONS,
    PhaseMachine,
    PhaseTransition,
    eligible_targets,
    has_night_action,
    human_can_act,
    night_action_for,
)
from .timers import Countdown, PeriodicTask
# Imported last: the facade depends on the handlers, which depend on the modules above
from .werewolf_game import WerewolfGame

__all__ = [
    "GameSetupError",
    "SetupViolation",
    "GameState",
    "get_alive_players",
    "get_dead_players",
    "get_human_player",
    "get_villagers",
    "get_werewolves",
    "HUMAN_SEAT",
    "create_players",
    "validate_players",
    "validate_roster",
    "NightActionQueue",
    "Investigation",
    "NightActionResolver",
    "NightResolution",
    "Protection",
    "resolve_night",
    "VoteResolution",
    "VoteResolver",
    "resolve_votes",
    "check_winner",
    "NIGHT_ACTIONS",
    "PhaseMachine",
    "PhaseTransition",
    "eligible_targets",
    "has_night_action",
    "human_can_act",
    "night_action_for",
    "Countdown",
    "PeriodicTask",
    "WerewolfGame",
]

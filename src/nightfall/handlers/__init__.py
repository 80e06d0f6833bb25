"""AI turn handlers: query the decision provider and validate its answers."""

from nightfall.handlers.base import (
    TurnHandler,
    build_context,
    player_views,
    query_provider,
)
from nightfall.handlers.parsing import extract_answer, match_player_name
from .night_action_handler import NightActionHandler
from .voting_handler import VotingHandler
from .discussion_handler import DiscussionHandler, DEFAULT_UTTERANCE

__all__ = [
    # Common helpers
    "TurnHandler",
    "build_context",
    "player_views",
    "query_provider",
    "extract_answer",
    "match_player_name",
    # Handlers
    "NightActionHandler",
    "VotingHandler",
    "DiscussionHandler",
    "DEFAULT_UTTERANCE",
]

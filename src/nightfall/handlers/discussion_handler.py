"""Discussion handler - one AI speaking turn during the day."""

import logging
from typing import Optional, Sequence

from nightfall.engine.game_state import GameState
from nightfall.events.game_events import GameMessage
from nightfall.handlers.base import (
    TurnHandler,
    build_context,
    player_views,
    query_provider,
)
from nightfall.models.player import Player


logger = logging.getLogger(__name__)

DEFAULT_UTTERANCE = "I have nothing to say."

# Only the most recent speeches are offered to the speaker selector
SPEAKER_CONTEXT_MESSAGES = 5


class DiscussionHandler(TurnHandler):
    """Handler for the day discussion.

    A speaking turn has two steps:
    1. choose_speaker: ask the provider who talks next (living AIs only)
    2. speak: ask the provider for that player's utterance

    Context Filtering:
    - The speaker selector sees public messages and no roles
    - The speaker sees the messages visible to them and their own role
    """

    async def choose_speaker(
        self,
        state: GameState,
        messages: Sequence[GameMessage],
    ) -> Optional[Player]:
        """Pick the next AI speaker.

        Returns:
            A living AI player, or None if no AI can speak
        """
        speakers = [p for p in state.players if p.is_alive and p.is_ai]
        if not speakers:
            return None

        public_speeches = [m for m in messages if m.is_speech and m.is_visible_to(None)]
        raw = await query_provider(
            lambda: self.provider.choose_next_speaker(
                player_views(state.players),
                public_speeches[-SPEAKER_CONTEXT_MESSAGES:],
                state.day_number,
            ),
            self.timeout,
            "next speaker decision",
        )
        return self.resolve_target(raw, speakers, "next speaker decision")

    async def speak(
        self,
        speaker: Player,
        state: GameState,
        messages: Sequence[GameMessage],
    ) -> str:
        """Generate one utterance for a speaker.

        Returns:
            The utterance, or DEFAULT_UTTERANCE if the provider gave nothing usable
        """
        context = build_context(speaker, state, messages)
        raw = await query_provider(
            lambda: self.provider.generate_utterance(speaker.model_copy(), context),
            self.timeout,
            f"utterance for {speaker.name}",
        )
        if not isinstance(raw, str) or not raw.strip():
            return DEFAULT_UTTERANCE
        return raw.strip()

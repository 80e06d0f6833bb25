"""Stub AI implementation for testing and offline play.

The stub generates valid random decisions without calling a language model.
Useful for:
- Integration tests (full game flow without LLM calls)
- The console driver's default opponents
- Fallback when no model is configured
"""

import random
from typing import Optional, Sequence

from nightfall.ai.base import DecisionContext, PlayerView
from nightfall.events.game_events import ActionType, GameMessage
from nightfall.models.player import Player, Role


STUB_LINES = [
    "I slept badly last night. Something feels off.",
    "{target}, you have been very quiet. What are you hiding?",
    "I trust {target} for now, but I am watching everyone.",
    "We should vote carefully. A wrong banishment helps the wolves.",
    "Does anyone have information they want to share?",
    "My gut says {target} is not telling us everything.",
]


class StubDecisionProvider:
    """A stub AI that answers every decision with a random valid choice.

    Targets are picked from context.valid_targets, so answers are always
    accepted by the engine. A werewolf never votes against a packmate when
    another choice exists.
    """

    def __init__(self, seed: Optional[int] = None):
        """Initialize stub provider with optional random seed."""
        self._rng = random.Random(seed)

    async def choose_vote_target(
        self,
        actor: Player,
        context: DecisionContext,
    ) -> Optional[str]:
        candidates = list(context.valid_targets)
        if actor.role == Role.WEREWOLF:
            packmates = {p.name for p in context.players if p.role == Role.WEREWOLF}
            preferred = [name for name in candidates if name not in packmates]
            candidates = preferred or candidates
        return self._pick(candidates)

    async def choose_night_action_target(
        self,
        actor: Player,
        action_type: ActionType,
        context: DecisionContext,
    ) -> Optional[str]:
        return self._pick(context.valid_targets)

    async def choose_next_speaker(
        self,
        players: Sequence[PlayerView],
        messages: Sequence[GameMessage],
        day: int,
    ) -> Optional[str]:
        speakers = [p.name for p in players if p.is_alive and p.is_ai]
        # Avoid letting the last speaker talk twice in a row
        last = next((m.player_name for m in reversed(messages) if m.is_speech), None)
        others = [name for name in speakers if name != last]
        return self._pick(others or speakers)

    async def generate_utterance(
        self,
        actor: Player,
        context: DecisionContext,
    ) -> str:
        others = [p.name for p in context.players if p.is_alive and p.id != actor.id]
        line = self._rng.choice(STUB_LINES)
        return line.format(target=self._pick(others) or "someone")

    def _pick(self, options: Sequence[str]) -> Optional[str]:
        if not options:
            return None
        return self._rng.choice(list(options))


def create_stub_provider(seed: Optional[int] = None) -> StubDecisionProvider:
    """Create a stub provider with optional random seed."""
    return StubDecisionProvider(seed=seed)

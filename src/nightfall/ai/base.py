"""Decision provider protocol - the interface to AI opponents.

Providers return raw names or text. The engine's handlers are responsible
for validating every answer and falling back when it is unusable.
"""

from typing import Optional, Protocol, Sequence
from pydantic import BaseModel, Field

from nightfall.events.game_events import ActionType, GameMessage, Phase
from nightfall.models.player import Player, Role


class PlayerView(BaseModel):
    """A player as seen by someone else. role is None unless known to the viewer."""

    id: int
    name: str
    is_alive: bool
    is_ai: bool
    role: Optional[Role] = None


class DecisionContext(BaseModel):
    """What an AI player is allowed to know when deciding.

    players hides every role the actor does not know (werewolves know their
    packmates), messages only contains the log entries visible to the
    actor, and valid_targets lists the names the engine will accept.
    """

    actor_id: int
    phase: Phase
    day_number: int
    players: list[PlayerView] = Field(default_factory=list)
    messages: list[GameMessage] = Field(default_factory=list)
    valid_targets: list[str] = Field(default_factory=list)


class DecisionProvider(Protocol):
    """Source of AI decisions (language model, stub, scripted test double)."""

    async def choose_vote_target(
        self,
        actor: Player,
        context: DecisionContext,
    ) -> Optional[str]:
        """Return the name of the player to vote against."""
        ...

    async def choose_night_action_target(
        self,
        actor: Player,
        action_type: ActionType,
        context: DecisionContext,
    ) -> Optional[str]:
        """Return the name of the player to kill, protect, or investigate."""
        ...

    async def choose_next_speaker(
        self,
        players: Sequence[PlayerView],
        messages: Sequence[GameMessage],
        day: int,
    ) -> Optional[str]:
        """Return the name of the AI player who should speak next."""
        ...

    async def generate_utterance(
        self,
        actor: Player,
        context: DecisionContext,
    ) -> str:
        """Return what the actor says in the day discussion."""
        ...

"""Night action queue - holds submitted night actions until resolution."""

from typing import Optional
from pydantic import BaseModel, Field

from nightfall.events.game_events import ActionType, GameAction


class NightActionQueue(BaseModel):
    """Accumulates kill/protect/investigate actions for the current night.

    Queue order is significant: the night resolver breaks kill ties in
    favour of the target that was queued first. The queue is drained
    exactly once per night resolution.
    """

    actions: list[GameAction] = Field(default_factory=list)

    def queue(self, action: GameAction) -> None:
        """Append a night action.

        Raises:
            ValueError: If the action is a vote.
        """
        if not action.type.is_night_action:
            raise ValueError(f"Not a night action: {action.type.value}")
        self.actions.append(action)

    def has_action_from(self, player_id: int, action_type: Optional[ActionType] = None) -> bool:
        """Check whether a player already queued an action (of a given type)."""
        return any(
            a.player_id == player_id and (action_type is None or a.type == action_type)
            for a in self.actions
        )

    def drain(self) -> list[GameAction]:
        """Return every queued action and empty the queue."""
        drained = list(self.actions)
        self.actions = []
        return drained

    def clear(self) -> None:
        self.actions = []

    def __len__(self) -> int:
        return len(self.actions)

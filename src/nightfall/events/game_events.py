"""Phase, action and message types shared by the engine and its collaborators."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


SYSTEM_PLAYER_ID = -1
SYSTEM_PLAYER_NAME = "System"


class Phase(str, Enum):
    """Phases of the game, in the order they are first entered."""

    SETUP = "setup"
    FIRST_NIGHT = "first_night"
    DAY = "day"
    VOTING = "voting"
    NIGHT = "night"
    GAME_OVER = "game_over"

    @property
    def is_night(self) -> bool:
        return self in (Phase.FIRST_NIGHT, Phase.NIGHT)


class ActionType(str, Enum):
    """Kinds of actions a player can submit."""

    VOTE = "vote"
    KILL = "kill"
    PROTECT = "protect"
    INVESTIGATE = "investigate"

    @property
    def is_night_action(self) -> bool:
        return self != ActionType.VOTE


class MessageKind(str, Enum):
    """Kinds of chat log entries."""

    SYSTEM = "system"
    PLAYER = "player"  # Spoken by the human
    AI = "ai"  # Spoken by an AI player
    PRIVATE = "private"  # System notice for a single recipient


class GameAction(BaseModel):
    """An intent submitted by a player (vote or night action)."""

    type: ActionType
    player_id: Optional[int] = None  # None means the human player
    target_player_id: Optional[int] = None

    def __str__(self) -> str:
        target_str = f", target={self.target_player_id}" if self.target_player_id is not None else ""
        return f"{self.type.value}(actor={self.player_id}{target_str})"


class GameMessage(BaseModel):
    """A single append-only chat log entry. Entries are frozen.

    Messages with a recipient_id are only visible to that recipient,
    whatever their kind.
    """

    model_config = ConfigDict(frozen=True)

    kind: MessageKind
    content: str
    player_id: int = SYSTEM_PLAYER_ID
    player_name: str = SYSTEM_PLAYER_NAME
    recipient_id: Optional[int] = None
    timestamp: datetime = Field(default_factory=datetime.now)

    def is_visible_to(self, player_id: Optional[int]) -> bool:
        """Check whether a player may see this message.

        Args:
            player_id: The viewer's id, or None for a public-only view.
        """
        if self.recipient_id is None:
            return True
        return player_id is not None and self.recipient_id == player_id

    @property
    def is_speech(self) -> bool:
        return self.kind in (MessageKind.PLAYER, MessageKind.AI)

    def __str__(self) -> str:
        return f"{self.player_name}: {self.content}"

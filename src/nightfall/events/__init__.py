"""Events package."""

from nightfall.events.game_events import (
    SYSTEM_PLAYER_ID,
    SYSTEM_PLAYER_NAME,
    Phase,
    ActionType,
    MessageKind,
    GameAction,
    GameMessage,
)

from nightfall.events.message_log import (
    MessageLog,
    system_message,
    private_message,
    speech_message,
)

__all__ = [
    "SYSTEM_PLAYER_ID",
    "SYSTEM_PLAYER_NAME",
    # Enums
    "Phase",
    "ActionType",
    "MessageKind",
    # Payloads
    "GameAction",
    "GameMessage",
    # Log
    "MessageLog",
    "system_message",
    "private_message",
    "speech_message",
]

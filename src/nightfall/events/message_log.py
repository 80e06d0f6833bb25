"""MessageLog - the append-only chat log shared by the engine and the UI."""

from typing import Callable, Iterable, Optional

from nightfall.events.game_events import GameMessage, MessageKind
from nightfall.models.player import Player


def system_message(content: str, recipient_id: Optional[int] = None) -> GameMessage:
    """Create a system notice, optionally scoped to a single recipient."""
    return GameMessage(kind=MessageKind.SYSTEM, content=content, recipient_id=recipient_id)


def private_message(recipient_id: int, content: str) -> GameMessage:
    """Create a private notice for one player (e.g. a seer result)."""
    return GameMessage(kind=MessageKind.PRIVATE, content=content, recipient_id=recipient_id)


def speech_message(player: Player, content: str) -> GameMessage:
    """Create a chat line spoken by a player."""
    return GameMessage(
        kind=MessageKind.AI if player.is_ai else MessageKind.PLAYER,
        content=content,
        player_id=player.id,
        player_name=player.name,
    )


class MessageLog:
    """Collects chat and system messages in insertion order.

    Entries are never reordered or edited. The log is only emptied by
    clear(), which the engine calls when a new game is initialized.

    The log supports an optional callback that fires after each append:
        log = MessageLog(on_message=my_callback)
    """

    def __init__(self, on_message: Optional[Callable[[GameMessage], None]] = None):
        """Initialize the MessageLog.

        Args:
            on_message: Optional callback fired after each message is added.
        """
        self._messages: list[GameMessage] = []
        self._on_message = on_message

    def append(self, message: GameMessage) -> GameMessage:
        """Append a message and notify the listener."""
        self._messages.append(message)
        if self._on_message:
            self._on_message(message)
        return message

    def extend(self, messages: Iterable[GameMessage]) -> None:
        for message in messages:
            self.append(message)

    def add_system_message(self, content: str) -> GameMessage:
        return self.append(system_message(content))

    def add_player_message(self, player: Player, content: str) -> GameMessage:
        return self.append(speech_message(player, content))

    def clear(self) -> None:
        self._messages = []

    @property
    def messages(self) -> list[GameMessage]:
        """Copy of all messages, in insertion order."""
        return list(self._messages)

    def visible_to(self, player_id: Optional[int]) -> list[GameMessage]:
        """Messages a given player is allowed to see.

        Args:
            player_id: Viewer id; None returns public messages only.
        """
        return [m for m in self._messages if m.is_visible_to(player_id)]

    def recent(self, count: int) -> list[GameMessage]:
        """Last `count` messages."""
        if count <= 0:
            return []
        return self._messages[-count:]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(list(self._messages))

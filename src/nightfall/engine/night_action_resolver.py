"""Night action resolution - computes the night's outcome from queued actions."""

from typing import Optional, Sequence
from pydantic import BaseModel, Field

from nightfall.events import messages
from nightfall.events.game_events import ActionType, GameAction, GameMessage
from nightfall.events.message_log import private_message, system_message
from nightfall.models.player import Player, Role


class Investigation(BaseModel):
    """A seer's check. Only werewolf / not-werewolf is ever revealed."""

    seer_id: int
    target_id: int
    is_werewolf: bool


class Protection(BaseModel):
    """A knight's protection."""

    knight_id: int
    target_id: int


class NightResolution(BaseModel):
    """Outcome of one night.

    players is a derived copy of the input roster with deaths applied and
    every protection flag cleared; notices are the messages to append.
    """

    killed_id: Optional[int] = None
    attacked_id: Optional[int] = None  # Winning kill target, even if protected
    investigations: list[Investigation] = Field(default_factory=list)
    protections: list[Protection] = Field(default_factory=list)
    was_protected: bool = False
    players: list[Player] = Field(default_factory=list)
    notices: list[GameMessage] = Field(default_factory=list)


class NightActionResolver:
    """Computes the outcome of a night from its queued actions.

    Resolution order:
    1. Protections (collect the protected set)
    2. Kills (most kill votes wins, first-queued target wins ties;
       a protected target survives)
    3. Investigations (reported to the seer)
    """

    def resolve(
        self,
        actions: Sequence[GameAction],
        players: Sequence[Player],
    ) -> NightResolution:
        """Resolve a night.

        Args:
            actions: Queued night actions, in queue order.
            players: Current roster. Never mutated.

        Returns:
            NightResolution with the derived roster and notices.
        """
        updated = [p.model_copy() for p in players]
        by_id = {p.id: p for p in updated}
        result = NightResolution()

        # Protections first
        protected_ids: set[int] = set()
        for action in actions:
            if action.type != ActionType.PROTECT:
                continue
            target = by_id.get(action.target_player_id)
            if target is None or not target.is_alive:
                continue
            protected_ids.add(target.id)
            target.is_protected = True
            result.protections.append(Protection(knight_id=action.player_id, target_id=target.id))

        # Kills
        kill_target_id = self._choose_kill_target(actions, by_id)
        if kill_target_id is not None:
            victim = by_id[kill_target_id]
            result.attacked_id = kill_target_id
            if kill_target_id in protected_ids:
                result.was_protected = True
                result.notices.append(system_message(messages.player_protected(victim)))
            else:
                victim.is_alive = False
                result.killed_id = kill_target_id
                result.notices.append(system_message(messages.player_killed(victim)))

        # Investigations last
        for action in actions:
            if action.type != ActionType.INVESTIGATE:
                continue
            seer = by_id.get(action.player_id)
            target = by_id.get(action.target_player_id)
            if seer is None or target is None:
                continue
            result.investigations.append(Investigation(
                seer_id=seer.id,
                target_id=target.id,
                is_werewolf=target.role == Role.WEREWOLF,
            ))
            content = messages.seer_result(target)
            if seer.is_ai:
                result.notices.append(private_message(seer.id, content))
            else:
                result.notices.append(system_message(content, recipient_id=seer.id))

        for player in updated:
            player.is_protected = False

        result.players = updated
        return result

    def _choose_kill_target(
        self,
        actions: Sequence[GameAction],
        by_id: dict[int, Player],
    ) -> Optional[int]:
        """Tally kill votes per target.

        Dict insertion order follows queue order, so scanning with a strict
        comparison keeps the first-queued target on ties.
        """
        kill_votes: dict[int, int] = {}
        for action in actions:
            if action.type != ActionType.KILL:
                continue
            target = by_id.get(action.target_player_id)
            if target is None or not target.is_alive:
                continue
            kill_votes[target.id] = kill_votes.get(target.id, 0) + 1

        best_target: Optional[int] = None
        best_count = 0
        for target_id, count in kill_votes.items():
            if count > best_count:
                best_target = target_id
                best_count = count
        return best_target


def resolve_night(actions: Sequence[GameAction], players: Sequence[Player]) -> NightResolution:
    """Module-level shortcut for NightActionResolver().resolve()."""
    return NightActionResolver().resolve(actions, players)

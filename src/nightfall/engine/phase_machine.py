"""PhaseMachine - decides the next phase and what must happen on entry.

Phase order after setup:
    FIRST_NIGHT -> DAY -> VOTING -> NIGHT -> DAY -> VOTING -> NIGHT -> ...

GAME_OVER is entered by the orchestrator whenever a victory check succeeds,
so the machine itself never produces it.
"""

from typing import Optional, Sequence
from pydantic import BaseModel, Field

from nightfall.config import DEFAULT_DAY_DURATION
from nightfall.engine.game_state import GameState, get_human_player
from nightfall.events import messages
from nightfall.events.game_events import ActionType, Phase
from nightfall.models.player import Player, Role


# Night action available to each role, per night phase
NIGHT_ACTIONS: dict[Role, dict[Phase, ActionType]] = {
    Role.SEER: {Phase.FIRST_NIGHT: ActionType.INVESTIGATE, Phase.NIGHT: ActionType.INVESTIGATE},
    Role.WEREWOLF: {Phase.NIGHT: ActionType.KILL},
    Role.KNIGHT: {Phase.NIGHT: ActionType.PROTECT},
}


def night_action_for(player: Optional[Player], phase: Phase) -> Optional[ActionType]:
    """Get the night action a player may perform in a phase.

    Returns:
        The allowed ActionType, or None if the player is dead, absent, or
        has nothing to do in this phase.
    """
    if player is None or not player.is_alive:
        return None
    return NIGHT_ACTIONS.get(player.role, {}).get(phase)


def has_night_action(player: Optional[Player], phase: Phase) -> bool:
    """Check if a player has an action to perform during a night phase."""
    return night_action_for(player, phase) is not None


def eligible_targets(
    actor: Player,
    action_type: ActionType,
    players: Sequence[Player],
) -> list[Player]:
    """Players an actor may target with an action, in seat order.

    - Vote, protect, investigate: any living player except the actor
    - Kill: any living non-werewolf
    """
    targets = [p for p in players if p.is_alive and p.id != actor.id]
    if action_type == ActionType.KILL:
        targets = [p for p in targets if p.role != Role.WEREWOLF]
    return targets


def human_can_act(players: Sequence[Player]) -> bool:
    """An absent human is treated exactly like a dead one."""
    human = get_human_player(list(players))
    return human is not None and human.is_alive


class PhaseTransition(BaseModel):
    """Result of a phase transition, applied by the orchestrator."""

    from_phase: Phase
    new_phase: Phase
    new_day_number: int
    notices: list[str] = Field(default_factory=list)
    start_day: bool = False  # Start countdown and discussion
    stop_day: bool = False  # Stop countdown and discussion
    clear_votes: bool = True
    auto_resolve_night: bool = False
    auto_generate_votes: bool = False


class PhaseMachine:
    """Pure reducer over GameState for phase changes.

    The machine never mutates state: transition() describes the change and
    the orchestrator applies it.
    """

    def __init__(self, day_duration: int = DEFAULT_DAY_DURATION):
        self.day_duration = day_duration

    def transition(self, state: GameState) -> PhaseTransition:
        """Compute the transition out of the current phase.

        Args:
            state: Current game state.

        Returns:
            PhaseTransition describing the new phase and its entry effects.

        Raises:
            ValueError: If the current phase has no successor (SETUP, GAME_OVER).
        """
        phase = state.phase
        players = state.players

        if phase.is_night:
            # Only a regular night advances the day counter
            day_number = state.day_number + 1 if phase == Phase.NIGHT else state.day_number
            return PhaseTransition(
                from_phase=phase,
                new_phase=Phase.DAY,
                new_day_number=day_number,
                notices=[messages.day_begins(day_number)],
                start_day=True,
            )

        if phase == Phase.DAY:
            return PhaseTransition(
                from_phase=phase,
                new_phase=Phase.VOTING,
                new_day_number=state.day_number,
                notices=[messages.VOTING_BEGINS],
                stop_day=True,
                auto_generate_votes=not human_can_act(players),
            )

        if phase == Phase.VOTING:
            human = get_human_player(list(players))
            return PhaseTransition(
                from_phase=phase,
                new_phase=Phase.NIGHT,
                new_day_number=state.day_number,
                notices=[messages.NIGHT_FALLS],
                auto_resolve_night=not has_night_action(human, Phase.NIGHT),
            )

        raise ValueError(f"No transition out of phase {phase.value}")

    def can_auto_transition(self, phase: Phase, players: Sequence[Player]) -> bool:
        """Whether the engine may leave a phase without waiting for the human."""
        human = get_human_player(list(players))
        if human is None or not human.is_alive:
            return True
        if phase.is_night:
            return not has_night_action(human, phase)
        # Voting waits for the human; the day waits for its countdown
        return False

    def phase_duration(self, phase: Phase) -> int:
        """Countdown length for a phase, in time units (0 = untimed)."""
        if phase == Phase.DAY:
            return self.day_duration
        return 0

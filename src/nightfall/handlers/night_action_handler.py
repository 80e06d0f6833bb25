"""Night action handler - collects night actions from living AI players.

Who acts:
- Seer: investigate (every night, including the first)
- Werewolves: kill (regular nights only), each werewolf votes separately
- Knight: protect (regular nights only)
"""

import logging
from typing import Sequence

from nightfall.engine.game_state import GameState
from nightfall.engine.night_action_queue import NightActionQueue
from nightfall.engine.phase_machine import eligible_targets, night_action_for
from nightfall.events.game_events import GameAction, GameMessage
from nightfall.handlers.base import TurnHandler, build_context, query_provider


logger = logging.getLogger(__name__)


class NightActionHandler(TurnHandler):
    """Handler for AI night actions.

    Responsibilities:
    1. Find every living AI with an action in the current night phase
    2. Skip AIs that already have a queued action of that type
    3. Query the provider for a target name
    4. Validate the answer (random eligible target on failure)
    5. Return GameActions in seat order, ready to be queued
    """

    async def __call__(
        self,
        state: GameState,
        messages: Sequence[GameMessage],
        queued: NightActionQueue,
    ) -> list[GameAction]:
        """Generate AI night actions for the current phase.

        Args:
            state: Game state (phase must be FIRST_NIGHT or NIGHT)
            messages: Full message log
            queued: Actions already queued this night

        Returns:
            New actions, in seat order
        """
        actions: list[GameAction] = []

        for actor in state.players:
            if not actor.is_ai:
                continue
            action_type = night_action_for(actor, state.phase)
            if action_type is None or queued.has_action_from(actor.id, action_type):
                continue

            targets = eligible_targets(actor, action_type, state.players)
            if not targets:
                continue

            description = f"{action_type.value} decision for {actor.name}"
            context = build_context(actor, state, messages, targets)
            raw = await query_provider(
                lambda: self.provider.choose_night_action_target(actor.model_copy(), action_type, context),
                self.timeout,
                description,
            )
            target = self.resolve_target(raw, targets, description)

            actions.append(GameAction(
                type=action_type,
                player_id=actor.id,
                target_player_id=target.id,
            ))

        logger.debug("Generated %d AI night action(s) for %s", len(actions), state.phase.value)
        return actions

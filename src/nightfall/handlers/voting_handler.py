"""Voting handler - collects day votes from living AI players."""

import logging
from typing import Sequence

from nightfall.engine.game_state import GameState
from nightfall.engine.phase_machine import eligible_targets
from nightfall.events.game_events import ActionType, GameMessage
from nightfall.handlers.base import TurnHandler, build_context, query_provider


logger = logging.getLogger(__name__)


class VotingHandler(TurnHandler):
    """Handler for AI votes.

    Every living AI that has not voted yet casts exactly one vote for a
    living player other than itself. Abstention is not possible: an
    unusable answer becomes a random eligible vote.
    """

    async def __call__(
        self,
        state: GameState,
        messages: Sequence[GameMessage],
    ) -> dict[int, int]:
        """Generate AI votes.

        Args:
            state: Game state; state.votes holds votes already cast
            messages: Full message log

        Returns:
            Voter id -> target id for the new votes only
        """
        votes: dict[int, int] = {}

        for voter in state.players:
            if not voter.is_ai or not voter.is_alive or voter.id in state.votes:
                continue

            targets = eligible_targets(voter, ActionType.VOTE, state.players)
            if not targets:
                continue

            description = f"vote decision for {voter.name}"
            context = build_context(voter, state, messages, targets)
            raw = await query_provider(
                lambda: self.provider.choose_vote_target(voter.model_copy(), context),
                self.timeout,
                description,
            )
            target = self.resolve_target(raw, targets, description)
            votes[voter.id] = target.id

        logger.debug("Generated %d AI vote(s)", len(votes))
        return votes

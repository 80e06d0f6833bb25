"""Vote resolution - tallies day votes and determines the eliminated player.

Key rules:
- Only votes from living voters count
- Votes naming a dead or unknown target are ignored
- Strict maximum wins; a tie for the maximum eliminates nobody
- A living Medium learns the exact role of the eliminated player
"""

from typing import Mapping, Optional, Sequence
from pydantic import BaseModel, Field

from nightfall.events import messages
from nightfall.events.game_events import GameMessage
from nightfall.events.message_log import private_message, system_message
from nightfall.models.player import Player, Role


class VoteResolution(BaseModel):
    """Outcome of one voting phase."""

    eliminated_id: Optional[int] = None
    vote_counts: dict[int, int] = Field(default_factory=dict)  # target -> count
    vote_details: dict[int, list[str]] = Field(default_factory=dict)  # target -> voter names
    is_tied: bool = False
    max_votes: int = 0
    players: list[Player] = Field(default_factory=list)
    notices: list[GameMessage] = Field(default_factory=list)


class VoteResolver:
    """Computes the outcome of a voting phase.

    Responsibilities:
    1. Discard votes from dead voters and votes for invalid targets
    2. Tally votes per target
    3. Determine the eliminated player (tie = no elimination)
    4. Inform a living Medium of the eliminated player's role
    """

    def resolve(
        self,
        votes: Mapping[int, int],
        players: Sequence[Player],
    ) -> VoteResolution:
        """Resolve a voting phase.

        Args:
            votes: Voter id -> target id.
            players: Current roster. Never mutated.

        Returns:
            VoteResolution with the derived roster and notices.
        """
        updated = [p.model_copy() for p in players]
        by_id = {p.id: p for p in updated}

        vote_counts: dict[int, int] = {}
        vote_details: dict[int, list[str]] = {}
        for voter_id, target_id in votes.items():
            voter = by_id.get(voter_id)
            target = by_id.get(target_id)
            if voter is None or not voter.is_alive:
                continue
            if target is None or not target.is_alive:
                continue
            vote_counts[target_id] = vote_counts.get(target_id, 0) + 1
            vote_details.setdefault(target_id, []).append(voter.name)

        eliminated_id, is_tied, max_votes = self._determine_eliminated(vote_counts)

        result = VoteResolution(
            eliminated_id=eliminated_id,
            vote_counts=vote_counts,
            vote_details=vote_details,
            is_tied=is_tied,
            max_votes=max_votes,
        )
        result.notices.append(system_message(messages.voting_results(
            vote_details, vote_counts, updated, eliminated_id, max_votes,
        )))

        if eliminated_id is not None:
            eliminated = by_id[eliminated_id]
            eliminated.is_alive = False

            medium = next(
                (p for p in updated if p.role == Role.MEDIUM and p.is_alive),
                None,
            )
            if medium is not None:
                content = messages.medium_result(eliminated)
                if medium.is_ai:
                    result.notices.append(private_message(medium.id, content))
                else:
                    result.notices.append(system_message(content, recipient_id=medium.id))

        result.players = updated
        return result

    def _determine_eliminated(
        self,
        vote_counts: dict[int, int],
    ) -> tuple[Optional[int], bool, int]:
        """Determine the player to be eliminated from vote counts.

        Returns:
            Tuple of (eliminated id or None, is_tied, max_votes)
        """
        if not vote_counts:
            return None, False, 0

        max_votes = max(vote_counts.values())
        leaders = [target for target, count in vote_counts.items() if count == max_votes]

        if len(leaders) > 1:
            return None, True, max_votes

        return leaders[0], False, max_votes


def resolve_votes(votes: Mapping[int, int], players: Sequence[Player]) -> VoteResolution:
    """Module-level shortcut for VoteResolver().resolve()."""
    return VoteResolver().resolve(votes, players)

"""Shared helpers for AI turn handlers.

Every call into the decision provider goes through query_provider(), which
turns exceptions and timeouts into a None answer. Handlers then resolve the
answer against the eligible targets and fall back to a uniformly random
eligible target when it names nobody valid.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from nightfall.ai.base import DecisionContext, DecisionProvider, PlayerView
from nightfall.engine.game_state import GameState
from nightfall.events.game_events import GameMessage
from nightfall.handlers.parsing import match_player_name
from nightfall.models.player import Player, Role


logger = logging.getLogger(__name__)

T = TypeVar("T")


async def query_provider(
    make_call: Callable[[], Awaitable[T]],
    timeout: Optional[float],
    description: str,
) -> Optional[T]:
    """Await a provider call, converting failures into None.

    Args:
        make_call: Zero-argument factory for the provider coroutine
        timeout: Seconds to wait, or None to wait indefinitely
        description: Used in log messages

    Returns:
        The provider's answer, or None if it raised or timed out
    """
    try:
        if timeout is None:
            return await make_call()
        return await asyncio.wait_for(make_call(), timeout)
    except asyncio.CancelledError:
        raise
    except asyncio.TimeoutError:
        logger.warning("%s timed out after %.1fs, using fallback", description, timeout)
    except Exception:
        logger.warning("%s failed, using fallback", description, exc_info=True)
    return None


def player_views(players: Sequence[Player], viewer: Optional[Player] = None) -> list[PlayerView]:
    """Build the roster as seen by a viewer.

    The viewer knows its own role; a werewolf also knows its packmates.
    With no viewer every role is hidden.
    """
    views = []
    for player in players:
        known = viewer is not None and (
            player.id == viewer.id
            or (viewer.role == Role.WEREWOLF and player.role == Role.WEREWOLF)
        )
        views.append(PlayerView(
            id=player.id,
            name=player.name,
            is_alive=player.is_alive,
            is_ai=player.is_ai,
            role=player.role if known else None,
        ))
    return views


def build_context(
    actor: Player,
    state: GameState,
    messages: Sequence[GameMessage],
    targets: Sequence[Player] = (),
) -> DecisionContext:
    """Build the decision context for one actor.

    Args:
        actor: The deciding player
        state: Current game state
        messages: Full message log; filtered down to what the actor may see
        targets: Eligible targets, exposed by name
    """
    return DecisionContext(
        actor_id=actor.id,
        phase=state.phase,
        day_number=state.day_number,
        players=player_views(state.players, viewer=actor),
        messages=[m for m in messages if m.is_visible_to(actor.id)],
        valid_targets=[p.name for p in targets],
    )


class TurnHandler:
    """Base class for handlers that query the decision provider."""

    def __init__(
        self,
        provider: DecisionProvider,
        rng: Optional[random.Random] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the handler.

        Args:
            provider: Source of AI decisions
            rng: Random source for fallbacks (seeded for reproducible games)
            timeout: Per-call timeout in seconds, None to wait indefinitely
        """
        self.provider = provider
        self.rng = rng or random.Random()
        self.timeout = timeout

    def resolve_target(
        self,
        raw: Optional[str],
        candidates: Sequence[Player],
        description: str,
    ) -> Optional[Player]:
        """Match an answer to a candidate, falling back to a random one.

        Returns:
            The chosen player, or None only if there are no candidates
        """
        if not candidates:
            return None

        chosen = match_player_name(raw, candidates)
        if chosen is None:
            chosen = self.rng.choice(list(candidates))
            logger.debug("%s answered %r, falling back to %s", description, raw, chosen.name)
        return chosen

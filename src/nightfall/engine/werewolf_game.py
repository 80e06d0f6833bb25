"""WerewolfGame - the facade that owns the game state and drives the engine loop.

Game Flow:
    1. First night: Seer investigates -> Resolution
    2. Day: countdown + AI discussion -> Voting -> Resolution -> Victory check
    3. Night: Werewolves / Knight / Seer -> Resolution -> Victory check
    4. ... until victory condition is met

Concurrency:
    All state mutation happens while holding one asyncio.Lock. Commands from
    the UI are rejected while the lock is held; timer-driven work (countdown
    expiry, discussion turns) waits for it. Background work remembers the
    session epoch it was started in and drops itself after a reset.
"""

import asyncio
import logging
import random
from typing import Callable, Coroutine, Optional

from nightfall.ai.base import DecisionProvider
from nightfall.config import GameConfig
from nightfall.engine.errors import GameSetupError
from nightfall.engine.game_state import GameState
from nightfall.engine.night_action_queue import NightActionQueue
from nightfall.engine.night_action_resolver import NightActionResolver
from nightfall.engine.phase_machine import (
    PhaseMachine,
    PhaseTransition,
    eligible_targets,
    night_action_for,
)
from nightfall.engine.roster import create_players, validate_players
from nightfall.engine.timers import Countdown, PeriodicTask
from nightfall.engine.victory import check_winner
from nightfall.engine.vote_resolver import VoteResolver
from nightfall.events import messages
from nightfall.events.game_events import ActionType, GameAction, GameMessage, Phase
from nightfall.events.message_log import MessageLog
from nightfall.handlers.discussion_handler import DiscussionHandler
from nightfall.handlers.night_action_handler import NightActionHandler
from nightfall.handlers.voting_handler import VotingHandler
from nightfall.models.player import Faction, Player


logger = logging.getLogger(__name__)


class WerewolfGame:
    """Main game controller for one human against AI opponents.

    Usage:
        game = WerewolfGame(provider, GameConfig(seed=42))
        game.initialize_game(6)
        await game.start_game()
        await game.submit_action(GameAction(type=ActionType.VOTE, target_player_id=3))
    """

    def __init__(
        self,
        provider: DecisionProvider,
        config: Optional[GameConfig] = None,
        on_message: Optional[Callable[[GameMessage], None]] = None,
    ):
        """Initialize the WerewolfGame.

        Args:
            provider: AI decision provider used for every AI player.
            config: Game settings; defaults to the canonical 6-player game.
            on_message: Optional callback fired after each log message.
        """
        self.config = config or GameConfig()
        self._rng = random.Random(self.config.seed)

        self._state = GameState()
        self._log = MessageLog(on_message=on_message)
        self._night_actions = NightActionQueue()

        self._machine = PhaseMachine(day_duration=self.config.day_duration)
        self._night_resolver = NightActionResolver()
        self._vote_resolver = VoteResolver()

        timeout = self.config.ai_timeout
        self._night_handler = NightActionHandler(provider, self._rng, timeout)
        self._voting_handler = VotingHandler(provider, self._rng, timeout)
        self._discussion_handler = DiscussionHandler(provider, self._rng, timeout)

        self._countdown = Countdown(time_unit=self.config.time_unit)
        self._discussion = PeriodicTask(
            self.config.discussion_interval * self.config.time_unit,
            self._discussion_tick,
            name="discussion",
        )

        self._lock = asyncio.Lock()
        self._epoch = 0
        self._background: set[asyncio.Task] = set()
        self._game_over = asyncio.Event()
        self._generating = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> GameState:
        """Copy of the game state. Changing it does not affect the game."""
        return self.snapshot()

    def snapshot(self) -> GameState:
        return self._state.model_copy(deep=True)

    @property
    def messages(self) -> list[GameMessage]:
        return self._log.messages

    def visible_messages(self, player_id: Optional[int]) -> list[GameMessage]:
        return self._log.visible_to(player_id)

    def recent_messages(self, count: int) -> list[GameMessage]:
        return self._log.recent(count)

    # Player lists are copies, like state

    @property
    def alive_players(self) -> list[Player]:
        return _copy_players(self._state.alive_players)

    @property
    def dead_players(self) -> list[Player]:
        return _copy_players(self._state.dead_players)

    @property
    def werewolves(self) -> list[Player]:
        return _copy_players(self._state.werewolves)

    @property
    def villagers(self) -> list[Player]:
        return _copy_players(self._state.villagers)

    @property
    def human_player(self) -> Optional[Player]:
        human = self._state.human_player
        return human.model_copy() if human is not None else None

    @property
    def winner(self) -> Optional[Faction]:
        return self._state.winner

    @property
    def is_game_over(self) -> bool:
        return self._state.is_game_over

    @property
    def is_loading(self) -> bool:
        """True while a transition, resolution, or AI decision is in flight."""
        return self._lock.locked() or self._generating

    @property
    def pending_human_action(self) -> Optional[ActionType]:
        """The action the engine is waiting for from the human, if any."""
        human = self._state.human_player
        if human is None or not human.is_alive:
            return None

        phase = self._state.phase
        if phase == Phase.VOTING:
            return None if human.id in self._state.votes else ActionType.VOTE

        action_type = night_action_for(human, phase)
        if action_type is None or self._night_actions.has_action_from(human.id, action_type):
            return None
        return action_type

    @property
    def time_remaining(self) -> Optional[int]:
        return self._countdown.remaining

    def formatted_time_remaining(self) -> Optional[str]:
        return self._countdown.formatted_remaining()

    def time_remaining_percentage(self, total_duration: Optional[int] = None) -> Optional[float]:
        return self._countdown.remaining_percentage(total_duration)

    @property
    def is_timer_active(self) -> bool:
        return self._countdown.is_active

    @property
    def is_discussion_active(self) -> bool:
        return self._discussion.is_active

    async def wait_for_game_over(self) -> Optional[Faction]:
        """Block until the game ends and return the winner."""
        await self._game_over.wait()
        return self._state.winner

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def initialize_game(self, player_count: Optional[int] = None) -> bool:
        """Create a fresh roster and clear the log.

        Args:
            player_count: Number of seats; defaults to config.player_count.

        Returns:
            False if the engine is busy, True otherwise.

        Raises:
            GameSetupError: If the roster cannot be built.
        """
        if self._lock.locked():
            return self._reject("initialize_game while busy")
        self._initialize(player_count if player_count is not None else self.config.player_count)
        return True

    async def start_game(self) -> bool:
        """Leave SETUP and play the first night.

        Raises:
            GameSetupError: If no valid roster has been initialized.
        """
        if self._lock.locked():
            return self._reject("start_game while busy")
        async with self._lock:
            return await self._start()

    async def reset_game(self) -> bool:
        """Reassign roles and names for the same player count and restart."""
        if self._lock.locked():
            return self._reject("reset_game while busy")
        async with self._lock:
            player_count = len(self._state.players) or self.config.player_count
            self._initialize(player_count)
            return await self._start()

    def select_player(self, player_id: Optional[int]) -> bool:
        """Set (or clear, with None) the UI's selected target."""
        if player_id is not None and self._state.get_player(player_id) is None:
            return self._reject("select unknown player %s", player_id)
        self._state.selected_player_id = player_id
        return True

    def add_chat_message(self, content: str) -> Optional[GameMessage]:
        """Append a chat line from the human. No resolution happens."""
        human = self._state.human_player
        if human is None or not human.is_alive:
            self._reject("chat from a missing or dead human")
            return None
        content = content.strip()
        if not content:
            return None
        return self._log.add_player_message(human, content)

    async def submit_action(self, action: GameAction) -> bool:
        """Submit a vote or night action.

        An action without player_id is attributed to the human player.

        Returns:
            True if the action was accepted.
        """
        if self._lock.locked():
            return self._reject("%s while busy", action)
        async with self._lock:
            if action.player_id is None:
                human = self._state.human_player
                if human is None:
                    return self._reject("%s with no human player", action)
                action = action.model_copy(update={"player_id": human.id})

            if action.type == ActionType.VOTE:
                return await self._handle_vote(action)
            return await self._handle_night_action(action)

    async def generate_ai_day_talk(self, speaker_id: int) -> Optional[GameMessage]:
        """Make a specific AI player speak once."""
        if self._lock.locked():
            self._reject("day talk while busy")
            return None
        async with self._lock:
            speaker = self._state.get_player(speaker_id)
            if speaker is None or not speaker.is_ai or not speaker.is_alive:
                self._reject("day talk from player %s", speaker_id)
                return None
            return await self._speak_once(speaker)

    async def shutdown(self) -> None:
        """Stop timers and cancel background work."""
        tasks = [t for t in (self._countdown.task, self._discussion.task) if t is not None]
        self._stop_day()
        tasks += self._cancel_background()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def _initialize(self, player_count: int) -> None:
        players = create_players(
            player_count,
            self._rng,
            roles=self.config.roles,
            human_name=self.config.human_name,
            ai_names=self.config.ai_names,
            include_human=self.config.include_human,
        )

        self._stop_day()
        self._cancel_background()
        self._epoch += 1
        self._game_over.clear()
        self._night_actions.clear()
        self._state = GameState(players=players)
        self._log.clear()
        self._log.add_system_message(messages.GAME_INITIALIZED)

    async def _start(self) -> bool:
        violations = validate_players(self._state.players)
        if violations:
            raise GameSetupError(violations)
        if self._state.game_started:
            return self._reject("start_game on a started game")

        self._state.game_started = True
        self._state.phase = Phase.FIRST_NIGHT
        self._log.add_system_message(messages.GAME_STARTED)
        self._log.add_system_message(messages.NIGHT_ACTIONS)

        if self._machine.can_auto_transition(Phase.FIRST_NIGHT, self._state.players):
            await self._resolve_night()
        return True

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    async def _handle_vote(self, action: GameAction) -> bool:
        if self._state.phase != Phase.VOTING:
            return self._reject("%s outside voting", action)

        voter = self._state.get_player(action.player_id)
        if voter is None or not voter.is_alive:
            return self._reject("%s from a missing or dead player", action)
        if voter.id in self._state.votes:
            return self._reject("%s from a player who already voted", action)
        if not self._is_eligible_target(voter, ActionType.VOTE, action.target_player_id):
            return self._reject("%s with invalid target", action)

        self._state.votes[voter.id] = action.target_player_id
        self._log.add_system_message(messages.player_voted(voter))

        await self._generate_ai_votes()
        return True

    async def _handle_night_action(self, action: GameAction) -> bool:
        phase = self._state.phase
        if not phase.is_night:
            return self._reject("%s outside the night", action)

        if action.type == ActionType.KILL and phase == Phase.FIRST_NIGHT:
            self._log.add_system_message(messages.WEREWOLF_CANT_KILL)
            return False

        actor = self._state.get_player(action.player_id)
        if night_action_for(actor, phase) != action.type:
            return self._reject("%s not allowed for this player", action)
        if self._night_actions.has_action_from(actor.id, action.type):
            return self._reject("%s already queued", action)
        if not self._is_eligible_target(actor, action.type, action.target_player_id):
            return self._reject("%s with invalid target", action)

        self._night_actions.queue(action)

        if not actor.is_ai:
            await self._resolve_night()
        return True

    def _is_eligible_target(self, actor: Player, action_type: ActionType, target_id: Optional[int]) -> bool:
        return any(p.id == target_id for p in eligible_targets(actor, action_type, self._state.players))

    # ------------------------------------------------------------------
    # Resolution and transitions (lock held)
    # ------------------------------------------------------------------

    async def _resolve_night(self) -> None:
        self._generating = True
        try:
            ai_actions = await self._night_handler(
                self._state, self._log.messages, self._night_actions
            )
        finally:
            self._generating = False

        for action in ai_actions:
            self._night_actions.queue(action)

        resolution = self._night_resolver.resolve(self._night_actions.drain(), self._state.players)
        self._state.players = resolution.players
        self._log.extend(resolution.notices)
        logger.debug(
            "Night resolved: killed=%s protected=%s investigations=%d",
            resolution.killed_id, resolution.was_protected, len(resolution.investigations),
        )

        await self._check_game_over_and_advance()

    async def _generate_ai_votes(self) -> None:
        self._generating = True
        try:
            ai_votes = await self._voting_handler(self._state, self._log.messages)
        finally:
            self._generating = False

        self._state.votes.update(ai_votes)
        await self._resolve_votes()

    async def _resolve_votes(self) -> None:
        resolution = self._vote_resolver.resolve(self._state.votes, self._state.players)
        self._state.players = resolution.players
        self._log.extend(resolution.notices)
        logger.debug(
            "Votes resolved: eliminated=%s tied=%s counts=%s",
            resolution.eliminated_id, resolution.is_tied, resolution.vote_counts,
        )

        await self._check_game_over_and_advance()

    async def _check_game_over_and_advance(self) -> None:
        winner = check_winner(self._state.players)
        if winner is not None:
            self._finish(winner)
        else:
            await self._next_phase()

    async def _next_phase(self) -> None:
        transition: PhaseTransition = self._machine.transition(self._state)
        logger.debug("Phase %s -> %s", transition.from_phase.value, transition.new_phase.value)

        self._state.phase = transition.new_phase
        self._state.day_number = transition.new_day_number
        if transition.clear_votes:
            self._state.votes = {}
        for notice in transition.notices:
            self._log.add_system_message(notice)

        if transition.stop_day:
            self._stop_day()
        if transition.start_day:
            self._start_day()

        if transition.auto_resolve_night:
            await self._resolve_night()
        elif transition.auto_generate_votes:
            await self._generate_ai_votes()

    def _finish(self, winner: Faction) -> None:
        self._state.winner = winner
        self._state.phase = Phase.GAME_OVER
        self._log.add_system_message(messages.game_over(winner))
        self._stop_day()
        self._game_over.set()
        logger.debug("Game over on day %d: %s", self._state.day_number, winner.value)

    # ------------------------------------------------------------------
    # Day timers
    # ------------------------------------------------------------------

    def _start_day(self) -> None:
        self._countdown.start(
            self._machine.phase_duration(Phase.DAY),
            self._on_countdown_expired,
        )
        self._discussion.start()

    def _stop_day(self) -> None:
        self._discussion.stop()
        self._countdown.stop()

    def _on_countdown_expired(self) -> None:
        self._spawn(self._end_day(self._epoch))

    async def _end_day(self, epoch: int) -> None:
        async with self._lock:
            if epoch != self._epoch or self._state.phase != Phase.DAY:
                return
            self._log.add_system_message(messages.TIMES_UP)
            self._discussion.stop()
            await self._next_phase()

    async def _discussion_tick(self) -> bool:
        epoch = self._epoch
        if self._state.phase != Phase.DAY or self._state.winner is not None:
            return False

        async with self._lock:
            if epoch != self._epoch or self._state.phase != Phase.DAY or self._state.winner is not None:
                return False
            await self._speak_once()
        return True

    async def _speak_once(self, speaker: Optional[Player] = None) -> Optional[GameMessage]:
        self._generating = True
        try:
            if speaker is None:
                speaker = await self._discussion_handler.choose_speaker(
                    self._state, self._log.messages
                )
                if speaker is None:
                    return None
            content = await self._discussion_handler.speak(
                speaker, self._state, self._log.messages
            )
        finally:
            self._generating = False
        return self._log.add_player_message(speaker, content)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background game task failed", exc_info=task.exception())

    def _cancel_background(self) -> list[asyncio.Task]:
        current = asyncio.current_task() if _has_running_loop() else None
        tasks = [t for t in self._background if t is not current and not t.done()]
        for task in tasks:
            task.cancel()
        return tasks

    def _reject(self, reason: str, *args) -> bool:
        logger.debug("Rejected: " + reason, *args)
        return False


def _copy_players(players: list[Player]) -> list[Player]:
    return [p.model_copy() for p in players]


def _has_running_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True

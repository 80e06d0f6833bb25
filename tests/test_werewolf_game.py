"""Integration tests: WerewolfGame - game flow driven through the facade.

Tests use the stub provider and a tiny time unit so a whole day lasts a few
milliseconds. Tests that need the engine to sit still in one phase use a
long day instead.

All waits have a timeout to prevent hanging tests.
"""

import asyncio

import pytest
from pydantic import ValidationError

from nightfall.ai.stub_ai import StubDecisionProvider
from nightfall.config import DEFAULT_AI_NAMES, GameConfig
from nightfall.engine import GameSetupError, WerewolfGame
from nightfall.engine.game_state import GameState
from nightfall.events import messages
from nightfall.events.game_events import ActionType, GameAction, MessageKind, Phase
from nightfall.models.player import Faction, Role


# ============================================================================
# Helper Functions
# ============================================================================

def make_game(seed: int = 7, provider=None, **overrides) -> WerewolfGame:
    """Create a game with fast timers."""
    settings = dict(seed=seed, time_unit=0.001, day_duration=5, discussion_interval=2, ai_timeout=1.0)
    settings.update(overrides)
    return WerewolfGame(provider or StubDecisionProvider(seed=seed), GameConfig(**settings))


def make_slow_game(seed: int = 7, provider=None, **overrides) -> WerewolfGame:
    """Create a game whose day never ends during a test."""
    settings = dict(day_duration=100000, discussion_interval=100000)
    settings.update(overrides)
    return make_game(seed, provider, **settings)


def live_state(game: WerewolfGame) -> GameState:
    """The engine's own state, for arranging scenarios."""
    return game._state


def assign_human_role(game: WerewolfGame, role: Role) -> None:
    """Swap roles so the human (seat 0) holds the given role."""
    players = live_state(game).players
    human = players[0]
    if human.role == role:
        return
    other = next(p for p in players if p.role == role)
    human.role, other.role = other.role, human.role


async def wait_until(predicate, timeout: float = 5.0) -> None:
    """Poll until predicate() is true or fail after timeout."""
    async def poll():
        while not predicate():
            await asyncio.sleep(0.001)
    await asyncio.wait_for(poll(), timeout)


def contents(game: WerewolfGame) -> list[str]:
    return [m.content for m in game.messages]


class BlockingProvider(StubDecisionProvider):
    """Stub provider whose night decisions wait for a release signal."""

    def __init__(self, seed: int = 0):
        super().__init__(seed=seed)
        self.release = asyncio.Event()

    async def choose_night_action_target(self, actor, action_type, context):
        await self.release.wait()
        return await super().choose_night_action_target(actor, action_type, context)


class ChattyProvider(StubDecisionProvider):
    """Stub provider with a fixed utterance."""

    async def generate_utterance(self, actor, context):
        return f"{actor.name} is thinking."


# ============================================================================
# Setup
# ============================================================================

class TestInitialization:
    """Tests for initialize_game and start_game."""

    def test_initialize_creates_roster(self) -> None:
        game = make_game()
        assert game.initialize_game()

        state = game.state
        assert len(state.players) == 6
        assert state.phase == Phase.SETUP
        assert not state.game_started
        assert game.human_player.id == 0
        assert game.human_player.name == "Visitor"
        assert contents(game) == [messages.GAME_INITIALIZED]

    def test_same_seed_same_roster(self) -> None:
        first, second = make_game(seed=3), make_game(seed=3)
        first.initialize_game()
        second.initialize_game()
        assert first.state.players == second.state.players

    def test_initialize_with_bad_count_raises(self) -> None:
        game = make_game()
        with pytest.raises(GameSetupError):
            game.initialize_game(4)
        assert game.state.players == []

    @pytest.mark.asyncio
    async def test_start_without_players_raises(self) -> None:
        game = make_game()
        with pytest.raises(GameSetupError) as exc_info:
            await game.start_game()
        assert exc_info.value.violations[0].rule_id == "S.1"
        assert game.state.phase == Phase.SETUP
        assert not game.is_loading

    @pytest.mark.asyncio
    async def test_start_enters_first_night(self) -> None:
        game = make_slow_game()
        game.initialize_game()
        assign_human_role(game, Role.SEER)

        assert await game.start_game()

        assert game.state.phase == Phase.FIRST_NIGHT
        assert game.state.game_started
        assert game.pending_human_action == ActionType.INVESTIGATE
        assert contents(game) == [
            messages.GAME_INITIALIZED,
            messages.GAME_STARTED,
            messages.NIGHT_ACTIONS,
        ]
        await game.shutdown()

    @pytest.mark.asyncio
    async def test_second_start_is_noop(self) -> None:
        game = make_slow_game()
        game.initialize_game()
        assign_human_role(game, Role.SEER)
        await game.start_game()
        before = contents(game)

        assert not await game.start_game()
        assert contents(game) == before
        await game.shutdown()

    @pytest.mark.asyncio
    async def test_human_without_first_night_action_reaches_day(self) -> None:
        game = make_slow_game()
        game.initialize_game()
        assign_human_role(game, Role.WEREWOLF)

        await game.start_game()

        assert game.state.phase == Phase.DAY
        assert game.state.day_number == 1
        assert messages.day_begins(1) in contents(game)
        # Nobody dies on the first night
        assert len(game.alive_players) == 6
        assert game.is_timer_active
        await game.shutdown()


# ============================================================================
# Night actions
# ============================================================================

class TestNightActions:
    """Tests for night action submission."""

    @pytest.mark.asyncio
    async def test_human_seer_investigation_resolves_night(self) -> None:
        game = make_slow_game()
        game.initialize_game()
        assign_human_role(game, Role.SEER)
        await game.start_game()
        wolf = game.werewolves[0]

        accepted = await game.submit_action(GameAction(
            type=ActionType.INVESTIGATE, target_player_id=wolf.id,
        ))

        assert accepted
        assert game.state.phase == Phase.DAY
        private = [m for m in game.visible_messages(0) if m.recipient_id == 0]
        assert [m.content for m in private] == [messages.seer_result(wolf)]
        # Other players never see the result
        assert all(m.recipient_id != 0 for m in game.visible_messages(wolf.id))
        await game.shutdown()

    @pytest.mark.asyncio
    async def test_first_night_kill_rejected(self) -> None:
        game = make_slow_game()
        game.initialize_game()
        assign_human_role(game, Role.SEER)
        await game.start_game()
        wolf = game.werewolves[0]

        accepted = await game.submit_action(GameAction(
            type=ActionType.KILL, player_id=wolf.id, target_player_id=0,
        ))

        assert not accepted
        assert contents(game)[-1] == messages.WEREWOLF_CANT_KILL
        assert game.state.phase == Phase.FIRST_NIGHT
        await game.shutdown()

    @pytest.mark.asyncio
    async def test_action_must_match_role(self) -> None:
        game = make_slow_game()
        game.initialize_game()
        assign_human_role(game, Role.SEER)
        await game.start_game()

        assert not await game.submit_action(GameAction(type=ActionType.PROTECT, target_player_id=1))
        assert not await game.submit_action(GameAction(type=ActionType.VOTE, target_player_id=1))
        assert game.state.phase == Phase.FIRST_NIGHT
        await game.shutdown()

    @pytest.mark.asyncio
    async def test_invalid_targets_rejected(self) -> None:
        game = make_slow_game()
        game.initialize_game()
        assign_human_role(game, Role.SEER)
        live_state(game).players[3].is_alive = False
        await game.start_game()

        for target_id in (0, 3, 99, None):
            assert not await game.submit_action(GameAction(
                type=ActionType.INVESTIGATE, target_player_id=target_id,
            ))
        assert game.pending_human_action == ActionType.INVESTIGATE
        await game.shutdown()

    @pytest.mark.asyncio
    async def test_ai_action_is_only_queued(self) -> None:
        game = make_slow_game()
        game.initialize_game()
        assign_human_role(game, Role.KNIGHT)
        await game.start_game()
        assert game.state.phase == Phase.DAY

        # Jump to a regular night
        live_state(game).phase = Phase.NIGHT
        wolf = game.werewolves[0]
        victim = next(p for p in game.state.players if p.is_ai and p.role != Role.WEREWOLF)

        assert await game.submit_action(GameAction(
            type=ActionType.KILL, player_id=wolf.id, target_player_id=victim.id,
        ))
        assert game.state.phase == Phase.NIGHT
        assert game.pending_human_action == ActionType.PROTECT

        # The first queued kill target wins ties, so the knight can save the victim
        assert await game.submit_action(GameAction(
            type=ActionType.PROTECT, target_player_id=victim.id,
        ))

        assert game.state.get_player(victim.id).is_alive
        assert messages.player_protected(victim) in contents(game)
        assert not any(p.is_protected for p in game.state.players)
        assert game.state.phase == Phase.DAY
        assert game.state.day_number == 2
        await game.shutdown()

    @pytest.mark.asyncio
    async def test_duplicate_ai_action_rejected(self) -> None:
        game = make_slow_game()
        game.initialize_game()
        assign_human_role(game, Role.KNIGHT)
        await game.start_game()
        live_state(game).phase = Phase.NIGHT
        wolf = game.werewolves[0]
        targets = [p for p in game.state.players if p.role != Role.WEREWOLF]

        assert await game.submit_action(GameAction(
            type=ActionType.KILL, player_id=wolf.id, target_player_id=targets[0].id,
        ))
        assert not await game.submit_action(GameAction(
            type=ActionType.KILL, player_id=wolf.id, target_player_id=targets[1].id,
        ))
        await game.shutdown()


# ============================================================================
# Day and voting
# ============================================================================

class TestDayAndVoting:
    """Tests for the day countdown, discussion and votes."""

    @pytest.mark.asyncio
    async def test_countdown_queries(self) -> None:
        game = make_game(time_unit=1.0, day_duration=180, discussion_interval=15)
        game.initialize_game()
        assign_human_role(game, Role.VILLAGER)
        await game.start_game()

        assert game.state.phase == Phase.DAY
        assert game.time_remaining == 180
        assert game.formatted_time_remaining() == "03:00"
        assert game.time_remaining_percentage() == 100.0
        assert game.is_discussion_active
        await game.shutdown()
        assert game.time_remaining is None

    @pytest.mark.asyncio
    async def test_day_times_out_into_voting(self) -> None:
        game = make_game(provider=ChattyProvider(seed=7), day_duration=50)
        game.initialize_game()
        assign_human_role(game, Role.VILLAGER)
        await game.start_game()

        await wait_until(lambda: game.state.phase == Phase.VOTING and not game.is_loading)

        assert messages.TIMES_UP in contents(game)
        assert messages.VOTING_BEGINS in contents(game)
        assert game.pending_human_action == ActionType.VOTE
        assert not game.is_timer_active
        assert any(m.kind == MessageKind.AI and m.content.endswith("is thinking.") for m in game.messages)
        await game.shutdown()

    @pytest.mark.asyncio
    async def test_vote_flow(self) -> None:
        game = make_game()
        game.initialize_game()
        assign_human_role(game, Role.VILLAGER)
        await game.start_game()
        await wait_until(lambda: game.state.phase == Phase.VOTING and not game.is_loading)

        target = game.werewolves[0]
        assert await game.submit_action(GameAction(type=ActionType.VOTE, target_player_id=target.id))

        text = contents(game)
        assert "Visitor has voted." in text
        results = next(c for c in text if c.startswith("Voting Results"))
        assert "received votes from:" in results
        assert game.state.phase in (Phase.DAY, Phase.GAME_OVER)
        await game.shutdown()

    @pytest.mark.asyncio
    async def test_invalid_votes_rejected(self) -> None:
        game = make_game()
        game.initialize_game()
        assign_human_role(game, Role.VILLAGER)
        await game.start_game()

        # Not the voting phase yet
        assert not await game.submit_action(GameAction(type=ActionType.VOTE, target_player_id=1))

        await wait_until(lambda: game.state.phase == Phase.VOTING and not game.is_loading)
        assert not await game.submit_action(GameAction(type=ActionType.VOTE, target_player_id=0))
        assert not await game.submit_action(GameAction(type=ActionType.VOTE, target_player_id=99))
        assert game.state.phase == Phase.VOTING
        assert game.state.votes == {}
        await game.shutdown()

    @pytest.mark.asyncio
    async def test_generate_ai_day_talk(self) -> None:
        game = make_slow_game(provider=ChattyProvider(seed=1))
        game.initialize_game()
        assign_human_role(game, Role.VILLAGER)
        await game.start_game()
        speaker = game.state.players[2]

        message = await game.generate_ai_day_talk(speaker.id)

        assert message.kind == MessageKind.AI
        assert message.player_id == speaker.id
        assert message.content == f"{speaker.name} is thinking."
        assert await game.generate_ai_day_talk(0) is None
        await game.shutdown()


# ============================================================================
# Commands
# ============================================================================

class TestCommands:
    """Tests for chat, selection and snapshots."""

    def test_chat_message(self) -> None:
        game = make_game()
        game.initialize_game()

        message = game.add_chat_message("  I am a villager. ")

        assert message.kind == MessageKind.PLAYER
        assert message.content == "I am a villager."
        assert message.player_name == "Visitor"
        assert game.add_chat_message("   ") is None

    def test_dead_human_cannot_chat(self) -> None:
        game = make_game()
        game.initialize_game()
        live_state(game).players[0].is_alive = False
        assert game.add_chat_message("hello") is None

    def test_select_player(self) -> None:
        game = make_game()
        game.initialize_game()

        assert game.select_player(3)
        assert game.state.selected_player_id == 3
        assert not game.select_player(42)
        assert game.state.selected_player_id == 3
        assert game.select_player(None)
        assert game.state.selected_player_id is None

    def test_snapshot_is_a_copy(self) -> None:
        game = make_game()
        game.initialize_game()

        snapshot = game.snapshot()
        snapshot.players[0].is_alive = False
        assert game.state.players[0].is_alive

    def test_queries_cannot_change_the_game(self) -> None:
        game = make_game()
        game.initialize_game()

        game.state.players[1].is_alive = False
        game.state.votes[1] = 2
        game.alive_players[2].is_alive = False
        assign_human_role(game, Role.VILLAGER)
        game.human_player.role = Role.WEREWOLF
        game.werewolves[0].is_alive = False

        state = game.state
        assert all(p.is_alive for p in state.players)
        assert state.votes == {}
        assert game.human_player.role == Role.VILLAGER
        assert len(game.werewolves) == 2

    def test_log_entries_are_read_only(self) -> None:
        game = make_game()
        game.initialize_game()

        with pytest.raises(ValidationError):
            game.messages[0].content = "tampered"
        game.messages.clear()
        assert contents(game) == [messages.GAME_INITIALIZED]


# ============================================================================
# Full games, reset and concurrency
# ============================================================================

class TestFullGame:
    """Tests for games that run to completion on their own."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seed", [1, 2, 3])
    async def test_all_ai_game_finishes(self, seed: int) -> None:
        game = make_game(seed, include_human=False, ai_names=DEFAULT_AI_NAMES + ["Frankie"])
        game.initialize_game()
        await game.start_game()

        winner = await asyncio.wait_for(game.wait_for_game_over(), timeout=10)

        assert winner in (Faction.VILLAGERS, Faction.WEREWOLVES)
        assert game.is_game_over
        assert contents(game)[-1] == messages.game_over(winner)
        assert not game.is_timer_active
        if winner == Faction.VILLAGERS:
            assert game.werewolves == []
        else:
            assert len(game.werewolves) >= len(game.villagers)
        await game.shutdown()

    @pytest.mark.asyncio
    async def test_dead_human_game_auto_advances(self) -> None:
        game = make_game(seed=11)
        game.initialize_game()
        live_state(game).players[0].is_alive = False

        await game.start_game()
        winner = await asyncio.wait_for(game.wait_for_game_over(), timeout=10)

        assert winner is not None
        assert game.pending_human_action is None
        assert "Visitor has voted." not in contents(game)
        await game.shutdown()

    @pytest.mark.asyncio
    async def test_failing_provider_game_finishes(self) -> None:
        class BrokenProvider:
            async def choose_vote_target(self, actor, context):
                raise RuntimeError("down")

            async def choose_night_action_target(self, actor, action_type, context):
                return "nobody"

            async def choose_next_speaker(self, players, messages, day):
                return None

            async def generate_utterance(self, actor, context):
                raise RuntimeError("down")

        game = make_game(seed=5, provider=BrokenProvider())
        game.initialize_game()
        live_state(game).players[0].is_alive = False
        await game.start_game()

        await asyncio.wait_for(game.wait_for_game_over(), timeout=10)

        ai_lines = [m.content for m in game.messages if m.kind == MessageKind.AI]
        assert all(line == "I have nothing to say." for line in ai_lines)
        await game.shutdown()


class TestResetAndConcurrency:
    """Tests for reset_game and busy rejection."""

    @pytest.mark.asyncio
    async def test_reset_twice(self) -> None:
        game = make_slow_game()
        game.initialize_game()
        await game.start_game()

        for _ in range(2):
            assert await game.reset_game()
            text = contents(game)
            assert text[0] == messages.GAME_INITIALIZED
            assert text.count(messages.GAME_STARTED) == 1
            assert len(game.state.players) == 6
            assert game.state.game_started
            # The first night resolves at once when the human has nothing to do
            assert game.state.phase in (Phase.FIRST_NIGHT, Phase.DAY)
            assert game.state.day_number == 1
            assert len(game.alive_players) == 6

        await game.shutdown()

    @pytest.mark.asyncio
    async def test_reset_without_players_uses_default_count(self) -> None:
        game = make_slow_game()
        assert await game.reset_game()
        assert len(game.state.players) == 6
        await game.shutdown()

    @pytest.mark.asyncio
    async def test_intents_rejected_while_busy(self) -> None:
        provider = BlockingProvider(seed=4)
        game = make_slow_game(provider=provider, ai_timeout=None)
        game.initialize_game()
        assign_human_role(game, Role.VILLAGER)

        start = asyncio.create_task(game.start_game())
        await wait_until(lambda: game.is_loading)

        assert not await game.start_game()
        assert not await game.reset_game()
        assert not await game.submit_action(GameAction(type=ActionType.VOTE, target_player_id=1))
        assert not game.initialize_game()
        assert await game.generate_ai_day_talk(1) is None
        # Chat never waits for the engine
        assert game.add_chat_message("anyone there?") is not None

        provider.release.set()
        assert await asyncio.wait_for(start, timeout=5)
        assert game.state.phase == Phase.DAY
        assert not game.is_loading
        await game.shutdown()

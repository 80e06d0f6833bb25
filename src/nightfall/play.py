#!/usr/bin/env python
"""Playable Werewolf game with a human against AI opponents.

Usage:
    nightfall                          # Play against stub AI opponents
    nightfall --seed 42                # Reproducible game with seed
    nightfall --ai                     # Watch an AI vs AI game
    nightfall --ai --time-unit 0.01    # Watch it fast
"""

import argparse
import asyncio
import logging
import random
import sys
from typing import Optional

# Enable Windows console colors
if sys.platform == "win32":
    import colorama
    colorama.init()

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt

from nightfall.ai.stub_ai import create_stub_provider
from nightfall.config import DEFAULT_AI_NAMES, GameConfig
from nightfall.engine import HUMAN_SEAT, WerewolfGame, eligible_targets
from nightfall.events import messages
from nightfall.events.game_events import ActionType, GameAction, GameMessage, MessageKind, Phase
from nightfall.models.player import Player


# Spectator games have no human seat, so one more AI name is needed
WATCH_AI_NAMES = DEFAULT_AI_NAMES + ["Frankie"]

# Default time unit for spectator games, in seconds
WATCH_TIME_UNIT = 0.05

POLL_INTERVAL = 0.1

DAY_OVER_HINT = "[bold]The discussion is over. Press Enter to continue.[/bold]"

ACTION_PROMPTS = {
    ActionType.VOTE: "Vote to eliminate",
    ActionType.KILL: "Choose your victim",
    ActionType.PROTECT: "Choose who to protect",
    ActionType.INVESTIGATE: "Choose who to investigate",
}


def format_message(message: GameMessage) -> str:
    """Format a log message as rich markup."""
    content = escape(message.content)
    if message.kind == MessageKind.SYSTEM and message.recipient_id is None:
        return f"[bold yellow]{escape(message.player_name)}[/bold yellow]: {content}"
    if message.kind == MessageKind.PRIVATE or message.recipient_id is not None:
        return f"[magenta](private)[/magenta] {content}"
    if message.kind == MessageKind.PLAYER:
        return f"[bold green]{escape(message.player_name)}[/bold green]: {content}"
    return f"[bold cyan]{escape(message.player_name)}[/bold cyan]: {content}"


def _create_message_callback(console: Console, viewer_id: Optional[int] = None, spectator: bool = False):
    """Create a callback that prints every message the viewer may see.

    Args:
        console: Rich console for output
        viewer_id: Seat of the human, used to filter private messages
        spectator: If True, print every message including private ones
    """
    def callback(message: GameMessage):
        if spectator or message.is_visible_to(viewer_id):
            console.print(format_message(message))

    return callback


def _role_panel(player: Player, players: list[Player]) -> Panel:
    role_name = messages.ROLE_NAMES.get(player.role, player.role.value)
    lines = [f"You are [bold]{escape(player.name)}[/bold], the [bold]{role_name}[/bold]."]
    if player.is_werewolf:
        packmates = [p.name for p in players if p.is_werewolf and p.id != player.id]
        if packmates:
            lines.append(f"Your fellow werewolves: {escape(', '.join(packmates))}")
    return Panel("\n".join(lines), title="Your Role")


async def _ask_target(game: WerewolfGame, human: Player, action_type: ActionType) -> Optional[int]:
    targets = eligible_targets(human, action_type, game.state.players)
    if not targets:
        return None
    names = [p.name for p in targets]
    answer = await asyncio.to_thread(Prompt.ask, ACTION_PROMPTS[action_type], choices=names)
    return next(p.id for p in targets if p.name == answer)


async def _ask_day_line(game: WerewolfGame, console: Console) -> Optional[str]:
    """Read one chat line during the day.

    The prompt blocks a worker thread, so the game can leave the day while
    it waits. In that case the user is told to press Enter and whatever
    they typed is dropped.
    """
    prompt = asyncio.ensure_future(asyncio.to_thread(
        Prompt.ask,
        f"[dim]{game.formatted_time_remaining() or ''}[/dim] Say something (Enter to wait)",
        default="",
        show_default=False,
    ))
    while not prompt.done():
        if game.state.phase != Phase.DAY:
            console.print(f"\n{DAY_OVER_HINT}")
            break
        await asyncio.wait({prompt}, timeout=POLL_INTERVAL)

    line = await prompt
    if game.state.phase != Phase.DAY:
        return None
    return line


async def run_human_game(config: GameConfig, console: Console) -> None:
    """Play one game with the human in seat 0."""
    game = WerewolfGame(
        create_stub_provider(config.seed),
        config,
        on_message=_create_message_callback(console, viewer_id=HUMAN_SEAT),
    )
    game.initialize_game()
    human = game.human_player

    console.print(_role_panel(human, game.state.players))
    await game.start_game()

    while not game.is_game_over:
        human = game.human_player
        if not human.is_alive:
            console.print("[dim]You are dead. Watching the rest of the game...[/dim]")
            await game.wait_for_game_over()
            break

        action_type = game.pending_human_action
        if action_type is not None and not game.is_loading:
            target_id = await _ask_target(game, human, action_type)
            if target_id is not None:
                await game.submit_action(GameAction(type=action_type, target_player_id=target_id))
        elif game.state.phase == Phase.DAY and not game.is_loading:
            line = await _ask_day_line(game, console)
            if line:
                game.add_chat_message(line)
        else:
            await asyncio.sleep(POLL_INTERVAL)

    await game.shutdown()
    _print_result(game, console)


async def run_ai_simulation(config: GameConfig, console: Console) -> None:
    """Run a game with AI players only (for spectators)."""
    console.print(f"\n[bold cyan]Watching AI simulation (seed {config.seed})...[/bold cyan]\n")

    game = WerewolfGame(
        create_stub_provider(config.seed),
        config,
        on_message=_create_message_callback(console, spectator=True),
    )
    game.initialize_game()

    roles = ", ".join(f"{p.name}={p.role.value}" for p in game.state.players)
    console.print(f"[dim]Roles: {escape(roles)}[/dim]\n")

    await game.start_game()
    await game.wait_for_game_over()
    await game.shutdown()
    _print_result(game, console)


def _print_result(game: WerewolfGame, console: Console) -> None:
    winner = game.winner
    winner_name = messages.WINNER_NAMES.get(winner, "Nobody") if winner else "Nobody"
    roles = "\n".join(
        f"{escape(p.name)}: {p.role.value}{'' if p.is_alive else ' (dead)'}"
        for p in game.state.players
    )
    console.print(Panel(
        f"[bold]Game Over[/bold]\n\n"
        f"Winner: {winner_name}\n"
        f"Days played: {game.state.day_number}\n\n"
        f"{roles}",
        title="Result"
    ))


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Nightfall - a Werewolf game against AI opponents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible games"
    )
    parser.add_argument(
        "--ai",
        action="store_true",
        help="Watch an AI vs AI game instead of playing"
    )
    parser.add_argument(
        "--time-unit",
        type=float,
        default=None,
        help=f"Seconds per time unit (default: 1.0, or {WATCH_TIME_UNIT} with --ai)"
    )
    parser.add_argument(
        "--day-duration",
        type=int,
        default=None,
        help="Length of the day discussion in time units (default: 180)"
    )
    parser.add_argument(
        "--discussion-interval",
        type=int,
        default=None,
        help="Time units between AI speaking turns (default: 15)"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show engine debug logging"
    )

    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    # Generate seed if not provided
    if args.seed is None:
        args.seed = random.randint(1, 1000000)

    for flag, value in (
        ("--time-unit", args.time_unit),
        ("--day-duration", args.day_duration),
        ("--discussion-interval", args.discussion_interval),
    ):
        if value is not None and value <= 0:
            print(f"Error: {flag} must be positive")
            return 1

    overrides = {"seed": args.seed}
    if args.time_unit is not None:
        overrides["time_unit"] = args.time_unit
    elif args.ai:
        overrides["time_unit"] = WATCH_TIME_UNIT
    if args.day_duration is not None:
        overrides["day_duration"] = args.day_duration
    if args.discussion_interval is not None:
        overrides["discussion_interval"] = args.discussion_interval
    if args.ai:
        overrides["include_human"] = False
        overrides["ai_names"] = list(WATCH_AI_NAMES)

    config = GameConfig(**overrides)
    console = Console()

    try:
        if args.ai:
            asyncio.run(run_ai_simulation(config, console))
        else:
            asyncio.run(run_human_game(config, console))
    except KeyboardInterrupt:
        console.print("\n[dim]Game aborted.[/dim]")
        return 130

    return 0


if __name__ == "__main__":
    exit(main())

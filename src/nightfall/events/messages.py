"""English text for every system notice the engine emits."""

from typing import Optional, Sequence

from nightfall.models.player import Faction, Player, Role


GAME_INITIALIZED = "Game initialized! Ready to start."
GAME_STARTED = "The game has begun! The first night falls..."
NIGHT_ACTIONS = "All players close their eyes. Special roles, wake up and perform your actions."
DAY_BEGINS = "Day {day_number} begins. Discuss and vote for who you think is a werewolf."
VOTING_BEGINS = "Voting phase begins. Choose who to eliminate."
NIGHT_FALLS = "Night falls again. Werewolves, choose your next victim."
WEREWOLF_CANT_KILL = "Werewolves cannot kill on the first night."
PLAYER_VOTED = "{player_name} has voted."
TIMES_UP = "Time's up! Moving to voting phase."
PLAYER_PROTECTED = "{player_name} was attacked, but was protected and survived!"
PLAYER_KILLED = "{player_name} was killed during the night."
SEER_RESULT = "You investigated {target_name} and discovered they are {role}."
MEDIUM_RESULT = "You have channeled the spirit of the eliminated player. {target_name} was a {role}."
GAME_OVER = "Game Over! {winner} win!"

IS_WEREWOLF = "a Werewolf"
IS_NOT_WEREWOLF = "not a Werewolf"

WINNER_NAMES = {
    Faction.VILLAGERS: "Villagers",
    Faction.WEREWOLVES: "Werewolves",
}

ROLE_NAMES = {
    Role.WEREWOLF: "Werewolf",
    Role.VILLAGER: "Villager",
    Role.SEER: "Seer",
    Role.KNIGHT: "Knight",
    Role.MEDIUM: "Medium",
}


def day_begins(day_number: int) -> str:
    return DAY_BEGINS.format(day_number=day_number)


def player_voted(player: Player) -> str:
    return PLAYER_VOTED.format(player_name=player.name)


def player_protected(player: Player) -> str:
    return PLAYER_PROTECTED.format(player_name=player.name)


def player_killed(player: Player) -> str:
    return PLAYER_KILLED.format(player_name=player.name)


def seer_result(target: Player) -> str:
    role = IS_WEREWOLF if target.role == Role.WEREWOLF else IS_NOT_WEREWOLF
    return SEER_RESULT.format(target_name=target.name, role=role)


def medium_result(target: Player) -> str:
    return MEDIUM_RESULT.format(target_name=target.name, role=ROLE_NAMES[target.role])


def game_over(winner: Faction) -> str:
    return GAME_OVER.format(winner=WINNER_NAMES[winner])


def voting_results(
    vote_details: dict[int, list[str]],
    vote_counts: dict[int, int],
    players: Sequence[Player],
    eliminated_id: Optional[int],
    max_votes: int,
) -> str:
    """Format the plain-text voting results summary.

    Args:
        vote_details: Target id -> names of the players who voted for them
        vote_counts: Target id -> number of counted votes
        players: All players, used to resolve names
        eliminated_id: The eliminated player, or None
        max_votes: Highest vote count

    Returns:
        Multi-line summary, one line per voted target
    """
    by_id = {p.id: p for p in players}
    lines = ["Voting Results"]

    if not vote_details:
        lines.append("No votes were cast.")
    else:
        for target_id, voters in vote_details.items():
            target = by_id.get(target_id)
            if target:
                lines.append(f"- {target.name} received votes from: {', '.join(voters)}.")

    eliminated = by_id.get(eliminated_id) if eliminated_id is not None else None
    if eliminated:
        noun = "vote" if max_votes == 1 else "votes"
        lines.append(f"{eliminated.name} has been voted out with {max_votes} {noun}.")
    elif vote_counts:
        lines.append("The vote was tied. No one is eliminated.")

    return "\n".join(lines)

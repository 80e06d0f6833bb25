"""Roster creation and role assignment.

Setup rules:
- S.1: Player count must be at least 1
- S.2: Role pool size must equal the player count
- S.3: There must be enough distinct AI names for every AI seat
- S.4: At most one player may be human
"""

import random
from typing import Optional, Sequence

from nightfall.config import DEFAULT_AI_NAMES, DEFAULT_HUMAN_NAME
from nightfall.engine.errors import GameSetupError, SetupViolation
from nightfall.models.player import (
    Player,
    Role,
    RoleConfig,
    STANDARD_6_PLAYER_CONFIG,
    build_role_pool,
)


HUMAN_SEAT = 0


def validate_roster(
    player_count: int,
    roles: Sequence[RoleConfig],
    ai_names: Sequence[str],
    include_human: bool = True,
) -> list[SetupViolation]:
    """Validate setup rules S.1-S.3 before any player is created.

    Args:
        player_count: Requested number of seats
        roles: Role configuration to draw from
        ai_names: Name pool for AI seats
        include_human: Whether seat 0 is reserved for the human

    Returns:
        List of violations (empty if valid)
    """
    violations: list[SetupViolation] = []

    if player_count < 1:
        violations.append(SetupViolation(
            rule_id="S.1",
            message="Player count must be at least 1",
            context={"player_count": player_count},
        ))

    pool_size = sum(rc.count for rc in roles)
    if pool_size != player_count:
        violations.append(SetupViolation(
            rule_id="S.2",
            message=f"Role pool has {pool_size} roles for {player_count} players",
            context={"pool_size": pool_size, "player_count": player_count},
        ))

    ai_seats = player_count - 1 if include_human else player_count
    distinct_names = len(set(ai_names))
    if ai_seats > distinct_names:
        violations.append(SetupViolation(
            rule_id="S.3",
            message=f"Need {ai_seats} AI names but only {distinct_names} are available",
            context={"ai_seats": ai_seats, "distinct_names": distinct_names},
        ))

    return violations


def validate_players(players: Sequence[Player]) -> list[SetupViolation]:
    """Validate setup rule S.4 on an already built roster."""
    violations: list[SetupViolation] = []

    humans = [p.id for p in players if not p.is_ai]
    if len(humans) > 1:
        violations.append(SetupViolation(
            rule_id="S.4",
            message=f"At most one human player is allowed, found {len(humans)}",
            context={"human_ids": humans},
        ))

    if not players:
        violations.append(SetupViolation(
            rule_id="S.1",
            message="Player count must be at least 1",
            context={"player_count": 0},
        ))

    return violations


def create_players(
    player_count: int,
    rng: random.Random,
    roles: Optional[Sequence[RoleConfig]] = None,
    human_name: str = DEFAULT_HUMAN_NAME,
    ai_names: Optional[Sequence[str]] = None,
    include_human: bool = True,
) -> list[Player]:
    """Create a freshly shuffled roster.

    Seat 0 is the human (when include_human is set); every other seat is an
    AI whose name is drawn without repetition from a shuffled name pool.

    Args:
        player_count: Number of seats.
        rng: random.Random instance for reproducible shuffling.
        roles: Role configuration; defaults to the canonical 6-player pool.
        human_name: Display name of the human player.
        ai_names: Name pool for AI seats.
        include_human: If False, every seat is AI-controlled.

    Returns:
        Players in seat order, all alive and unprotected.

    Raises:
        GameSetupError: If the configuration breaks a setup rule.
    """
    roles = list(roles) if roles is not None else list(STANDARD_6_PLAYER_CONFIG)
    ai_names = list(ai_names) if ai_names is not None else list(DEFAULT_AI_NAMES)

    violations = validate_roster(player_count, roles, ai_names, include_human)
    if violations:
        raise GameSetupError(violations)

    # Shuffle the roles
    role_pool: list[Role] = build_role_pool(roles)
    rng.shuffle(role_pool)

    # Unique names, shuffled
    name_pool = list(dict.fromkeys(ai_names))
    rng.shuffle(name_pool)
    names = iter(name_pool)

    players: list[Player] = []
    for seat in range(player_count):
        is_human = include_human and seat == HUMAN_SEAT
        players.append(Player(
            id=seat,
            name=human_name if is_human else next(names),
            role=role_pool[seat],
            is_ai=not is_human,
        ))

    return players

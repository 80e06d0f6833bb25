"""Parsing utilities for AI answer extraction."""

import re
from typing import Optional, Sequence

from nightfall.models.player import Player


def extract_answer(raw_response: str) -> str:
    """Extract answer from an AI response, handling thinking wrappers.

    Priority:
    1. <answer>...</answer> wrapper (preferred)
    2. ANSWER: prefix
    3. Raw response

    Args:
        raw_response: The raw response string from the provider

    Returns:
        The extracted answer string
    """
    # Try XML wrapper
    if match := re.search(
        r'<answer>(.*?)</answer>', raw_response, re.IGNORECASE | re.DOTALL
    ):
        return match.group(1).strip()

    # Try ANSWER: prefix
    if match := re.search(
        r'ANSWER:\s*(.+)', raw_response, re.IGNORECASE | re.DOTALL
    ):
        return match.group(1).strip()

    return raw_response.strip()


def match_player_name(
    raw_response: Optional[str],
    candidates: Sequence[Player],
) -> Optional[Player]:
    """Resolve a provider answer to one of the candidate players.

    Matching is exact first, then case-insensitive, ignoring surrounding
    quotes and punctuation.

    Args:
        raw_response: Raw answer, possibly None
        candidates: Players the answer may name

    Returns:
        The named candidate, or None if the answer names nobody eligible
    """
    if not isinstance(raw_response, str):
        return None

    answer = extract_answer(raw_response)
    answer = answer.strip(' \t"\'.!?,;:')
    if not answer:
        return None

    for player in candidates:
        if player.name == answer:
            return player

    folded = answer.casefold()
    for player in candidates:
        if player.name.casefold() == folded:
            return player

    return None

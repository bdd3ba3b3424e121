"""Habit difficulty levels and the XP each one is worth."""

from __future__ import annotations


DEFAULT_DIFFICULTY = "normal"

# (id, xp) from easiest to hardest
DIFFICULTY_XP = {
    "very-easy": 10,
    "easy": 25,
    "normal": 50,
    "hard": 100,
    "very-hard": 200,
    "extreme": 500,
}

VALID_DIFFICULTIES = set(DIFFICULTY_XP)


def xp_for_difficulty(difficulty: str) -> int:
    """XP for a difficulty id; unknown ids are worth the default level."""
    return DIFFICULTY_XP.get(difficulty, DIFFICULTY_XP[DEFAULT_DIFFICULTY])


def infer_difficulty(xp: int) -> str:
    """Guess a difficulty for legacy habits that only stored XP."""
    for difficulty, ceiling in DIFFICULTY_XP.items():
        if difficulty == "extreme":
            break
        if xp <= ceiling:
            return difficulty
    return "extreme"

"""Habit CRUD, validation and completion tracking for LifeCompass.

The ``streak`` stored on each habit is a cache. Every write that can
change it (create, update, mark/unmark, day rollover) recomputes it with
core.habits.compute_streak.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path
from typing import Any

from core.difficulty import (
    DEFAULT_DIFFICULTY,
    VALID_DIFFICULTIES,
    infer_difficulty,
    xp_for_difficulty,
)
from core.habits import compute_streak
from core.models import Habit
from core.periods import VALID_FREQUENCIES, normalize_date_str, parse_date_str
from core.store import (
    create_document,
    delete_document,
    get_document,
    query_documents,
    set_document,
    update_document,
)
from core.workspace import today_str

logger = logging.getLogger(__name__)

COLLECTION = "habits"

_REMINDER_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


# ── Validation ────────────────────────────────────────────────


def validate_habit(habit: dict[str, Any]) -> list[str]:
    """Validate habit fields and return list of errors (empty if valid)."""
    errors = []
    if not str(habit.get("name", "")).strip():
        errors.append("Missing required field: name")
    if habit.get("frequency") not in VALID_FREQUENCIES:
        errors.append(f"Invalid frequency: {habit.get('frequency')}")
    if habit.get("difficulty") and habit["difficulty"] not in VALID_DIFFICULTIES:
        errors.append(f"Invalid difficulty: {habit['difficulty']}")
    if "xp" in habit and (not isinstance(habit["xp"], int) or habit["xp"] < 0):
        errors.append("xp must be a non-negative integer")
    reminder = habit.get("reminderTime")
    if reminder and not _REMINDER_TIME_RE.match(str(reminder)):
        errors.append(f"Invalid reminderTime (expected HH:MM): {reminder}")
    dates = habit.get("completedDates") or []
    if not isinstance(dates, list):
        errors.append("completedDates must be a list")
    else:
        for d in dates:
            try:
                parse_date_str(d)
            except (TypeError, ValueError):
                errors.append(f"Invalid completed date: {d}")
    return errors


def _normalize_dates(dates: list[str]) -> list[str]:
    """YYYY-MM-DD strings, duplicates removed, first occurrence kept."""
    return list(dict.fromkeys(normalize_date_str(d) for d in dates))


def _with_difficulty(data: dict[str, Any]) -> tuple[dict[str, Any], bool]:
    """Back-fill difficulty/xp the way legacy records expect. Returns (data, changed)."""
    data = dict(data)
    difficulty = data.get("difficulty")
    xp = data.get("xp")
    if not difficulty and xp:
        data["difficulty"] = infer_difficulty(int(xp))
    elif not difficulty:
        data["difficulty"] = DEFAULT_DIFFICULTY
        data["xp"] = xp_for_difficulty(DEFAULT_DIFFICULTY)
    elif not xp:
        data["xp"] = xp_for_difficulty(difficulty)
    else:
        return data, False
    return data, True


# ── CRUD ──────────────────────────────────────────────────────


def _habit_from_document(doc: dict[str, Any], root: Path | None) -> Habit:
    """Build a Habit, repairing legacy fields in storage when needed."""
    fixed, changed = _with_difficulty(doc)
    dates = [str(d) for d in (doc.get("completedDates") or [])]
    normalized = _normalize_dates(dates)
    fixed["completedDates"] = normalized
    if changed:
        update_document(
            COLLECTION,
            doc["id"],
            {"difficulty": fixed["difficulty"], "xp": fixed["xp"]},
            root,
        )
        logger.info("Back-filled difficulty for habit %s", doc["id"])
    return Habit.from_dict(fixed)


def load_habits(user_id: str, root: Path | None = None) -> list[Habit]:
    """All habits owned by *user_id*."""
    return [_habit_from_document(doc, root) for doc in query_documents(COLLECTION, root, userId=user_id)]


def get_habit(habit_id: str, root: Path | None = None) -> Habit | None:
    doc = get_document(COLLECTION, habit_id, root)
    if doc is None:
        return None
    return _habit_from_document(doc, root)


def create_habit(
    habit_data: dict[str, Any],
    user_id: str,
    as_of: date | str | None = None,
    root: Path | None = None,
) -> tuple[Habit, list[str]]:
    """Create and persist a new habit. Returns (habit, errors)."""
    data = {"frequency": "daily", **habit_data}
    errors = validate_habit(data)
    if errors:
        return Habit(), errors

    data, _ = _with_difficulty(data)
    data["completedDates"] = _normalize_dates(data.get("completedDates") or [])
    data["userId"] = user_id
    data["streak"] = compute_streak(
        data["frequency"], data["completedDates"], as_of or today_str(root)
    )
    habit = Habit.from_dict(data)
    habit.id = create_document(COLLECTION, habit.to_dict(), root)
    logger.info("Created habit %s for %s", habit.id, user_id)
    return habit, []


def update_habit(
    habit_id: str,
    updates: dict[str, Any],
    as_of: date | str | None = None,
    root: Path | None = None,
) -> tuple[Habit | None, list[str]]:
    """Update a habit by ID. Returns (updated_habit, errors)."""
    habit = get_habit(habit_id, root)
    if habit is None:
        return None, [f"Habit not found: {habit_id}"]

    habit_dict = habit.to_dict()
    habit_dict.update({k: v for k, v in updates.items() if k not in ("id", "userId", "streak")})
    errors = validate_habit(habit_dict)
    if errors:
        return None, errors

    if "difficulty" in updates and "xp" not in updates:
        habit_dict["xp"] = xp_for_difficulty(habit_dict["difficulty"])
    habit_dict["completedDates"] = _normalize_dates(habit_dict.get("completedDates") or [])
    habit_dict["streak"] = compute_streak(
        habit_dict["frequency"], habit_dict["completedDates"], as_of or today_str(root)
    )
    updated = Habit.from_dict(habit_dict)
    set_document(COLLECTION, habit_id, updated.to_dict(), root)
    return updated, []


def delete_habit(habit_id: str, root: Path | None = None) -> bool:
    return delete_document(COLLECTION, habit_id, root)


# ── Completion tracking ───────────────────────────────────────


def _save_completions(habit: Habit, dates: list[str], as_of: date | str, root: Path | None) -> Habit:
    habit.completed_dates = dates
    habit.streak = compute_streak(habit.frequency, dates, as_of)
    update_document(
        COLLECTION,
        habit.id,
        {"completedDates": habit.completed_dates, "streak": habit.streak},
        root,
    )
    return habit


def mark_complete(
    habit_id: str,
    day: date | str,
    as_of: date | str | None = None,
    root: Path | None = None,
) -> Habit | None:
    """Record a completion on *day* and refresh the streak as of *as_of*.

    Marking a day that is already recorded leaves the dates alone but
    still refreshes the cached streak.
    """
    habit = get_habit(habit_id, root)
    if habit is None:
        return None
    day_str = parse_date_str(day).isoformat()
    dates = habit.completed_dates
    if day_str not in dates:
        dates = dates + [day_str]
    return _save_completions(habit, dates, as_of or today_str(root), root)


def unmark_complete(
    habit_id: str,
    day: date | str,
    as_of: date | str | None = None,
    root: Path | None = None,
) -> Habit | None:
    """Remove the completion on *day* and recompute the streak."""
    habit = get_habit(habit_id, root)
    if habit is None:
        return None
    day_str = parse_date_str(day).isoformat()
    remaining = [d for d in habit.completed_dates if d != day_str]
    return _save_completions(habit, remaining, as_of or today_str(root), root)


def refresh_streaks(user_id: str, as_of: date | str | None = None, root: Path | None = None) -> list[str]:
    """Recompute every cached streak for a user (day rollover). Returns changed IDs."""
    as_of = as_of or today_str(root)
    changed = []
    for habit in load_habits(user_id, root):
        streak = compute_streak(habit.frequency, habit.completed_dates, as_of)
        if streak != habit.streak:
            update_document(COLLECTION, habit.id, {"streak": streak}, root)
            changed.append(habit.id)
    return changed

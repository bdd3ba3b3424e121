"""Habit streak and eligibility engine.

Pure functions over a habit's frequency and its set of completion dates.
Nothing here reads the clock: callers pass the reference date (*as_of*).
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Any

from core.models import Habit
from core.periods import (
    DAILY,
    check_frequency,
    in_period,
    parse_date_str,
    period_bounds,
    period_key,
    period_start,
    previous_period_start,
    to_date_str,
)


DEFAULT_COLORS = [
    "#3B82F6",  # blue
    "#10B981",  # green
    "#F59E0B",  # yellow
    "#EF4444",  # red
    "#8B5CF6",  # purple
    "#EC4899",  # pink
    "#06B6D4",  # cyan
    "#F97316",  # orange
]

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def _as_date(value: date | datetime | str) -> date:
    return parse_date_str(value)


def can_complete_in_current_period(
    frequency: str,
    completed_dates: Iterable[str],
    as_of: date | datetime | str,
) -> bool:
    """Whether the habit may be marked complete in the period containing *as_of*.

    Daily habits are always eligible. Weekly and monthly habits are eligible
    only while no completion falls inside the current week/month.
    """
    check_frequency(frequency)
    if frequency == DAILY:
        return True
    start, end = period_bounds(_as_date(as_of), frequency)
    return not any(in_period(parse_date_str(d), start, end) for d in completed_dates)


def satisfied_periods(frequency: str, completed_dates: Iterable[str]) -> set[str]:
    """Period keys that hold at least one completion."""
    check_frequency(frequency)
    return {period_key(parse_date_str(d), frequency) for d in completed_dates}


def compute_streak(
    frequency: str,
    completed_dates: Iterable[str],
    as_of: date | datetime | str,
) -> int:
    """Count consecutive satisfied periods ending at the current period.

    If the current period has no completion yet, counting starts from the
    previous period instead (one period of grace). Two missed periods in a
    row mean the streak is 0.
    """
    satisfied = satisfied_periods(frequency, completed_dates)
    if not satisfied:
        return 0

    cursor = period_start(_as_date(as_of), frequency)
    if period_key(cursor, frequency) not in satisfied:
        cursor = previous_period_start(cursor, frequency)
        if period_key(cursor, frequency) not in satisfied:
            return 0

    streak = 0
    while period_key(cursor, frequency) in satisfied:
        streak += 1
        cursor = previous_period_start(cursor, frequency)
    return streak


def is_completed_on(completed_dates: Iterable[str], day: date | str) -> bool:
    target = to_date_str(_as_date(day))
    return any(to_date_str(parse_date_str(d)) == target for d in completed_dates)


# ── Display helpers ───────────────────────────────────────────


def habit_color(habit: Habit, index: int = 0) -> str:
    if habit.color:
        return habit.color
    return DEFAULT_COLORS[index % len(DEFAULT_COLORS)]


def last_n_days(as_of: date | datetime | str, n: int = 7) -> list[dict[str, Any]]:
    """The *n* days ending at *as_of*, oldest first."""
    today = _as_date(as_of)
    days = []
    for offset in range(n - 1, -1, -1):
        d = today - timedelta(days=offset)
        days.append({
            "date": d.isoformat(),
            "day_name": DAY_NAMES[(d.weekday() + 1) % 7],
            "is_today": d == today,
        })
    return days


def habits_with_computed_fields(habits: list[Habit], as_of: date | datetime | str) -> list[dict[str, Any]]:
    """Return habit dicts with streak, eligibility and last-7-days fields added."""
    today = _as_date(as_of)
    result = []
    for i, habit in enumerate(habits):
        d = habit.to_dict()
        d["streak"] = compute_streak(habit.frequency, habit.completed_dates, today)
        d["canComplete"] = can_complete_in_current_period(habit.frequency, habit.completed_dates, today)
        d["completedToday"] = is_completed_on(habit.completed_dates, today)
        d["color"] = habit_color(habit, i)
        d["last7"] = [
            {**day, "done": is_completed_on(habit.completed_dates, day["date"])}
            for day in last_n_days(today)
        ]
        result.append(d)
    return result

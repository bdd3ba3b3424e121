"""Typed dataclasses for LifeCompass data model.

All models use from_dict/to_dict for JSON serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


# ── Habits ────────────────────────────────────────────────────


@dataclass
class Habit:
    id: str = ""
    name: str = ""
    icon: str = ""
    category: str = ""
    color: str = ""
    frequency: str = "daily"  # daily, weekly, monthly
    # cache of compute_streak(); never edited by hand
    streak: int = 0
    completed_dates: list[str] = field(default_factory=list)
    difficulty: str = ""
    xp: int = 0
    reminder_time: str = ""  # HH:MM
    reminder_enabled: bool = False
    user_id: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Habit:
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            icon=str(d.get("icon", "") or ""),
            category=str(d.get("category", "") or ""),
            color=str(d.get("color", "") or ""),
            frequency=str(d.get("frequency", "daily")),
            streak=int(d.get("streak", 0) or 0),
            completed_dates=[str(x) for x in (d.get("completedDates") or [])],
            difficulty=str(d.get("difficulty", "") or ""),
            xp=int(d.get("xp", 0) or 0),
            reminder_time=str(d.get("reminderTime", "") or ""),
            reminder_enabled=bool(d.get("reminderEnabled", False)),
            user_id=str(d.get("userId", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "category": self.category,
            "frequency": self.frequency,
            "streak": self.streak,
            "completedDates": list(self.completed_dates),
            "difficulty": self.difficulty,
            "xp": self.xp,
            "reminderEnabled": self.reminder_enabled,
            "userId": self.user_id,
        }
        if self.color:
            d["color"] = self.color
        if self.reminder_time:
            d["reminderTime"] = self.reminder_time
        return d


# ── Check-ins ─────────────────────────────────────────────────


@dataclass
class CheckIn:
    id: str = ""
    user_id: str = ""
    date: str = ""  # YYYY-MM-DD
    mood: int | None = None
    energy: int | None = None
    productivity: int | None = None
    notes: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> CheckIn:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            id=str(d.get("id", "")),
            user_id=str(d.get("userId", "")),
            date=str(d.get("date", "")),
            mood=_optional_int(d.get("mood")),
            energy=_optional_int(d.get("energy")),
            productivity=_optional_int(d.get("productivity")),
            notes=str(d.get("notes", "") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "date": self.date,
            "mood": self.mood,
            "energy": self.energy,
            "productivity": self.productivity,
            "notes": self.notes,
        }


# ── Notifications ─────────────────────────────────────────────


@dataclass
class PushPayload:
    title: str = ""
    body: str = ""
    icon: str = ""
    tag: str = ""
    data: dict[str, str] = field(default_factory=dict)
    require_interaction: bool = False

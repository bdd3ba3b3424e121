"""Shared test fixtures for LifeCompass tests."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
import yaml


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with a profile and a few habits."""
    root = tmp_path / "workspace"
    (root / "data").mkdir(parents=True)

    profile = {
        "timezone": "UTC",
        "checkin_reminder_time": "21:00",
    }
    (root / "profile.yaml").write_text(
        yaml.dump(profile, default_flow_style=False), encoding="utf-8"
    )

    habits = {
        "documents": {
            "h-read": {
                "name": "Read",
                "icon": "📚",
                "frequency": "daily",
                "streak": 0,
                "completedDates": ["2026-02-09", "2026-02-10T08:15:00"],
                "difficulty": "easy",
                "xp": 25,
                "reminderTime": "08:00",
                "reminderEnabled": True,
                "userId": "alice",
                "createdAt": "2026-02-01T09:00:00+00:00",
                "updatedAt": "2026-02-10T09:00:00+00:00",
            },
            "h-gym": {
                "name": "Long run",
                "frequency": "weekly",
                "completedDates": ["2026-02-08"],
                "xp": 100,
                "reminderTime": "18:30",
                "reminderEnabled": True,
                "userId": "alice",
                "createdAt": "2026-02-01T09:00:00+00:00",
                "updatedAt": "2026-02-08T09:00:00+00:00",
            },
            "h-budget": {
                "name": "Review budget",
                "frequency": "monthly",
                "completedDates": [],
                "userId": "bob",
                "createdAt": "2026-02-01T09:00:00+00:00",
                "updatedAt": "2026-02-01T09:00:00+00:00",
            },
        }
    }
    (root / "data" / "habits.json").write_text(json.dumps(habits, indent=2), encoding="utf-8")

    os.environ["LIFECOMPASS_ROOT"] = str(root)
    yield root
    if "LIFECOMPASS_ROOT" in os.environ:
        del os.environ["LIFECOMPASS_ROOT"]

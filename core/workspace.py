"""Workspace root, timezone, path helpers for LifeCompass."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.fileio import read_yaml

logger = logging.getLogger(__name__)

DEFAULT_CHECKIN_REMINDER_TIME = "21:00"


def workspace_root() -> Path:
    """Get the workspace root directory (contains profile.yaml and data/)."""
    return Path(
        os.environ.get("LIFECOMPASS_ROOT", str(Path.home() / "lifecompass"))
    ).expanduser().resolve()


def load_profile(root: Path | None = None) -> dict[str, Any]:
    """Read profile.yaml, returning an empty dict if missing or unreadable."""
    try:
        return read_yaml(profile_path(root))
    except Exception as e:
        logger.warning("Could not read profile.yaml: %s", e)
        return {}


def _zone(name: Any) -> ZoneInfo | None:
    if not name:
        return None
    try:
        return ZoneInfo(str(name))
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone in profile: %r", name)
        return None


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Get user's timezone from profile.yaml, defaulting to UTC."""
    return _zone(load_profile(root).get("timezone")) or ZoneInfo("UTC")


def get_reminder_timezone(root: Path | None = None) -> ZoneInfo:
    """Timezone reminders are scheduled in; falls back to the user timezone."""
    profile = load_profile(root)
    return _zone(profile.get("reminder_timezone")) or get_user_timezone(root)


def get_checkin_reminder_time(root: Path | None = None) -> str:
    value = str(load_profile(root).get("checkin_reminder_time") or DEFAULT_CHECKIN_REMINDER_TIME)
    try:
        datetime.strptime(value, "%H:%M")
    except ValueError:
        logger.warning("Invalid checkin_reminder_time %r, using %s", value, DEFAULT_CHECKIN_REMINDER_TIME)
        return DEFAULT_CHECKIN_REMINDER_TIME
    return value


def today_str(root: Path | None = None) -> str:
    """Get today's date string (YYYY-MM-DD) in user's timezone."""
    tz = get_user_timezone(root)
    return datetime.now(tz).date().isoformat()


def now_local(root: Path | None = None) -> datetime:
    """Get current datetime in user's timezone."""
    tz = get_user_timezone(root)
    return datetime.now(tz)


# ── Path helpers ──────────────────────────────────────────────

def profile_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "profile.yaml"


def data_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data"


def collection_path(collection: str, root: Path | None = None) -> Path:
    return data_dir(root) / f"{collection}.json"

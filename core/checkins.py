"""Daily check-ins: one mood/energy/productivity record per user per day."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any

from core.models import CheckIn
from core.periods import parse_date_str
from core.store import create_document, query_documents, update_document

COLLECTION = "checkins"

SCORE_FIELDS = ("mood", "energy", "productivity")


def validate_checkin(checkin: dict[str, Any]) -> list[str]:
    errors = []
    try:
        parse_date_str(checkin.get("date", ""))
    except (TypeError, ValueError):
        errors.append(f"Invalid date: {checkin.get('date')}")
    for name in SCORE_FIELDS:
        value = checkin.get(name)
        if value is None:
            continue
        if not isinstance(value, int) or isinstance(value, bool) or not 1 <= value <= 10:
            errors.append(f"{name} must be integer 1-10")
    return errors


def save_checkin(checkin_data: dict[str, Any], user_id: str, root: Path | None = None) -> tuple[CheckIn, list[str]]:
    """Create the check-in for a day, or update the existing one. Returns (checkin, errors)."""
    errors = validate_checkin(checkin_data)
    if errors:
        return CheckIn(), errors

    data = dict(checkin_data)
    data["date"] = parse_date_str(data["date"]).isoformat()
    data["userId"] = user_id
    checkin = CheckIn.from_dict(data)

    existing = get_checkin_by_date(user_id, checkin.date, root)
    if existing is not None:
        checkin.id = existing.id
        update_document(COLLECTION, existing.id, checkin.to_dict(), root)
    else:
        checkin.id = create_document(COLLECTION, checkin.to_dict(), root)
    return checkin, []


def get_checkins(user_id: str, root: Path | None = None) -> list[CheckIn]:
    """All of a user's check-ins, newest first."""
    checkins = [CheckIn.from_dict(d) for d in query_documents(COLLECTION, root, userId=user_id)]
    return sorted(checkins, key=lambda c: c.date, reverse=True)


def get_checkin_by_date(user_id: str, day: date | str, root: Path | None = None) -> CheckIn | None:
    day_str = parse_date_str(day).isoformat()
    docs = query_documents(COLLECTION, root, userId=user_id, date=day_str)
    return CheckIn.from_dict(docs[0]) if docs else None


def has_checkin_on(user_id: str, day: date | str, root: Path | None = None) -> bool:
    return get_checkin_by_date(user_id, day, root) is not None

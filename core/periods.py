"""Period boundaries and date-string helpers for habit frequencies.

Every habit frequency partitions the calendar into periods:

- daily:   the single day
- weekly:  Sunday through Saturday (Sunday is day 0, not ISO Monday)
- monthly: first through last day of the month

Eligibility and streak computation both go through these helpers so a
date is always assigned to the same period by both.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta


DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"

VALID_FREQUENCIES = (DAILY, WEEKLY, MONTHLY)


def check_frequency(frequency: str) -> str:
    """Return *frequency* if valid, raise ValueError otherwise."""
    if frequency not in VALID_FREQUENCIES:
        raise ValueError(f"Invalid frequency: {frequency!r}")
    return frequency


# ── Date strings ──────────────────────────────────────────────


def normalize_date_str(value: str) -> str:
    """Drop any time-of-day suffix: '2026-01-31T10:00:00' -> '2026-01-31'."""
    return str(value).strip().split("T")[0]


def parse_date_str(value: str | date) -> date:
    """Parse a YYYY-MM-DD string (time suffix tolerated) into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(normalize_date_str(value))


def to_date_str(value: date | datetime) -> str:
    """Format a date as YYYY-MM-DD from its own (local) components.

    Aware datetimes are NOT converted to UTC first; the wall-clock date is
    what the user sees and what completions are keyed by.
    """
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


# ── Periods ───────────────────────────────────────────────────


def week_start(day: date) -> date:
    """Most recent Sunday on or before *day*."""
    # date.weekday(): Monday=0 .. Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _add_months(first_of_month: date, months: int) -> date:
    index = first_of_month.year * 12 + (first_of_month.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def period_start(day: date, frequency: str) -> date:
    check_frequency(frequency)
    if frequency == WEEKLY:
        return week_start(day)
    if frequency == MONTHLY:
        return day.replace(day=1)
    return day


def period_bounds(day: date, frequency: str) -> tuple[date, date]:
    """Return (inclusive start, exclusive end) of the period containing *day*."""
    start = period_start(day, frequency)
    if frequency == WEEKLY:
        return start, start + timedelta(days=7)
    if frequency == MONTHLY:
        return start, _add_months(start, 1)
    return start, start + timedelta(days=1)


def previous_period_start(start: date, frequency: str) -> date:
    """Start of the period immediately before the one beginning at *start*."""
    check_frequency(frequency)
    if frequency == WEEKLY:
        return start - timedelta(days=7)
    if frequency == MONTHLY:
        return _add_months(start.replace(day=1), -1)
    return start - timedelta(days=1)


def period_key(day: date, frequency: str) -> str:
    """Bucket key: the day (daily), its week's Sunday (weekly), or YYYY-MM (monthly)."""
    start = period_start(day, frequency)
    if frequency == MONTHLY:
        return start.strftime("%Y-%m")
    return start.isoformat()


def in_period(day: date, start: date, end: date) -> bool:
    return start <= day < end

"""Tests for core/periods.py — period boundaries and date strings."""

from datetime import date, datetime, timedelta, timezone

import pytest

from core.periods import (
    normalize_date_str,
    parse_date_str,
    period_bounds,
    period_key,
    previous_period_start,
    to_date_str,
    week_start,
)


def test_week_starts_on_sunday():
    # 2026-02-08 is a Sunday, 2026-02-14 the following Saturday
    assert week_start(date(2026, 2, 8)) == date(2026, 2, 8)
    assert week_start(date(2026, 2, 11)) == date(2026, 2, 8)
    assert week_start(date(2026, 2, 14)) == date(2026, 2, 8)
    assert week_start(date(2026, 2, 15)) == date(2026, 2, 15)


def test_week_is_not_iso_week():
    # Monday 2026-02-09 belongs to the week that began the day before
    assert week_start(date(2026, 2, 9)) == date(2026, 2, 8)


def test_period_bounds_daily():
    assert period_bounds(date(2026, 3, 5), "daily") == (date(2026, 3, 5), date(2026, 3, 6))


def test_period_bounds_weekly():
    assert period_bounds(date(2026, 2, 11), "weekly") == (date(2026, 2, 8), date(2026, 2, 15))


def test_period_bounds_monthly():
    assert period_bounds(date(2026, 2, 17), "monthly") == (date(2026, 2, 1), date(2026, 3, 1))
    assert period_bounds(date(2026, 12, 31), "monthly") == (date(2026, 12, 1), date(2027, 1, 1))


def test_every_day_lands_in_exactly_one_weekly_period():
    start = date(2026, 1, 1)
    for offset in range(60):
        d = start + timedelta(days=offset)
        lo, hi = period_bounds(d, "weekly")
        assert lo <= d < hi
        assert (hi - lo).days == 7


def test_period_keys():
    assert period_key(date(2026, 2, 11), "daily") == "2026-02-11"
    assert period_key(date(2026, 2, 11), "weekly") == "2026-02-08"
    assert period_key(date(2026, 2, 11), "monthly") == "2026-02"


def test_previous_period_start():
    assert previous_period_start(date(2026, 3, 1), "daily") == date(2026, 2, 28)
    assert previous_period_start(date(2026, 2, 8), "weekly") == date(2026, 2, 1)
    assert previous_period_start(date(2026, 1, 1), "monthly") == date(2025, 12, 1)
    assert previous_period_start(date(2026, 3, 1), "monthly") == date(2026, 2, 1)


def test_unknown_frequency_raises():
    with pytest.raises(ValueError):
        period_bounds(date(2026, 2, 11), "yearly")
    with pytest.raises(ValueError):
        previous_period_start(date(2026, 2, 11), "")


def test_normalize_and_parse_date_str():
    assert normalize_date_str("2026-01-31T23:30:00.000Z") == "2026-01-31"
    assert parse_date_str("2026-01-31") == date(2026, 1, 31)
    assert parse_date_str(datetime(2026, 1, 31, 23, 59)) == date(2026, 1, 31)
    with pytest.raises(ValueError):
        parse_date_str("31/01/2026")


def test_to_date_str_uses_local_components():
    # 23:30 at UTC-3 is already the next day in UTC; the local date must win
    late = datetime(2026, 1, 31, 23, 30, tzinfo=timezone(timedelta(hours=-3)))
    assert to_date_str(late) == "2026-01-31"
    assert to_date_str(date(2026, 2, 1)) == "2026-02-01"

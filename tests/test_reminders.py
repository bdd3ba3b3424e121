"""Tests for core/reminders.py — due checks and per-user fan-out."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from core.checkins import save_checkin
from core.habit_store import create_habit
from core.models import Habit
from core.notifications import register_token
from core.reminders import (
    build_scheduler,
    habit_reminder_due,
    run_checkin_reminders,
    run_habit_reminders,
)


class RecordingSender:
    def __init__(self):
        self.titles: list[tuple[str, str]] = []

    def __call__(self, message):
        self.titles.append((message.token, message.notification.title))
        return "ok"


def _at(day: str, hhmm: str) -> datetime:
    return datetime.fromisoformat(f"{day}T{hhmm}:00").replace(tzinfo=timezone.utc)


def test_daily_reminder_due_until_done_today():
    habit = Habit(frequency="daily", reminder_time="08:00", reminder_enabled=True,
                  completed_dates=["2026-02-10"])
    assert habit_reminder_due(habit, _at("2026-02-11", "08:00")) is True
    assert habit_reminder_due(habit, _at("2026-02-11", "08:01")) is False
    habit.completed_dates.append("2026-02-11")
    assert habit_reminder_due(habit, _at("2026-02-11", "08:00")) is False


def test_weekly_reminder_skipped_once_week_is_satisfied():
    habit = Habit(frequency="weekly", reminder_time="18:30", reminder_enabled=True,
                  completed_dates=["2026-02-08"])
    assert habit_reminder_due(habit, _at("2026-02-11", "18:30")) is False
    assert habit_reminder_due(habit, _at("2026-02-15", "18:30")) is True


def test_disabled_reminder_never_due():
    habit = Habit(frequency="daily", reminder_time="08:00", reminder_enabled=False)
    assert habit_reminder_due(habit, _at("2026-02-11", "08:00")) is False


def test_run_habit_reminders(workspace):
    register_token("alice", "alice-phone", workspace)
    sender = RecordingSender()
    assert run_habit_reminders(_at("2026-02-11", "08:00"), workspace, sender) == 1
    assert sender.titles == [("alice-phone", "Habit time: Read")]


def test_run_habit_reminders_isolates_user_failures(workspace, monkeypatch):
    register_token("bob", "bob-phone", workspace)
    register_token("alice", "alice-phone", workspace)

    import core.reminders as reminders
    real_load = reminders.load_habits

    def flaky_load(user_id, root=None):
        if user_id == "bob":
            raise OSError("disk error")
        return real_load(user_id, root)

    monkeypatch.setattr(reminders, "load_habits", flaky_load)
    sender = RecordingSender()
    assert run_habit_reminders(_at("2026-02-11", "08:00"), workspace, sender) == 1
    assert sender.titles[0][0] == "alice-phone"


def test_run_checkin_reminders_skips_users_who_checked_in(workspace):
    register_token("alice", "alice-phone", workspace)
    register_token("bob", "bob-phone", workspace)
    save_checkin({"date": "2026-02-11", "mood": 7}, "alice", workspace)
    sender = RecordingSender()
    assert run_checkin_reminders(_at("2026-02-11", "21:00"), workspace, sender) == 1
    assert [token for token, _ in sender.titles] == ["bob-phone"]


def test_build_scheduler_registers_jobs(workspace):
    scheduler = build_scheduler(workspace, RecordingSender())
    assert {job.id for job in scheduler.get_jobs()} == {"habit_reminders", "checkin_reminders"}


def _use_reminder_timezone(workspace, zone: str) -> ZoneInfo:
    profile = workspace / "profile.yaml"
    profile.write_text(profile.read_text(encoding="utf-8") + f"reminder_timezone: {zone}\n", encoding="utf-8")
    return ZoneInfo(zone)


def test_habit_done_today_in_user_timezone_is_not_reminded(workspace):
    la = _use_reminder_timezone(workspace, "America/Los_Angeles")
    create_habit(
        {"name": "Stretch", "frequency": "daily", "reminderTime": "20:00",
         "reminderEnabled": True, "completedDates": ["2026-02-12"]},
        "carol", "2026-02-12", workspace,
    )
    register_token("carol", "carol-phone", workspace)
    sender = RecordingSender()
    # 20:00 in Los Angeles on the 11th is already the 12th in UTC
    assert run_habit_reminders(datetime(2026, 2, 11, 20, 0, tzinfo=la), workspace, sender) == 0
    assert sender.titles == []
    assert run_habit_reminders(datetime(2026, 2, 12, 20, 0, tzinfo=la), workspace, sender) == 1


def test_checkin_day_follows_user_timezone(workspace):
    la = _use_reminder_timezone(workspace, "America/Los_Angeles")
    register_token("alice", "alice-phone", workspace)
    save_checkin({"date": "2026-02-12", "mood": 6}, "alice", workspace)
    sender = RecordingSender()
    assert run_checkin_reminders(datetime(2026, 2, 11, 21, 0, tzinfo=la), workspace, sender) == 0

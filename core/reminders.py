"""Scheduled habit and check-in reminders.

Each run walks every user with a registered device and sends whatever is
due. A failure for one user is logged and the run moves on to the next.
"""

from __future__ import annotations

import logging
import os
import signal
from datetime import date, datetime
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from core.checkins import has_checkin_on
from core.habit_store import load_habits
from core.habits import can_complete_in_current_period, is_completed_on
from core.models import Habit
from core.notifications import (
    Sender,
    send_checkin_reminder,
    send_habit_reminder,
    users_with_tokens,
)
from core.periods import DAILY
from core.workspace import (
    get_checkin_reminder_time,
    get_reminder_timezone,
    get_user_timezone,
    workspace_root,
)

logger = logging.getLogger(__name__)


def _user_today(now: datetime, root: Path | None) -> date:
    """The calendar day in the user's timezone, where completions are recorded."""
    return now.astimezone(get_user_timezone(root)).date()


def habit_reminder_due(habit: Habit, now: datetime, today: date | None = None) -> bool:
    """True when *habit* wants a reminder at this minute and is still open.

    *now* is in the reminder timezone and is matched against the reminder
    time. *today* is the user's calendar day and defaults to ``now.date()``.
    """
    if not habit.reminder_enabled or not habit.reminder_time:
        return False
    if habit.reminder_time != now.strftime("%H:%M"):
        return False
    today = today or now.date()
    if habit.frequency == DAILY:
        return not is_completed_on(habit.completed_dates, today)
    return can_complete_in_current_period(habit.frequency, habit.completed_dates, today)


def run_habit_reminders(now: datetime, root: Path | None = None, sender: Sender | None = None) -> int:
    """Send due habit reminders. Returns how many reached at least one device."""
    logger.info("Checking habit reminders for %s", now.strftime("%Y-%m-%d %H:%M"))
    today = _user_today(now, root)
    total_sent = 0
    for user_id in users_with_tokens(root):
        try:
            for habit in load_habits(user_id, root):
                if not habit_reminder_due(habit, now, today):
                    continue
                sent = send_habit_reminder(
                    user_id, habit, f"Time to complete: {habit.name}", root, sender
                )
                if sent > 0:
                    total_sent += 1
                    logger.info("Habit reminder %s sent to %s", habit.id, user_id)
        except Exception:
            logger.exception("Habit reminders failed for user %s", user_id)
    logger.info("Habit reminders sent: %d", total_sent)
    return total_sent


def run_checkin_reminders(now: datetime, root: Path | None = None, sender: Sender | None = None) -> int:
    """Remind users who have not checked in today. Returns users reached."""
    today = _user_today(now, root)
    total_sent = 0
    for user_id in users_with_tokens(root):
        try:
            if has_checkin_on(user_id, today, root):
                continue
            if send_checkin_reminder(user_id, root, sender) > 0:
                total_sent += 1
        except Exception:
            logger.exception("Check-in reminder failed for user %s", user_id)
    logger.info("Check-in reminders sent: %d", total_sent)
    return total_sent


# ── Scheduler ─────────────────────────────────────────────────


def build_scheduler(root: Path | None = None, sender: Sender | None = None) -> BackgroundScheduler:
    """A scheduler with the habit (every minute) and check-in (daily) jobs."""
    if root is None:
        root = workspace_root()
    tz = get_reminder_timezone(root)
    hour, minute = get_checkin_reminder_time(root).split(":")

    scheduler = BackgroundScheduler(timezone=tz)
    scheduler.add_job(
        lambda: run_habit_reminders(datetime.now(tz), root, sender),
        CronTrigger(minute="*", timezone=tz),
        id="habit_reminders",
        replace_existing=True,
    )
    scheduler.add_job(
        lambda: run_checkin_reminders(datetime.now(tz), root, sender),
        CronTrigger(hour=int(hour), minute=int(minute), timezone=tz),
        id="checkin_reminders",
        replace_existing=True,
    )
    return scheduler


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("LIFECOMPASS_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    root = workspace_root()
    scheduler = build_scheduler(root)
    scheduler.start()
    logger.info("Reminder scheduler started for %s", root)
    try:
        signal.pause()
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.shutdown()


if __name__ == "__main__":
    main()

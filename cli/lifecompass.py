#!/usr/bin/env python3
"""LifeCompass TUI — habit tracker in the terminal, powered by Textual."""

from __future__ import annotations

import logging
import os
import sys

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import DataTable, Footer, Header, Label, Static

from core import (
    Habit,
    can_complete_in_current_period,
    compute_streak,
    get_checkin_by_date,
    is_completed_on,
    last_n_days,
    load_habits,
    mark_complete,
    refresh_streaks,
    today_str,
    unmark_complete,
    workspace_root,
)

logger = logging.getLogger(__name__)


def _user() -> str:
    return os.environ.get("LIFECOMPASS_USER", "guest")


CSS = """
Screen {
    layout: vertical;
}

#summary-bar {
    height: 1;
    background: $primary-background;
    color: $text;
    padding: 0 2;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

#habits-table {
    height: 1fr;
}

#checkin-info {
    height: auto;
    padding: 0 1;
    color: $text-muted;
}
"""


def _week_strip(habit: Habit, today: str) -> str:
    return "".join(
        "■" if is_completed_on(habit.completed_dates, d["date"]) else "·"
        for d in last_n_days(today)
    )


class HabitsView(Vertical):
    """Habit list with streaks and this period's status."""

    def compose(self) -> ComposeResult:
        yield Label("Habits", classes="section-title")
        yield DataTable(id="habits-table", cursor_type="row")
        yield Static(id="checkin-info")

    def on_mount(self) -> None:
        table: DataTable = self.query_one("#habits-table", DataTable)
        table.add_columns("", "Habit", "Frequency", "Streak", "Last 7 days", "This period")


class LifeCompassApp(App):
    """LifeCompass — habits and streaks."""

    TITLE = "LifeCompass"
    CSS = CSS

    BINDINGS = [
        Binding("space", "toggle_today", "Done today"),
        Binding("r", "refresh", "Refresh"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._habits: dict[str, Habit] = {}

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="summary-bar")
        yield HabitsView()
        yield Footer()

    def on_mount(self) -> None:
        self._load_data()

    def _load_data(self) -> None:
        root = workspace_root()
        today = today_str(root)
        habits = load_habits(_user(), root)
        self._habits = {h.id: h for h in habits}

        table = self.query_one("#habits-table", DataTable)
        table.clear()
        best = 0
        for h in habits:
            streak = compute_streak(h.frequency, h.completed_dates, today)
            best = max(best, streak)
            if is_completed_on(h.completed_dates, today) or not can_complete_in_current_period(
                h.frequency, h.completed_dates, today
            ):
                period = "done"
            else:
                period = "open"
            table.add_row(
                h.icon or "•",
                h.name,
                h.frequency,
                f"🔥 {streak}",
                _week_strip(h, today),
                period,
                key=h.id,
            )

        self.query_one("#summary-bar", Static).update(
            f"{_user()} · {today} · {len(habits)} habits · best streak {best}"
        )
        checkin = get_checkin_by_date(_user(), today, root)
        self.query_one("#checkin-info", Static).update(
            f"Check-in: mood {checkin.mood or '-'}, energy {checkin.energy or '-'}, "
            f"productivity {checkin.productivity or '-'}"
            if checkin else "Check-in: not yet today"
        )

    def _selected_habit(self) -> Habit | None:
        table = self.query_one("#habits-table", DataTable)
        if not self._habits or table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return self._habits.get(str(row_key.value))

    def action_toggle_today(self) -> None:
        habit = self._selected_habit()
        if habit is None:
            return
        root = workspace_root()
        today = today_str(root)
        if is_completed_on(habit.completed_dates, today):
            unmark_complete(habit.id, today, today, root)
        elif can_complete_in_current_period(habit.frequency, habit.completed_dates, today):
            mark_complete(habit.id, today, today, root)
        else:
            self.notify(f"{habit.name} is already done for this {habit.frequency} period.",
                        title="Nothing to do", severity="information")
            return
        self._load_data()

    def action_refresh(self) -> None:
        self._do_refresh()

    @work(thread=True)
    def _do_refresh(self) -> None:
        """Recompute cached streaks in a worker thread, then reload."""
        try:
            root = workspace_root()
            changed = refresh_streaks(_user(), today_str(root), root)
            self.call_from_thread(self.notify, f"{len(changed)} streak(s) updated", title="Refreshed")
            self.call_from_thread(self._load_data)
        except Exception as e:
            logger.exception("Refresh failed")
            self.call_from_thread(self.notify, f"Error: {e}", title="Error", severity="error")


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = workspace_root()
    if not root.exists():
        print(f"Workspace not found: {root}")
        print("Set LIFECOMPASS_ROOT to your workspace directory.")
        sys.exit(1)

    app = LifeCompassApp()
    app.run()


if __name__ == "__main__":
    main()

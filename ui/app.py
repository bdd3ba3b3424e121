from __future__ import annotations

import os
import secrets
from typing import Any

from core import (
    workspace_root as _workspace_root,
    today_str as _today_str,
    read_text as _read_text,
    profile_path as _profile_path_fn,
    parse_date_str,
    habits_with_computed_fields,
    load_habits,
    get_habit,
    create_habit,
    update_habit as core_update_habit,
    delete_habit as core_delete_habit,
    mark_complete,
    unmark_complete,
    refresh_streaks,
    save_checkin,
    get_checkins,
    get_checkin_by_date,
    Habit,
)
from core.notifications import (
    register_token,
    send_checkin_reminder,
    send_habit_reminder,
    unregister_token,
)

from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.responses import HTMLResponse
from fastapi import Body
from fastapi.security import HTTPBasic, HTTPBasicCredentials


# ── HTML helpers ──────────────────────────────────────────────

def _escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


STYLE = """
body { font-family: system-ui, sans-serif; background: #0f1115; color: #e6e6e6; margin: 0; }
.container { max-width: 960px; margin: 0 auto; padding: 24px; }
.card { background: #171a21; border-radius: 10px; padding: 16px; margin-bottom: 16px; }
.muted { color: #8a8f98; } .small { font-size: 13px; }
table { width: 100%; border-collapse: collapse; }
td, th { padding: 6px 8px; text-align: left; border-bottom: 1px solid #242833; }
.dot { display: inline-block; width: 12px; height: 12px; border-radius: 3px; margin-right: 2px; background: #2a2f3a; }
.dot.done { background: var(--c); }
.pill { padding: 2px 8px; border-radius: 999px; background: #242833; }
"""


# ── Auth ──────────────────────────────────────────────────────

app = FastAPI(title="LifeCompass UI", version="0.1.0")

security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("LIFECOMPASS_USERNAME", "")
    expected_password = os.environ.get("LIFECOMPASS_PASSWORD", "")

    if credentials is None:
        if not expected_username or not expected_password:
            return "guest"
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    if not expected_username or not expected_password:
        return "guest"

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def _owned_habit(habit_id: str, username: str) -> Habit:
    habit = get_habit(habit_id, _workspace_root())
    if habit is None or habit.user_id != username:
        raise HTTPException(status_code=404, detail=f"Habit not found: {habit_id}")
    return habit


def _day_from(payload: dict[str, Any], default: str) -> str:
    raw = payload.get("date") or default
    try:
        return parse_date_str(raw).isoformat()
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"Invalid date: {raw}")


# ── Pages ─────────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/", response_class=HTMLResponse)
def index(username: str = Depends(get_current_user)) -> HTMLResponse:
    root = _workspace_root()
    today = _today_str(root)
    habits = habits_with_computed_fields(load_habits(username, root), today)

    rows = []
    for h in habits:
        dots = "".join(
            f'<span class="dot{" done" if d["done"] else ""}" title="{d["day_name"]} {d["date"]}"></span>'
            for d in h["last7"]
        )
        state = "open" if h["canComplete"] and not h["completedToday"] else "done"
        rows.append(
            f"""
            <tr style="--c:{_escape(h['color'])}">
              <td>{_escape(h['icon'])} {_escape(h['name'])}</td>
              <td class="muted small">{_escape(h['frequency'])}</td>
              <td>\U0001f525 <b>{h['streak']}</b></td>
              <td>{dots}</td>
              <td><span class="pill small">{state}</span></td>
            </tr>
            """
        )

    checkin = get_checkin_by_date(username, today, root)
    checkin_txt = (
        f"mood {checkin.mood or '-'} · energy {checkin.energy or '-'} · productivity {checkin.productivity or '-'}"
        if checkin else "(no check-in yet today)"
    )
    profile_txt = _read_text(_profile_path_fn(root))

    html = f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>LifeCompass</title>
  <style>{STYLE}</style>
</head>
<body>
  <div class="container">
    <header>
      <h1>LifeCompass</h1>
      <div class="muted small">{_escape(username)} · {today}</div>
    </header>

    <section class="card">
      <h2>Habits</h2>
      {'<table><tr><th>Habit</th><th>Frequency</th><th>Streak</th><th>Last 7 days</th><th>This period</th></tr>' + ''.join(rows) + '</table>' if rows else '<div class="muted small">No habits yet. POST to <code>/api/habits</code> to create one.</div>'}
    </section>

    <section class="card">
      <h2>Today's check-in</h2>
      <div class="muted">{_escape(checkin_txt)}</div>
    </section>

    <section class="card">
      <details>
        <summary><b>profile.yaml</b></summary>
        <pre class="small">{_escape(profile_txt or "(missing)")}</pre>
      </details>
    </section>
  </div>
</body>
</html>"""
    return HTMLResponse(html)


# ── Habits ────────────────────────────────────────────────────

@app.get("/api/habits")
def api_list_habits(username: str = Depends(get_current_user)) -> dict[str, Any]:
    """List habits with computed streak and eligibility."""
    root = _workspace_root()
    today = _today_str(root)
    return {"habits": habits_with_computed_fields(load_habits(username, root), today), "today": today}


@app.post("/api/habits")
def api_create_habit(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    habit, errors = create_habit(payload, username, _today_str(root), root)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    return {"ok": True, "habit": habit.to_dict()}


@app.put("/api/habits/{habit_id}")
def api_update_habit(habit_id: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    _owned_habit(habit_id, username)
    updated, errors = core_update_habit(habit_id, payload, _today_str(root), root)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    return {"ok": True, "habit": updated.to_dict() if updated else None}


@app.delete("/api/habits/{habit_id}")
def api_delete_habit(habit_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    _owned_habit(habit_id, username)
    core_delete_habit(habit_id, _workspace_root())
    return {"ok": True, "habit_id": habit_id}


@app.post("/api/habits/refresh")
def api_refresh_streaks(username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Recompute cached streaks after a day rollover."""
    root = _workspace_root()
    changed = refresh_streaks(username, _today_str(root), root)
    return {"ok": True, "changed": changed}


@app.post("/api/habits/{habit_id}/complete")
def api_complete_habit(habit_id: str, payload: dict[str, Any] = Body(default={}), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    _owned_habit(habit_id, username)
    today = _today_str(root)
    habit = mark_complete(habit_id, _day_from(payload, today), today, root)
    return {"ok": True, "habit": habit.to_dict() if habit else None}


@app.post("/api/habits/{habit_id}/uncomplete")
def api_uncomplete_habit(habit_id: str, payload: dict[str, Any] = Body(default={}), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    _owned_habit(habit_id, username)
    today = _today_str(root)
    habit = unmark_complete(habit_id, _day_from(payload, today), today, root)
    return {"ok": True, "habit": habit.to_dict() if habit else None}


# ── Check-ins ─────────────────────────────────────────────────

@app.get("/api/checkins")
def api_list_checkins(username: str = Depends(get_current_user)) -> dict[str, Any]:
    return {"checkins": [c.to_dict() for c in get_checkins(username, _workspace_root())]}


@app.post("/api/checkins")
def api_save_checkin(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    data = {"date": _today_str(root), **payload}
    checkin, errors = save_checkin(data, username, root)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    return {"ok": True, "checkin": checkin.to_dict()}


@app.get("/api/checkins/{day}")
def api_get_checkin(day: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    day = _day_from({"date": day}, day)
    checkin = get_checkin_by_date(username, day, _workspace_root())
    if checkin is None:
        raise HTTPException(status_code=404, detail=f"No check-in for {day}")
    return {"checkin": checkin.to_dict()}


# ── Notifications ─────────────────────────────────────────────

@app.post("/api/notifications/tokens")
def api_register_token(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    token = str(payload.get("token", "")).strip()
    if not token:
        raise HTTPException(status_code=400, detail="Missing token")
    tokens = register_token(username, token, _workspace_root())
    return {"ok": True, "devices": len(tokens)}


@app.delete("/api/notifications/tokens")
def api_unregister_token(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    token = str(payload.get("token", "")).strip()
    removed = unregister_token(username, token, _workspace_root()) if token else False
    return {"ok": True, "removed": removed}


@app.post("/api/reminders/habit")
def api_send_habit_reminder(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Send a reminder for one habit right now."""
    habit_id = str(payload.get("habitId", ""))
    if not habit_id:
        raise HTTPException(status_code=400, detail="Missing habitId")
    habit = _owned_habit(habit_id, username)
    sent = send_habit_reminder(
        username, habit, f"Don't forget to complete: {habit.name}", _workspace_root()
    )
    return {"ok": True, "sent": sent > 0, "devices": sent}


@app.post("/api/reminders/checkin")
def api_send_checkin_reminder(username: str = Depends(get_current_user)) -> dict[str, Any]:
    sent = send_checkin_reminder(username, _workspace_root())
    return {"ok": True, "sent": sent > 0, "devices": sent}

"""LifeCompass core library — habit engine, storage and notifications.

Public API re-exports for convenient imports:
    from core import compute_streak, load_habits, mark_complete, ...
"""

# Workspace & paths
from core.workspace import (
    workspace_root,
    load_profile,
    get_user_timezone,
    get_reminder_timezone,
    get_checkin_reminder_time,
    today_str,
    now_local,
    profile_path,
    data_dir,
    collection_path,
)

# File I/O
from core.fileio import (
    read_text,
    read_json,
    read_yaml,
    write_json_atomic,
    locked_json,
)

# Periods
from core.periods import (
    DAILY,
    WEEKLY,
    MONTHLY,
    VALID_FREQUENCIES,
    check_frequency,
    normalize_date_str,
    parse_date_str,
    to_date_str,
    week_start,
    period_start,
    period_bounds,
    previous_period_start,
    period_key,
)

# Streak & eligibility engine
from core.habits import (
    can_complete_in_current_period,
    compute_streak,
    satisfied_periods,
    is_completed_on,
    habit_color,
    last_n_days,
    habits_with_computed_fields,
)

# Difficulty
from core.difficulty import (
    DIFFICULTY_XP,
    xp_for_difficulty,
    infer_difficulty,
)

# Habit storage
from core.habit_store import (
    validate_habit,
    load_habits,
    get_habit,
    create_habit,
    update_habit,
    delete_habit,
    mark_complete,
    unmark_complete,
    refresh_streaks,
)

# Check-ins
from core.checkins import (
    validate_checkin,
    save_checkin,
    get_checkins,
    get_checkin_by_date,
    has_checkin_on,
)

# Models
from core.models import (
    Habit,
    CheckIn,
    PushPayload,
)

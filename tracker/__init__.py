"""Habit tracker core library: streak/freeze engine, XP economy and storage.

Public API re-exports for convenient imports:
    from tracker import load_state, settle, complete, purchase_freeze, ...
"""

# Workspace & settings
from tracker.workspace import (
    Settings,
    workspace_root,
    load_settings,
    init_workspace,
    state_path,
    lock_path,
    legacy_state_path,
    settings_path,
)

# File I/O
from tracker.fileio import (
    read_text,
    read_json,
    read_yaml,
    write_text_atomic,
    write_json_atomic,
    write_yaml_atomic,
    locked,
)

# Calendar days
from tracker.days import (
    today,
    day_gap,
    parse_day,
    format_day,
    display_day,
)

# Errors
from tracker.errors import (
    HabitError,
    ValidationError,
    DuplicateKeyError,
    NotFoundError,
    AlreadyDoneToday,
    InsufficientFundsError,
    PersistenceError,
    MalformedImportError,
)

# Models
from tracker.models import (
    PERIODS,
    Habit,
    HabitState,
    normalize_period,
)

# XP & leveling
from tracker.progress import (
    FREEZE_PRICE,
    xp_for_completion,
    level,
    level_progress,
    motivation_message,
)

# Record store
from tracker.store import (
    load_state,
    save_state,
    add_habit,
    get_habit,
    delete_habit,
    list_habits,
    replace_all,
)

# Streak engine
from tracker.streaks import (
    Transition,
    Settlement,
    Completion,
    apply_gap,
    settle,
    complete,
)

# Economy
from tracker.economy import purchase_freeze, status

# Import / export
from tracker.transfer import (
    parse_import,
    export_json,
    export_csv,
    export_compat_csv,
)

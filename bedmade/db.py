"""SQLite outcome, goal and profile stores. All public functions return Pydantic models.

Every ``sqlite3.Error`` is re-raised as ``StoreUnavailable`` so callers can
decide whether to degrade or give up.
"""

from __future__ import annotations

import functools
import logging
import sqlite3
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Optional, TypeVar

from bedmade.config import get_db_path as _config_get_db_path
from bedmade.dates import parse_date_key
from bedmade.errors import MalformedHistoryEntry, StoreUnavailable
from bedmade.goals import DEFAULT_GOAL, parse_goal
from bedmade.models import (
    DailyOutcome,
    EarnedAchievement,
    GoalSelection,
    StreakState,
    UserProfile,
)
from bedmade.streaks import parse_history

log = logging.getLogger(__name__)

T = TypeVar("T")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS user_profiles (
    user_id         TEXT PRIMARY KEY,
    daily_goal      TEXT,
    current_streak  INTEGER NOT NULL DEFAULT 0,
    longest_streak  INTEGER NOT NULL DEFAULT 0,
    total_days      INTEGER NOT NULL DEFAULT 0,
    last_made_date  TEXT
);

CREATE TABLE IF NOT EXISTS daily_records (
    user_id     TEXT    NOT NULL,
    date        TEXT    NOT NULL,
    made        INTEGER NOT NULL,
    made_at     TEXT,
    confidence  REAL,
    PRIMARY KEY (user_id, date)
);

CREATE TABLE IF NOT EXISTS user_achievements (
    user_id     TEXT NOT NULL,
    code        TEXT NOT NULL,
    earned_at   TEXT NOT NULL,
    PRIMARY KEY (user_id, code)
);
"""


def _get_db_path() -> Path:
    """Return the database file path from config (or default)."""
    return _config_get_db_path()


def _store_call(func: Callable[..., T]) -> Callable[..., T]:
    """Translate sqlite errors into StoreUnavailable."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> T:
        try:
            return func(*args, **kwargs)
        except sqlite3.Error as exc:
            log.warning("Store call %s failed: %s", func.__name__, exc)
            raise StoreUnavailable(f"{func.__name__}: {exc}") from exc

    return wrapper


@_store_call
def get_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """Open a connection and ensure the schema exists."""
    path = db_path or _get_db_path()
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.executescript(_SCHEMA)
    return conn


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


@_store_call
def get_outcome(
    conn: sqlite3.Connection, user_id: str, day: date
) -> Optional[DailyOutcome]:
    """Fetch the outcome recorded for one day, if any."""
    row = conn.execute(
        "SELECT * FROM daily_records WHERE user_id = ? AND date = ?",
        (user_id, day.isoformat()),
    ).fetchone()
    if row is None:
        return None
    parsed = parse_history([dict(row)])
    return parsed[0] if parsed else None


@_store_call
def get_history(conn: sqlite3.Connection, user_id: str) -> list[DailyOutcome]:
    """Return a user's full outcome history, oldest first."""
    rows = conn.execute(
        "SELECT * FROM daily_records WHERE user_id = ? ORDER BY date ASC",
        (user_id,),
    ).fetchall()
    return parse_history(dict(r) for r in rows)


@_store_call
def upsert_outcome(
    conn: sqlite3.Connection, user_id: str, outcome: DailyOutcome
) -> DailyOutcome:
    """Insert or replace the outcome for ``outcome.date``."""
    conn.execute(
        """INSERT INTO daily_records (user_id, date, made, made_at, confidence)
           VALUES (?, ?, ?, ?, ?)
           ON CONFLICT(user_id, date) DO UPDATE SET
               made = excluded.made,
               made_at = excluded.made_at,
               confidence = excluded.confidence""",
        (
            user_id,
            outcome.date.isoformat(),
            int(outcome.made),
            outcome.made_at.isoformat() if outcome.made_at else None,
            outcome.confidence,
        ),
    )
    conn.commit()
    return outcome


@_store_call
def clear_all(conn: sqlite3.Connection, user_id: str) -> None:
    """Delete every outcome and achievement and zero the cached counters."""
    conn.execute("DELETE FROM daily_records WHERE user_id = ?", (user_id,))
    conn.execute("DELETE FROM user_achievements WHERE user_id = ?", (user_id,))
    conn.execute(
        """UPDATE user_profiles
           SET current_streak = 0, longest_streak = 0, total_days = 0,
               last_made_date = NULL
           WHERE user_id = ?""",
        (user_id,),
    )
    conn.commit()


# ---------------------------------------------------------------------------
# Profile & goal preference
# ---------------------------------------------------------------------------


def _ensure_profile(conn: sqlite3.Connection, user_id: str) -> sqlite3.Row:
    conn.execute(
        "INSERT OR IGNORE INTO user_profiles (user_id) VALUES (?)", (user_id,)
    )
    return conn.execute(
        "SELECT * FROM user_profiles WHERE user_id = ?", (user_id,)
    ).fetchone()


@_store_call
def get_goal_selection(conn: sqlite3.Connection, user_id: str) -> GoalSelection:
    """Return the user's goal, writing the default back when it is unset."""
    row = _ensure_profile(conn, user_id)
    stored = row["daily_goal"]
    goal = DEFAULT_GOAL if stored is None else parse_goal(stored)
    if stored != goal.value:
        conn.execute(
            "UPDATE user_profiles SET daily_goal = ? WHERE user_id = ?",
            (goal.value, user_id),
        )
    conn.commit()
    return goal


@_store_call
def set_goal_selection(
    conn: sqlite3.Connection, user_id: str, goal: GoalSelection
) -> GoalSelection:
    """Change the user's active goal window."""
    _ensure_profile(conn, user_id)
    conn.execute(
        "UPDATE user_profiles SET daily_goal = ? WHERE user_id = ?",
        (goal.value, user_id),
    )
    conn.commit()
    return goal


def _last_made_date(value: Optional[str], user_id: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_date_key(value)
    except MalformedHistoryEntry:
        log.warning("Ignoring corrupt last_made_date %r for %s", value, user_id)
        return None


@_store_call
def get_profile(conn: sqlite3.Connection, user_id: str) -> UserProfile:
    """Fetch (or create) the profile row for a user."""
    row = _ensure_profile(conn, user_id)
    conn.commit()
    return UserProfile(
        user_id=row["user_id"],
        daily_goal=parse_goal(row["daily_goal"]) if row["daily_goal"] else DEFAULT_GOAL,
        current_streak=row["current_streak"],
        longest_streak=row["longest_streak"],
        total_days=row["total_days"],
        last_made_date=_last_made_date(row["last_made_date"], user_id),
    )


@_store_call
def save_streak_state(
    conn: sqlite3.Connection,
    user_id: str,
    state: StreakState,
    last_made_date: Optional[date],
) -> None:
    """Cache derived streak counters on the profile row."""
    _ensure_profile(conn, user_id)
    conn.execute(
        """UPDATE user_profiles
           SET current_streak = ?, longest_streak = ?, total_days = ?,
               last_made_date = ?
           WHERE user_id = ?""",
        (
            state.current_streak,
            state.longest_streak,
            state.total_days,
            last_made_date.isoformat() if last_made_date else None,
            user_id,
        ),
    )
    conn.commit()


# ---------------------------------------------------------------------------
# Achievements
# ---------------------------------------------------------------------------


@_store_call
def list_earned_achievements(
    conn: sqlite3.Connection, user_id: str
) -> list[EarnedAchievement]:
    """List a user's earned achievements, oldest first."""
    rows = conn.execute(
        "SELECT code, earned_at FROM user_achievements WHERE user_id = ? "
        "ORDER BY earned_at ASC",
        (user_id,),
    ).fetchall()
    return [
        EarnedAchievement(code=r["code"], earned_at=datetime.fromisoformat(r["earned_at"]))
        for r in rows
    ]


@_store_call
def award_achievements(
    conn: sqlite3.Connection, user_id: str, codes: list[str]
) -> list[EarnedAchievement]:
    """Record newly earned achievements; already-earned codes are ignored."""
    now = datetime.now()
    conn.executemany(
        "INSERT OR IGNORE INTO user_achievements (user_id, code, earned_at) "
        "VALUES (?, ?, ?)",
        [(user_id, code, now.isoformat()) for code in codes],
    )
    conn.commit()
    return [EarnedAchievement(code=code, earned_at=now) for code in codes]

"""Tests for the database layer."""

from __future__ import annotations

import sqlite3
from datetime import date, datetime
from pathlib import Path

import pytest

from bedmade import db
from bedmade.errors import StoreUnavailable
from bedmade.models import DailyOutcome, GoalSelection, StreakState

USER = "alice"


@pytest.fixture()
def conn(tmp_path: Path):
    """Provide a fresh database for each test."""
    db_path = tmp_path / "test.db"
    connection = db.get_connection(db_path=db_path)
    yield connection
    connection.close()


class TestOutcomes:
    def test_upsert_and_get(self, conn) -> None:
        outcome = DailyOutcome(
            date=date(2024, 3, 1), made=True, made_at=datetime(2024, 3, 1, 7, 30), confidence=0.92
        )
        db.upsert_outcome(conn, USER, outcome)
        fetched = db.get_outcome(conn, USER, date(2024, 3, 1))
        assert fetched == outcome

    def test_get_missing(self, conn) -> None:
        assert db.get_outcome(conn, USER, date(2024, 3, 1)) is None

    def test_upsert_replaces_same_day(self, conn) -> None:
        day = date(2024, 3, 1)
        db.upsert_outcome(conn, USER, DailyOutcome(date=day, made=False))
        db.upsert_outcome(
            conn, USER, DailyOutcome(date=day, made=True, made_at=datetime(2024, 3, 1, 9))
        )
        history = db.get_history(conn, USER)
        assert len(history) == 1
        assert history[0].made is True

    def test_history_sorted_and_per_user(self, conn) -> None:
        db.upsert_outcome(conn, USER, DailyOutcome(date=date(2024, 3, 3), made=True))
        db.upsert_outcome(conn, USER, DailyOutcome(date=date(2024, 3, 1), made=True))
        db.upsert_outcome(conn, "bob", DailyOutcome(date=date(2024, 3, 2), made=True))
        history = db.get_history(conn, USER)
        assert [o.date for o in history] == [date(2024, 3, 1), date(2024, 3, 3)]

    def test_history_skips_malformed_rows(self, conn) -> None:
        db.upsert_outcome(conn, USER, DailyOutcome(date=date(2024, 3, 1), made=True))
        conn.execute(
            "INSERT INTO daily_records (user_id, date, made) VALUES (?, ?, ?)",
            (USER, "garbage", 1),
        )
        conn.commit()
        history = db.get_history(conn, USER)
        assert [o.date for o in history] == [date(2024, 3, 1)]

    def test_clear_all(self, conn) -> None:
        db.upsert_outcome(conn, USER, DailyOutcome(date=date(2024, 3, 1), made=True))
        db.save_streak_state(
            conn, USER, StreakState(current_streak=1, longest_streak=1, total_days=1), date(2024, 3, 1)
        )
        db.award_achievements(conn, USER, ["FIRST_BED"])

        db.clear_all(conn, USER)

        assert db.get_history(conn, USER) == []
        assert db.list_earned_achievements(conn, USER) == []
        profile = db.get_profile(conn, USER)
        assert profile.current_streak == 0
        assert profile.longest_streak == 0
        assert profile.total_days == 0
        assert profile.last_made_date is None


class TestGoalSelection:
    def test_default_written_back(self, conn) -> None:
        assert db.get_goal_selection(conn, USER) is GoalSelection.EARLY
        row = conn.execute(
            "SELECT daily_goal FROM user_profiles WHERE user_id = ?", (USER,)
        ).fetchone()
        assert row["daily_goal"] == "early"

    def test_set_and_get(self, conn) -> None:
        db.set_goal_selection(conn, USER, GoalSelection.LATE)
        assert db.get_goal_selection(conn, USER) is GoalSelection.LATE

    def test_legacy_morning_normalised(self, conn) -> None:
        conn.execute(
            "INSERT INTO user_profiles (user_id, daily_goal) VALUES (?, ?)", (USER, "morning")
        )
        conn.commit()
        assert db.get_goal_selection(conn, USER) is GoalSelection.EARLY
        row = conn.execute(
            "SELECT daily_goal FROM user_profiles WHERE user_id = ?", (USER,)
        ).fetchone()
        assert row["daily_goal"] == "early"

    def test_invalid_value_treated_as_early(self, conn) -> None:
        conn.execute(
            "INSERT INTO user_profiles (user_id, daily_goal) VALUES (?, ?)", (USER, "brunch")
        )
        conn.commit()
        assert db.get_goal_selection(conn, USER) is GoalSelection.EARLY


class TestProfile:
    def test_new_profile_defaults(self, conn) -> None:
        profile = db.get_profile(conn, USER)
        assert profile.user_id == USER
        assert profile.current_streak == 0
        assert profile.daily_goal is GoalSelection.EARLY

    def test_save_streak_state(self, conn) -> None:
        state = StreakState(current_streak=3, longest_streak=5, total_days=9)
        db.save_streak_state(conn, USER, state, date(2024, 3, 4))
        profile = db.get_profile(conn, USER)
        assert profile.current_streak == 3
        assert profile.longest_streak == 5
        assert profile.total_days == 9
        assert profile.last_made_date == date(2024, 3, 4)

    def test_corrupt_last_made_date_reads_as_none(self, conn) -> None:
        db.get_profile(conn, USER)
        conn.execute(
            "UPDATE user_profiles SET last_made_date = ?, current_streak = 2 WHERE user_id = ?",
            ("sometime", USER),
        )
        conn.commit()
        profile = db.get_profile(conn, USER)
        assert profile.last_made_date is None
        assert profile.current_streak == 2


class TestAchievements:
    def test_award_once(self, conn) -> None:
        db.award_achievements(conn, USER, ["FIRST_BED", "STREAK_3"])
        db.award_achievements(conn, USER, ["FIRST_BED"])
        codes = sorted(a.code for a in db.list_earned_achievements(conn, USER))
        assert codes == ["FIRST_BED", "STREAK_3"]


class TestStoreErrors:
    def test_closed_connection_raises_store_unavailable(self, conn) -> None:
        conn.close()
        with pytest.raises(StoreUnavailable):
            db.get_history(conn, USER)

    def test_store_unavailable_chains_sqlite_error(self, conn) -> None:
        conn.close()
        with pytest.raises(StoreUnavailable) as excinfo:
            db.upsert_outcome(conn, USER, DailyOutcome(date=date(2024, 3, 1), made=True))
        assert isinstance(excinfo.value.__cause__, sqlite3.Error)

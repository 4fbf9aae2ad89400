"""Tests for statistics, achievements and badges."""

from __future__ import annotations

from datetime import date, datetime

from bedmade.encouragement import (
    BADGE_EARLY,
    BADGE_LATE,
    BADGE_ON_TIME,
    badge_for,
    get_nudge,
    get_reminder,
    get_streak_message,
)
from bedmade.models import DailyOutcome, GoalSelection, GoalStatus, UserStats, VerificationResult
from bedmade.stats import compute_stats, evaluate_achievements, format_time_of_day


def _outcome(day: int, made: bool, hour: int | None = None, minute: int = 0) -> DailyOutcome:
    made_at = datetime(2024, 3, day, hour, minute) if hour is not None else None
    return DailyOutcome(date=date(2024, 3, day), made=made, made_at=made_at)


class TestFormatTimeOfDay:
    def test_morning(self) -> None:
        assert format_time_of_day(8 * 60) == "8:00 AM"

    def test_afternoon(self) -> None:
        assert format_time_of_day(13 * 60 + 5) == "1:05 PM"

    def test_midnight_and_noon(self) -> None:
        assert format_time_of_day(0) == "12:00 AM"
        assert format_time_of_day(12 * 60) == "12:00 PM"

    def test_rounds_up_to_next_hour(self) -> None:
        assert format_time_of_day(7 * 60 + 59.6) == "8:00 AM"


class TestComputeStats:
    def test_empty(self) -> None:
        stats = compute_stats([], date(2024, 3, 1))
        assert stats == UserStats()

    def test_rates_and_average(self) -> None:
        history = [
            _outcome(1, True, 7, 0),
            _outcome(2, True, 9, 0),
            _outcome(3, False),
            _outcome(4, True, 8, 0),
        ]
        stats = compute_stats(history, date(2024, 3, 4))
        assert stats.total_beds_made == 3
        assert stats.completion_rate == 75
        assert stats.early_bird_rate == 33
        assert stats.average_time == "8:00 AM"
        assert stats.current_streak == 1
        assert stats.longest_streak == 2

    def test_made_without_time(self) -> None:
        stats = compute_stats([_outcome(1, True)], date(2024, 3, 1))
        assert stats.early_bird_rate == 0
        assert stats.average_time == "8:00 AM"


class TestEvaluateAchievements:
    def test_nothing_for_empty_stats(self) -> None:
        assert evaluate_achievements(UserStats()) == []

    def test_first_bed_and_streaks(self) -> None:
        stats = UserStats(current_streak=2, longest_streak=8, total_beds_made=10)
        assert evaluate_achievements(stats) == ["FIRST_BED", "STREAK_3", "STREAK_7"]

    def test_skips_earned(self) -> None:
        stats = UserStats(current_streak=3, longest_streak=3, total_beds_made=3, early_bird_rate=50)
        assert evaluate_achievements(stats, ["FIRST_BED", "STREAK_3"]) == ["EARLY_BIRD"]

    def test_thirty_day_streak(self) -> None:
        stats = UserStats(current_streak=30, longest_streak=30, total_beds_made=30)
        assert "STREAK_30" in evaluate_achievements(stats)


class TestBadges:
    def test_badges(self) -> None:
        assert badge_for(GoalStatus(is_early=True)) == BADGE_EARLY
        assert badge_for(GoalStatus(is_within_goal=True)) == BADGE_ON_TIME
        assert badge_for(GoalStatus()) == BADGE_LATE

    def test_nudge_non_empty(self) -> None:
        result = VerificationResult(
            date=date(2024, 3, 1), goal=GoalSelection.MID, is_made_today=True, is_within_goal=True
        )
        assert get_nudge(result)
        not_made = VerificationResult(date=date(2024, 3, 1), goal=GoalSelection.MID)
        assert get_nudge(not_made)

    def test_streak_message(self) -> None:
        assert "No active streak" in get_streak_message(0)
        assert get_streak_message(1).startswith("1 day streak")
        assert get_streak_message(5).startswith("5 day streak")

    def test_reminder(self) -> None:
        assert get_reminder(True, 4).startswith("Already done today")
        assert "3 day streak" in get_reminder(False, 3)
        assert get_reminder(False, 0)

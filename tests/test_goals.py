"""Tests for goal windows and classification."""

from __future__ import annotations

import logging
from datetime import datetime

import pytest

from bedmade.errors import InvalidGoalSelection
from bedmade.goals import (
    DEFAULT_GOAL,
    GOAL_WINDOWS,
    classify,
    coerce_goal,
    format_window,
    goal_label,
    is_past_goal_time,
    parse_goal,
)
from bedmade.models import GoalSelection


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 3, 1, hour, minute)


class TestClassify:
    def test_mid_within(self) -> None:
        status = classify(_at(9), GoalSelection.MID)
        assert status.is_within_goal
        assert not status.is_early
        assert not status.is_late

    def test_mid_late(self) -> None:
        status = classify(_at(11), GoalSelection.MID)
        assert not status.is_within_goal
        assert not status.is_early
        assert status.is_late

    def test_mid_early(self) -> None:
        status = classify(_at(7), GoalSelection.MID)
        assert not status.is_within_goal
        assert status.is_early

    @pytest.mark.parametrize("goal", list(GoalSelection))
    def test_start_boundary_is_within(self, goal: GoalSelection) -> None:
        start, _ = GOAL_WINDOWS[goal]
        status = classify(_at(start // 60, start % 60), goal)
        assert status.is_within_goal
        assert not status.is_early

    @pytest.mark.parametrize("goal", list(GoalSelection))
    def test_end_boundary_is_late(self, goal: GoalSelection) -> None:
        _, end = GOAL_WINDOWS[goal]
        status = classify(_at(end // 60, end % 60), goal)
        assert not status.is_within_goal
        assert not status.is_early

    @pytest.mark.parametrize("goal", list(GoalSelection))
    def test_minute_before_start_is_early(self, goal: GoalSelection) -> None:
        start, _ = GOAL_WINDOWS[goal]
        t = start - 1
        assert classify(_at(t // 60, t % 60), goal).is_early

    def test_seconds_ignored(self) -> None:
        status = classify(datetime(2024, 3, 1, 7, 59, 59), GoalSelection.EARLY)
        assert status.is_within_goal


class TestParseGoal:
    def test_values(self) -> None:
        assert parse_goal("early") is GoalSelection.EARLY
        assert parse_goal("mid") is GoalSelection.MID
        assert parse_goal("late") is GoalSelection.LATE

    def test_case_and_whitespace(self) -> None:
        assert parse_goal("  LATE ") is GoalSelection.LATE

    def test_morning_alias(self) -> None:
        assert parse_goal("morning") is GoalSelection.EARLY

    def test_enum_passthrough(self) -> None:
        assert parse_goal(GoalSelection.MID) is GoalSelection.MID

    def test_invalid_falls_back_and_logs(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="bedmade.goals"):
            assert parse_goal("brunch") is DEFAULT_GOAL
        assert "brunch" in caplog.text

    def test_none_falls_back(self) -> None:
        assert parse_goal(None) is GoalSelection.EARLY

    def test_coerce_goal_is_strict(self) -> None:
        with pytest.raises(InvalidGoalSelection):
            coerce_goal("brunch")


class TestHelpers:
    def test_past_goal_time(self) -> None:
        assert not is_past_goal_time(_at(7, 59), GoalSelection.EARLY)
        assert is_past_goal_time(_at(8), GoalSelection.EARLY)
        assert is_past_goal_time(_at(12), GoalSelection.LATE)
        assert not is_past_goal_time(_at(12), None)

    def test_format_window(self) -> None:
        assert format_window(GoalSelection.MID) == "08:00-10:00"

    def test_goal_label(self) -> None:
        assert goal_label(GoalSelection.MID) == "Double Latte (8am-10am)"

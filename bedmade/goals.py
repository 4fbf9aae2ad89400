"""Goal windows and on-time classification."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from bedmade.dates import local_minutes
from bedmade.errors import InvalidGoalSelection
from bedmade.models import GoalSelection, GoalStatus

log = logging.getLogger(__name__)

DEFAULT_GOAL = GoalSelection.EARLY

# Half-open [start, end) windows in minutes since local midnight.
GOAL_WINDOWS: dict[GoalSelection, tuple[int, int]] = {
    GoalSelection.EARLY: (6 * 60, 8 * 60),
    GoalSelection.MID: (8 * 60, 10 * 60),
    GoalSelection.LATE: (10 * 60, 12 * 60),
}

GOAL_INFO: dict[GoalSelection, dict[str, str]] = {
    GoalSelection.EARLY: {
        "label": "Espresso Shot",
        "time_range": "6am-8am",
        "description": "Quick caffeine jolt to start your day!",
    },
    GoalSelection.MID: {
        "label": "Double Latte",
        "time_range": "8am-10am",
        "description": "A leisurely morning routine",
    },
    GoalSelection.LATE: {
        "label": "Third Cup Kicking In",
        "time_range": "10am-12pm",
        "description": "For the late risers who need multiple cups!",
    },
}

# Older profiles stored "morning" before the three-window goals existed.
_ALIASES: dict[str, GoalSelection] = {"morning": GoalSelection.EARLY}


def coerce_goal(value: object) -> GoalSelection:
    """Strict conversion; raises InvalidGoalSelection on unknown values."""
    if isinstance(value, GoalSelection):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        try:
            return GoalSelection(key)
        except ValueError:
            pass
    raise InvalidGoalSelection(f"Unknown goal selection {value!r}")


def parse_goal(value: object) -> GoalSelection:
    """Normalise a stored goal value, falling back to the default goal."""
    try:
        return coerce_goal(value)
    except InvalidGoalSelection:
        log.warning("Invalid goal selection %r; using %s", value, DEFAULT_GOAL.value)
        return DEFAULT_GOAL


def classify(made_at: datetime, goal: GoalSelection) -> GoalStatus:
    """Classify a verification time as early, on time, or late."""
    start, end = GOAL_WINDOWS[goal]
    t = local_minutes(made_at)
    return GoalStatus(is_within_goal=start <= t < end, is_early=t < start)


def is_past_goal_time(now: datetime, goal: Optional[GoalSelection]) -> bool:
    """True once the local time has reached the end of the goal window."""
    if goal is None:
        return False
    _, end = GOAL_WINDOWS[goal]
    return local_minutes(now) >= end


def format_window(goal: GoalSelection) -> str:
    """Render a goal window as ``HH:MM-HH:MM``."""
    start, end = GOAL_WINDOWS[goal]
    return f"{start // 60:02d}:{start % 60:02d}-{end // 60:02d}:{end % 60:02d}"


def goal_label(goal: GoalSelection) -> str:
    """Human label, e.g. ``Double Latte (8am-10am)``."""
    info = GOAL_INFO[goal]
    return f"{info['label']} ({info['time_range']})"

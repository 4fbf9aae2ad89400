"""Goal badges and the short messages shown after a verification."""

from __future__ import annotations

import random

from bedmade.models import GoalStatus, VerificationResult

BADGE_EARLY = "Superstar"
BADGE_ON_TIME = "Goal Achieved"
BADGE_LATE = "Goal Missed"

_MESSAGES: dict[str, list[str]] = {
    BADGE_EARLY: [
        "Up before your goal window. Superstar!",
        "Early and tidy. The day is already going well.",
        "You beat the clock this morning.",
    ],
    BADGE_ON_TIME: [
        "Right on time. Nicely done.",
        "Goal window hit. Keep the rhythm going.",
        "Another morning, another made bed.",
    ],
    BADGE_LATE: [
        "A bit past your window, but the bed is made. That still counts.",
        "Late is fine. Made is what matters for the streak.",
        "You got there. Tomorrow might be a little earlier.",
    ],
}

_NOT_MADE_MESSAGES: list[str] = [
    "Not quite yet. Straighten the sheets and try another photo.",
    "Almost there. Pull up the covers and give it another go.",
    "The pillows are waiting for you. Try again when it is ready.",
]


def badge_for(status: GoalStatus) -> str:
    """Map a goal status to its badge label."""
    if status.is_early:
        return BADGE_EARLY
    if status.is_within_goal:
        return BADGE_ON_TIME
    return BADGE_LATE


def get_nudge(result: VerificationResult) -> str:
    """Return a message matching the outcome of a verification."""
    if not result.is_made_today:
        return random.choice(_NOT_MADE_MESSAGES)
    status = GoalStatus(is_within_goal=result.is_within_goal, is_early=result.is_early)
    return random.choice(_MESSAGES[badge_for(status)])


def get_streak_message(current_streak: int) -> str:
    """One-line streak caption for the status panel."""
    if current_streak == 0:
        return "No active streak. Today is a good day to start one."
    if current_streak == 1:
        return "1 day streak! Keep it going!"
    return f"{current_streak} day streak! Keep it going!"


_REMINDERS: list[str] = [
    "Your bed is waiting. Two minutes and it is done.",
    "Pull up the covers, fluff the pillows, snap a photo.",
    "Small win available: make the bed.",
]


def get_reminder(made_today: bool, current_streak: int) -> str:
    """Message for a nudge outside of a verification."""
    if made_today:
        return f"Already done today. {get_streak_message(current_streak)}"
    if current_streak > 0:
        return f"Make it today to keep your {current_streak} day streak alive."
    return random.choice(_REMINDERS)

"""Dashboard statistics and achievement rules."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from bedmade import streaks
from bedmade.dates import local_minutes
from bedmade.models import Achievement, DailyOutcome, UserStats

EARLY_BIRD_HOUR = 8  # made before 08:00 local
_DEFAULT_AVERAGE_MINUTES = 8 * 60

ACHIEVEMENTS: list[Achievement] = [
    Achievement(code="FIRST_BED", name="First Bed", description="Made your bed for the first time."),
    Achievement(code="STREAK_3", name="Three in a Row", description="A 3-day streak.", required_streak=3),
    Achievement(code="STREAK_7", name="Full Week", description="A 7-day streak.", required_streak=7),
    Achievement(code="STREAK_14", name="Fortnight", description="A 14-day streak.", required_streak=14),
    Achievement(code="STREAK_30", name="Month of Mornings", description="A 30-day streak.", required_streak=30),
    Achievement(code="EARLY_BIRD", name="Early Bird", description="Made your bed before 8 AM."),
]

_BY_CODE: dict[str, Achievement] = {a.code: a for a in ACHIEVEMENTS}


def get_achievement(code: str) -> Achievement | None:
    return _BY_CODE.get(code)


def format_time_of_day(minutes: float) -> str:
    """Format minutes since midnight as ``H:MM AM``."""
    hours = int(minutes // 60)
    mins = round(minutes % 60)
    if mins == 60:
        hours, mins = hours + 1, 0
    hours %= 24
    period = "PM" if hours >= 12 else "AM"
    hours12 = hours % 12 or 12
    return f"{hours12}:{mins:02d} {period}"


def compute_stats(history: Iterable[DailyOutcome], today: date) -> UserStats:
    """Summarise a user's history for the stats view."""
    outcomes = list(history)
    state = streaks.compute(outcomes, today)

    made = [o for o in outcomes if o.made]
    timed = [o for o in made if o.made_at is not None]
    early = [o for o in timed if local_minutes(o.made_at) < EARLY_BIRD_HOUR * 60]  # type: ignore[arg-type]

    completion = len(made) / len(outcomes) * 100 if outcomes else 0
    early_rate = len(early) / len(made) * 100 if made else 0
    if timed:
        average = sum(local_minutes(o.made_at) for o in timed) / len(timed)  # type: ignore[arg-type]
    else:
        average = _DEFAULT_AVERAGE_MINUTES

    return UserStats(
        current_streak=state.current_streak,
        longest_streak=state.longest_streak,
        total_beds_made=state.total_days,
        completion_rate=round(completion),
        early_bird_rate=round(early_rate),
        average_time=format_time_of_day(average),
    )


def evaluate_achievements(stats: UserStats, earned: Iterable[str] = ()) -> list[str]:
    """Return codes of achievements the stats qualify for but are not yet earned."""
    already = set(earned)
    best = max(stats.current_streak, stats.longest_streak)
    new: list[str] = []
    for achievement in ACHIEVEMENTS:
        if achievement.code in already:
            continue
        if achievement.required_streak is not None:
            qualifies = best >= achievement.required_streak
        elif achievement.code == "FIRST_BED":
            qualifies = stats.total_beds_made > 0
        elif achievement.code == "EARLY_BIRD":
            qualifies = stats.early_bird_rate > 0
        else:
            qualifies = False
        if qualifies:
            new.append(achievement.code)
    return new

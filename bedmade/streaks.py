"""Streak calculation over a user's daily outcome history.

Streaks are always derived from the full history, never patched
incrementally.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any, Optional

from pydantic import ValidationError

from bedmade.dates import days_between, parse_date_key
from bedmade.errors import MalformedHistoryEntry
from bedmade.models import DailyOutcome, StreakState

log = logging.getLogger(__name__)


def _collapse_by_date(history: Iterable[DailyOutcome]) -> list[tuple[date, bool]]:
    """Sort ascending; a day with any made entry counts as made."""
    by_date: dict[date, bool] = {}
    for outcome in history:
        by_date[outcome.date] = by_date.get(outcome.date, False) or outcome.made
    return sorted(by_date.items())


def _longest_run(days: list[tuple[date, bool]]) -> int:
    longest = 0
    running = 0
    prev_success: Optional[date] = None
    for day, made in days:
        if not made:
            running = 0
            continue
        if running > 0 and prev_success is not None and days_between(prev_success, day) == 1:
            running += 1
        else:
            running = 1
        prev_success = day
        longest = max(longest, running)
    return longest


def compute(history: Iterable[DailyOutcome], today: date) -> StreakState:
    """Compute current streak, longest streak and total made days."""
    days = _collapse_by_date(history)
    longest = _longest_run(days)

    successes = [day for day, made in days if made]
    if not successes:
        return StreakState(current_streak=0, longest_streak=longest, total_days=0)

    last_success = successes[-1]
    if days_between(last_success, today) > 1:
        current = 0
    else:
        current = 1
        for later, earlier in zip(reversed(successes), reversed(successes[:-1])):
            if days_between(earlier, later) != 1:
                break
            current += 1

    return StreakState(
        current_streak=current,
        longest_streak=longest,
        total_days=len(successes),
    )


def _parse_entry(entry: Any) -> DailyOutcome:
    if isinstance(entry, DailyOutcome):
        return entry
    if not isinstance(entry, Mapping):
        raise MalformedHistoryEntry(f"Unsupported history entry {entry!r}")

    made = entry.get("made")
    if made is None:
        raise MalformedHistoryEntry(f"Missing made flag in {dict(entry)!r}")

    made_at = entry.get("made_at")
    if isinstance(made_at, str):
        try:
            made_at = datetime.fromisoformat(made_at)
        except ValueError as exc:
            raise MalformedHistoryEntry(f"Unparseable made_at {made_at!r}") from exc

    try:
        return DailyOutcome(
            date=parse_date_key(entry.get("date")),
            made=bool(made),
            made_at=made_at,
            confidence=entry.get("confidence"),
        )
    except ValidationError as exc:
        raise MalformedHistoryEntry(str(exc)) from exc


def parse_history(entries: Iterable[Any]) -> list[DailyOutcome]:
    """Convert raw store rows into outcomes, skipping malformed ones."""
    outcomes: list[DailyOutcome] = []
    for entry in entries:
        try:
            outcomes.append(_parse_entry(entry))
        except MalformedHistoryEntry as exc:
            log.warning("Skipping malformed history entry: %s", exc)
    outcomes.sort(key=lambda o: o.date)
    return outcomes

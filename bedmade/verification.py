"""Record a bed verification and derive the user's streak and goal status.

The flow prefers a best-effort answer over a hard failure: once the user
has taken the photo, store errors only clear ``was_persisted`` on the
result instead of aborting.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime
from typing import Optional

from bedmade import db, goals, stats, streaks
from bedmade.dates import to_local_date_key
from bedmade.errors import StoreUnavailable
from bedmade.models import (
    ClassificationResult,
    DailyOutcome,
    GoalStatus,
    VerificationResult,
)

log = logging.getLogger(__name__)


def _merge_today(history: list[DailyOutcome], today_record: DailyOutcome) -> list[DailyOutcome]:
    """Replace whatever the store holds for today with the locally known record."""
    merged = [o for o in history if o.date != today_record.date]
    merged.append(today_record)
    merged.sort(key=lambda o: o.date)
    return merged


def record_verification(
    conn: sqlite3.Connection,
    user_id: str,
    made: bool,
    observed_at: datetime,
    confidence: Optional[float] = None,
) -> VerificationResult:
    """Upsert today's outcome and return the recomputed streak and goal status."""
    today = to_local_date_key(observed_at)
    persisted = True

    read_failed = False
    try:
        existing = db.get_outcome(conn, user_id, today)
    except StoreUnavailable:
        log.warning("Could not read today's record for %s; not saving this verification", user_id)
        existing = None
        read_failed = True

    if existing is not None and existing.made == made:
        # Same verdict again: the first verification time of the day stands.
        today_record = existing
        log.debug("Record for %s on %s unchanged", user_id, today)
    else:
        today_record = DailyOutcome(
            date=today,
            made=made,
            made_at=observed_at if made else None,
            confidence=confidence,
        )
        if read_failed:
            # Stored record unknown; a write could replace the day's first made_at.
            persisted = False
        else:
            try:
                db.upsert_outcome(conn, user_id, today_record)
            except StoreUnavailable:
                log.warning("Verification for %s on %s not persisted", user_id, today)
                persisted = False

    try:
        history = db.get_history(conn, user_id)
    except StoreUnavailable:
        log.warning("Could not read history for %s; using today's record only", user_id)
        history = []
    history = _merge_today(history, today_record)

    state = streaks.compute(history, today)

    try:
        goal = db.get_goal_selection(conn, user_id)
    except StoreUnavailable:
        log.warning("Could not read goal for %s; using %s", user_id, goals.DEFAULT_GOAL.value)
        goal = goals.DEFAULT_GOAL

    if made:
        status = goals.classify(today_record.made_at or observed_at, goal)
    else:
        status = GoalStatus(is_within_goal=False, is_early=False)

    last_made = max((o.date for o in history if o.made), default=None)
    try:
        db.save_streak_state(conn, user_id, state, last_made)
    except StoreUnavailable:
        log.warning("Streak counters for %s not saved", user_id)
        persisted = False

    new_achievements = _award(conn, user_id, history, today)

    return VerificationResult(
        date=today,
        goal=goal,
        current_streak=state.current_streak,
        longest_streak=state.longest_streak,
        total_days=state.total_days,
        is_within_goal=status.is_within_goal,
        is_early=status.is_early,
        is_made_today=made,
        was_persisted=persisted,
        new_achievements=new_achievements,
    )


def _award(
    conn: sqlite3.Connection, user_id: str, history: list[DailyOutcome], today: date
) -> list[str]:
    """Award any newly qualifying achievements; failures only log."""
    summary = stats.compute_stats(history, today)
    try:
        earned = [a.code for a in db.list_earned_achievements(conn, user_id)]
        new = stats.evaluate_achievements(summary, earned)
        if new:
            db.award_achievements(conn, user_id, new)
    except StoreUnavailable:
        log.warning("Achievements for %s not updated", user_id)
        return []
    return new


def record_classification(
    conn: sqlite3.Connection, user_id: str, classification: ClassificationResult
) -> VerificationResult:
    """Entry point for a verdict coming straight from the classifier."""
    return record_verification(
        conn,
        user_id,
        made=classification.is_made,
        observed_at=classification.observed_at,
        confidence=classification.confidence,
    )

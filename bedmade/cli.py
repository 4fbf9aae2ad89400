"""BedMade CLI -- make your bed, keep your streak."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.logging import RichHandler

from bedmade import config as cfg
from bedmade import db, display, encouragement, stats, streaks, verification
from bedmade.dates import today_key
from bedmade.errors import InvalidGoalSelection, StoreUnavailable
from bedmade.goals import coerce_goal, goal_label, is_past_goal_time
from bedmade.models import ClassificationResult

app = typer.Typer(
    name="bedmade",
    help="Photograph your made bed, keep your streak going.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Configure logging before any command runs."""
    level = "DEBUG" if verbose else cfg.load_config().log_level.upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "WARNING"
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=display.console, show_path=False)],
    )


@contextmanager
def _store() -> Iterator[sqlite3.Connection]:
    """Open the database for one command; store failures exit with a warning."""
    conn: Optional[sqlite3.Connection] = None
    try:
        conn = db.get_connection()
        yield conn
    except StoreUnavailable as exc:
        display.print_warning(f"Could not reach the database: {exc}")
        raise typer.Exit(1)
    finally:
        if conn is not None:
            conn.close()


def _user() -> str:
    return cfg.get_user_id()


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


@app.command()
def verify(
    not_made: bool = typer.Option(False, "--not-made", help="Record that the bed was not made"),
    confidence: float = typer.Option(1.0, "--confidence", "-c", help="Classifier confidence (0-1)"),
    at: Optional[str] = typer.Option(None, "--at", help="Verification time (ISO format), default now"),
) -> None:
    """Record today's verification result."""
    try:
        observed_at = datetime.fromisoformat(at) if at else datetime.now()
        classification = ClassificationResult(
            is_made=not not_made, confidence=confidence, observed_at=observed_at
        )
    except (ValueError, ValidationError) as exc:
        display.print_warning(f"Invalid verification input: {exc}")
        raise typer.Exit(1)

    with _store() as conn:
        result = verification.record_classification(conn, _user(), classification)
    display.print_verification(result)
    display.print_nudge(encouragement.get_nudge(result))


# ---------------------------------------------------------------------------
# Status, stats & history
# ---------------------------------------------------------------------------


@app.command()
def status() -> None:
    """See today's verification and your current streak."""
    with _store() as conn:
        user_id = _user()
        goal_now = db.get_goal_selection(conn, user_id)
        history = db.get_history(conn, user_id)
    today = today_key()
    made_today = any(o.made for o in history if o.date == today)
    display.print_status(
        streaks.compute(history, today),
        goal_now,
        made_today=made_today,
        past_goal=is_past_goal_time(datetime.now(), goal_now),
    )


@app.command()
def nudge() -> None:
    """Get a gentle reminder based on today's progress."""
    with _store() as conn:
        history = db.get_history(conn, _user())
    today = today_key()
    made_today = any(o.made for o in history if o.date == today)
    state = streaks.compute(history, today)
    display.print_nudge(encouragement.get_reminder(made_today, state.current_streak))


@app.command(name="stats")
def show_stats() -> None:
    """Show streaks, rates and achievements."""
    with _store() as conn:
        user_id = _user()
        history = db.get_history(conn, user_id)
        earned = [a.code for a in db.list_earned_achievements(conn, user_id)]
    summary = stats.compute_stats(history, today_key())
    display.print_stats(summary, earned)


@app.command()
def history(
    days: int = typer.Option(14, "--days", "-n", help="Number of recent records to show"),
) -> None:
    """List recent verification records."""
    with _store() as conn:
        user_id = _user()
        outcomes = db.get_history(conn, user_id)
        goal = db.get_goal_selection(conn, user_id)
    display.print_history(outcomes[-days:] if days > 0 else [], goal)


# ---------------------------------------------------------------------------
# Goal
# ---------------------------------------------------------------------------


@app.command()
def goal(
    selection: Optional[str] = typer.Argument(None, help="early, mid or late"),
) -> None:
    """Show or change your daily goal window."""
    if selection is None:
        with _store() as conn:
            current = db.get_goal_selection(conn, _user())
        display.print_info(f"Goal: {goal_label(current)}")
        return

    try:
        new_goal = coerce_goal(selection)
    except InvalidGoalSelection:
        display.print_warning(f"Unknown goal '{selection}'. Use early, mid or late.")
        raise typer.Exit(1)

    with _store() as conn:
        db.set_goal_selection(conn, _user(), new_goal)
    display.print_success(f"Goal set to {goal_label(new_goal)}")


# ---------------------------------------------------------------------------
# Charts
# ---------------------------------------------------------------------------


@app.command()
def chart(
    output: Path = typer.Option(..., "--output", "-o", help="PNG file to write"),
    month: Optional[str] = typer.Option(None, "--month", "-m", help="Month as YYYY-MM (default: this month)"),
    times: bool = typer.Option(False, "--times", help="Plot made-at times instead of a calendar"),
) -> None:
    """Render a calendar or made-time chart to a PNG file."""
    from bedmade import charts

    with _store() as conn:
        user_id = _user()
        outcomes = db.get_history(conn, user_id)
        goal_now = db.get_goal_selection(conn, user_id) if times else None

    if times:
        img = charts.made_time_chart(outcomes, goal_now)
        if img is None:
            display.print_info("Need at least two made days to plot times.")
            return
    else:
        try:
            if month:
                year_s, month_s = month.split("-")
                year_n, month_n = int(year_s), int(month_s)
            else:
                today = today_key()
                year_n, month_n = today.year, today.month
            img = charts.month_calendar(outcomes, year_n, month_n)
        except ValueError:
            display.print_warning(f"Invalid month '{month}'. Use YYYY-MM.")
            raise typer.Exit(1)

    img.save(output)
    display.print_success(f"Chart written to {output}")


# ---------------------------------------------------------------------------
# Reset & configuration
# ---------------------------------------------------------------------------


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Delete all verification records and reset streaks to zero."""
    if not yes:
        typer.confirm("This deletes all your records. Continue?", default=False, abort=True)
    with _store() as conn:
        db.clear_all(conn, _user())
    display.print_success("All records cleared. Streaks reset to zero.")


@app.command()
def config(
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Set a custom database file path"),
    user: Optional[str] = typer.Option(None, "--user", help="Switch the active user id"),
    reset_path: bool = typer.Option(False, "--reset", help="Reset to default local DB"),
    show: bool = typer.Option(False, "--show", help="Show current config"),
) -> None:
    """Configure where your data is stored and who is tracking."""
    if db_path:
        result = cfg.set_db_path(db_path)
        display.print_success(f"Database path set to: {result.db_path}")
    elif user is not None:
        try:
            result = cfg.set_user_id(user)
        except ValidationError:
            display.print_warning("User id cannot be empty.")
            raise typer.Exit(1)
        display.print_success(f"Active user set to: {result.user_id}")
    elif reset_path:
        cfg.reset_db_path()
        display.print_success("Reset to default local database.")
    elif show:
        current = cfg.load_config()
        resolved = cfg.get_db_path()
        if current.db_path:
            display.print_info(f"Database: {current.db_path}")
        else:
            display.print_info(f"Database: {resolved} (default)")
        display.print_info(f"User: {current.user_id}")
    else:
        display.print_info("Use --db-path, --user, --reset, or --show.")

"""Rich terminal formatting helpers."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from bedmade.encouragement import (
    BADGE_EARLY,
    BADGE_LATE,
    BADGE_ON_TIME,
    badge_for,
    get_streak_message,
)
from bedmade.goals import format_window, goal_label
from bedmade.models import (
    DailyOutcome,
    GoalSelection,
    GoalStatus,
    StreakState,
    UserStats,
    VerificationResult,
)
from bedmade.stats import get_achievement

console = Console()

_BADGE_STYLE: dict[str, str] = {
    BADGE_EARLY: "bold blue",
    BADGE_ON_TIME: "bold green",
    BADGE_LATE: "bold red",
}


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'s' if n != 1 else ''}"


def print_verification(result: VerificationResult) -> None:
    """Print the outcome of a verification."""
    if result.is_made_today:
        status = GoalStatus(is_within_goal=result.is_within_goal, is_early=result.is_early)
        badge = badge_for(status)
        headline = Text(badge, style=_BADGE_STYLE[badge], justify="center")
    else:
        headline = Text("Bed not made yet", style="bold yellow", justify="center")

    lines: list[str] = [
        f"Goal: {goal_label(result.goal)}",
        f"Current streak: {_plural(result.current_streak, 'day')}",
        f"Best streak: {_plural(result.longest_streak, 'day')}",
        f"Total beds made: {result.total_days}",
    ]
    body = Text.assemble(headline, "\n\n", "\n".join(lines))
    console.print(Panel(body, title=f"Verification {result.date.isoformat()}", border_style="green"))

    for code in result.new_achievements:
        achievement = get_achievement(code)
        if achievement is not None:
            print_success(f"Achievement unlocked: {achievement.name} ({achievement.description})")

    if not result.was_persisted:
        print_warning("Could not save to the database. Showing calculated values.")


def print_status(
    state: StreakState, goal: GoalSelection, made_today: bool, past_goal: bool = False
) -> None:
    """Print the home-screen style status panel."""
    lines: list[str] = [
        f"Today: {'made' if made_today else 'not verified yet'}",
        f"Goal: {goal_label(goal)}",
    ]
    if past_goal and not made_today:
        lines.append("Your goal window has passed. Making it now still keeps the streak.")
    lines += [
        "",
        get_streak_message(state.current_streak),
        f"Best streak: {_plural(state.longest_streak, 'day')}",
    ]
    console.print(Panel("\n".join(lines), title="Status", border_style="green"))


def print_stats(stats: UserStats, earned: list[str]) -> None:
    """Print the stats dashboard and earned achievements."""
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("label", style="dim")
    table.add_column("value", style="bold")
    table.add_row("Current streak", _plural(stats.current_streak, "day"))
    table.add_row("Longest streak", _plural(stats.longest_streak, "day"))
    table.add_row("Beds made", str(stats.total_beds_made))
    table.add_row("Completion rate", f"{stats.completion_rate}%")
    table.add_row("Early bird rate", f"{stats.early_bird_rate}%")
    table.add_row("Average time", stats.average_time)
    console.print(Panel(table, title="Stats", border_style="blue"))

    if earned:
        names = [a.name for a in (get_achievement(c) for c in earned) if a is not None]
        console.print(Panel(", ".join(names), title="Achievements", border_style="magenta"))


def print_history(outcomes: list[DailyOutcome], goal: GoalSelection) -> None:
    """Print recent outcomes as a table, newest first."""
    if not outcomes:
        console.print(Panel("No verifications yet.", title="History", border_style="dim"))
        return

    table = Table(title=f"Goal window {format_window(goal)}")
    table.add_column("Date")
    table.add_column("Made")
    table.add_column("Time")

    for outcome in sorted(outcomes, key=lambda o: o.date, reverse=True):
        made_time = outcome.made_at.strftime("%H:%M") if outcome.made_at else "-"
        table.add_row(
            outcome.date.isoformat(),
            "[green]yes[/green]" if outcome.made else "[red]no[/red]",
            made_time,
        )
    console.print(Panel(table, title="History", border_style="blue"))


def print_nudge(message: str) -> None:
    """Print an encouragement message in a styled panel."""
    text = Text(message, justify="center")
    console.print(Panel(text, border_style="magenta", padding=(1, 4)))


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[blue]{message}[/blue]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]{message}[/yellow]")

"""Matplotlib charts for the calendar and made-time views.

All figures use a dark theme and are returned as PIL images.
"""

from __future__ import annotations

import calendar
import io
from collections.abc import Iterable
from datetime import date, datetime
from typing import Optional

import matplotlib
matplotlib.use("Agg")  # non-interactive backend -- render to image buffers
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import ListedColormap
from matplotlib.figure import Figure
from PIL import Image

from bedmade.dates import local_minutes
from bedmade.goals import GOAL_WINDOWS, format_window
from bedmade.models import DailyOutcome, GoalSelection

# -- Palette --------------------------------------------------------------
_BG = "#2b2b2b"
_FG = "#e0e0e0"
_ACCENT = "#6a9fb5"
_GRID = "#444444"
_NO_RECORD = "#3a3a3a"
_NOT_MADE = "#c0504d"
_MADE = "#34c759"
_OUTSIDE_MONTH = _BG
_GOAL_FILL = (0.20, 0.78, 0.35, 0.18)

# Cell codes for the calendar grid
_CELL_OUTSIDE, _CELL_EMPTY, _CELL_MISSED, _CELL_MADE = 0, 1, 2, 3


# -----------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------

def _fig_to_pil(fig: Figure, dpi: int = 100) -> Image.Image:
    """Render a matplotlib Figure to a PIL Image and close it."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=dpi, bbox_inches="tight",
                facecolor=fig.get_facecolor(), edgecolor="none")
    plt.close(fig)
    buf.seek(0)
    return Image.open(buf)


def month_grid(history: Iterable[DailyOutcome], year: int, month: int) -> np.ndarray:
    """Return a (weeks, 7) array of cell codes, weeks starting on Monday."""
    by_date = {o.date: o.made for o in history}
    weeks = calendar.Calendar(firstweekday=0).monthdayscalendar(year, month)
    grid = np.full((len(weeks), 7), _CELL_OUTSIDE, dtype=int)
    for row, week in enumerate(weeks):
        for col, day in enumerate(week):
            if day == 0:
                continue
            made = by_date.get(date(year, month, day))
            if made is None:
                grid[row, col] = _CELL_EMPTY
            else:
                grid[row, col] = _CELL_MADE if made else _CELL_MISSED
    return grid


# -----------------------------------------------------------------------
# Calendar
# -----------------------------------------------------------------------

def month_calendar(
    history: Iterable[DailyOutcome],
    year: int,
    month: int,
    *,
    size: tuple[int, int] = (420, 360),
    dpi: int = 100,
) -> Image.Image:
    """Draw a month calendar coloured by made / not made / no record."""
    grid = month_grid(history, year, month)
    weeks = calendar.Calendar(firstweekday=0).monthdayscalendar(year, month)

    fig_w, fig_h = size[0] / dpi, size[1] / dpi
    fig = Figure(figsize=(fig_w, fig_h), dpi=dpi, facecolor=_BG)
    ax = fig.add_subplot(111)
    ax.set_facecolor(_BG)

    cmap = ListedColormap([_OUTSIDE_MONTH, _NO_RECORD, _NOT_MADE, _MADE])
    ax.imshow(grid, cmap=cmap, vmin=0, vmax=3, aspect="equal")

    for row, week in enumerate(weeks):
        for col, day in enumerate(week):
            if day:
                ax.text(col, row, str(day), ha="center", va="center",
                        color=_FG, fontsize=8)

    ax.set_xticks(range(7))
    ax.set_xticklabels([d[:2] for d in calendar.day_abbr], color=_FG, fontsize=8)
    ax.xaxis.tick_top()
    ax.set_yticks([])
    for spine in ax.spines.values():
        spine.set_visible(False)
    ax.set_title(f"{calendar.month_name[month]} {year}", color=_FG,
                 fontsize=11, fontweight="bold", pad=18)

    return _fig_to_pil(fig, dpi=dpi)


# -----------------------------------------------------------------------
# Made-time scatter
# -----------------------------------------------------------------------

def made_time_chart(
    history: Iterable[DailyOutcome],
    goal: GoalSelection,
    *,
    size: tuple[int, int] = (560, 260),
    dpi: int = 100,
) -> Optional[Image.Image]:
    """Scatter of made-at times per day with the goal window shaded.

    Returns *None* if fewer than two made records have a time.
    """
    timed = sorted(
        (o for o in history if o.made and o.made_at is not None),
        key=lambda o: o.date,
    )
    if len(timed) < 2:
        return None

    days = [datetime.combine(o.date, datetime.min.time()) for o in timed]
    hours = [local_minutes(o.made_at) / 60 for o in timed]  # type: ignore[arg-type]
    start, end = GOAL_WINDOWS[goal]

    fig_w, fig_h = size[0] / dpi, size[1] / dpi
    fig = Figure(figsize=(fig_w, fig_h), dpi=dpi, facecolor=_BG)
    ax = fig.add_subplot(111)
    ax.set_facecolor(_BG)

    ax.axhspan(start / 60, end / 60, color=_GOAL_FILL, label=f"Goal {format_window(goal)}")
    ax.plot(days, hours, color=_ACCENT, linewidth=1, alpha=0.6)
    ax.scatter(days, hours, color=_ACCENT, edgecolors="white", linewidths=0.5, zorder=3)

    low = min(min(hours), start / 60) - 0.5
    high = max(max(hours), end / 60) + 0.5
    ax.set_ylim(high, low)  # earlier times at the top
    ax.set_ylabel("Hour of day", color=_FG, fontsize=9)
    ax.set_title("Bed Made At", color=_FG, fontsize=11, fontweight="bold")

    ax.tick_params(colors=_FG, labelsize=8)
    ax.spines["bottom"].set_color(_GRID)
    ax.spines["left"].set_color(_GRID)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.yaxis.grid(color=_GRID, linewidth=0.5)
    ax.legend(facecolor=_BG, edgecolor=_GRID, labelcolor=_FG, fontsize=8)

    fig.autofmt_xdate(rotation=30, ha="right")

    return _fig_to_pil(fig, dpi=dpi)

"""Pydantic models for outcomes, goals, streaks and configuration."""

from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class GoalSelection(str, enum.Enum):
    """The three fixed morning windows a user can aim for."""

    EARLY = "early"  # 06:00 - 08:00
    MID = "mid"  # 08:00 - 10:00
    LATE = "late"  # 10:00 - 12:00


class DailyOutcome(BaseModel):
    """One user's verification outcome for one local calendar day."""

    date: date
    made: bool
    made_at: Optional[datetime] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class StreakState(BaseModel):
    """Streak counters derived from a user's outcome history."""

    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    total_days: int = Field(default=0, ge=0)


class GoalStatus(BaseModel):
    """Where a verification time falls relative to the goal window."""

    is_within_goal: bool = False
    is_early: bool = False

    @property
    def is_late(self) -> bool:
        return not self.is_within_goal and not self.is_early


class ClassificationResult(BaseModel):
    """Verdict handed over by the vision classifier."""

    is_made: bool
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    observed_at: datetime = Field(default_factory=datetime.now)


class VerificationResult(BaseModel):
    """Everything the UI needs after a verification has been recorded."""

    date: date
    goal: GoalSelection
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    total_days: int = Field(default=0, ge=0)
    is_within_goal: bool = False
    is_early: bool = False
    is_made_today: bool = False
    was_persisted: bool = True
    new_achievements: list[str] = Field(default_factory=list)


class UserProfile(BaseModel):
    """Persisted per-user row: goal preference plus cached streak counters."""

    user_id: str
    daily_goal: GoalSelection = GoalSelection.EARLY
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    total_days: int = Field(default=0, ge=0)
    last_made_date: Optional[date] = None


class UserStats(BaseModel):
    """Dashboard numbers for the stats command."""

    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    total_beds_made: int = Field(default=0, ge=0)
    completion_rate: int = Field(default=0, ge=0, le=100)
    early_bird_rate: int = Field(default=0, ge=0, le=100)
    average_time: str = "8:00 AM"


class Achievement(BaseModel):
    """A badge the user can earn once."""

    code: str
    name: str
    description: str
    required_streak: Optional[int] = None


class EarnedAchievement(BaseModel):
    """An achievement awarded to a user."""

    code: str
    earned_at: datetime = Field(default_factory=datetime.now)


class AppConfig(BaseModel):
    """Application configuration (persisted to ~/.config/bedmade/config.json)."""

    db_path: Optional[str] = None  # None = use default (~/.local/share/bedmade/)
    user_id: str = Field(default="local", min_length=1)
    log_level: str = "WARNING"

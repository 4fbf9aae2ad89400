"""Exceptions raised by the store layer and the history parser."""

from __future__ import annotations


class BedMadeError(Exception):
    """Base class for all BedMade errors."""


class StoreUnavailable(BedMadeError):
    """A read or write against the outcome/goal store failed."""


class InvalidGoalSelection(BedMadeError):
    """A stored goal value is not one of early / mid / late."""


class MalformedHistoryEntry(BedMadeError):
    """A stored outcome could not be turned into a DailyOutcome."""

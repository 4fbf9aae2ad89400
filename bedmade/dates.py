"""Local calendar-day helpers.

All day keys are plain ``datetime.date`` values in the device's local
timezone. Naive datetimes are taken to be local already; aware datetimes
are converted with ``astimezone()`` before truncation.
"""

from __future__ import annotations

from datetime import date, datetime

from bedmade.errors import MalformedHistoryEntry


def _to_local(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp
    return timestamp.astimezone()


def to_local_date_key(timestamp: datetime) -> date:
    """Truncate a timestamp to its local calendar day."""
    return _to_local(timestamp).date()


def local_minutes(timestamp: datetime) -> int:
    """Minutes since local midnight (hour * 60 + minute)."""
    local = _to_local(timestamp)
    return local.hour * 60 + local.minute


def days_between(a: date, b: date) -> int:
    """Signed whole-day difference ``b - a``."""
    return b.toordinal() - a.toordinal()


def today_key() -> date:
    """Today's local date key."""
    return to_local_date_key(datetime.now())


def parse_date_key(value: object) -> date:
    """Parse a stored day key.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` strings and full
    ISO timestamps (only the date part is kept).
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip().split("T")[0])
        except ValueError as exc:
            raise MalformedHistoryEntry(f"Unparseable date {value!r}") from exc
    raise MalformedHistoryEntry(f"Unsupported date value {value!r}")

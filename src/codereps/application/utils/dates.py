"""
Calendar-day helpers for due-date arithmetic.

Every comparison here works on calendar days: time-of-day is discarded by
normalizing both sides with `.date()` before differencing. Functions that
need "today" take it as an explicit `now` so callers can inject a clock.
"""

from datetime import date, datetime, timedelta


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def add_days(value: datetime, days: int) -> datetime:
    return value + timedelta(days=days)


def to_local_naive(value: datetime) -> datetime:
    """Convert an offset-aware datetime to naive local wall-clock time."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def days_between(start: date | datetime, end: date | datetime) -> int:
    """
    Number of calendar days from `start` to `end`.

    Negative if `start` is after `end`.
    """
    return (_as_date(end) - _as_date(start)).days


def is_same_day(a: date | datetime, b: date | datetime) -> bool:
    return _as_date(a) == _as_date(b)


def is_today(value: date | datetime, now: datetime) -> bool:
    return is_same_day(value, now)


def is_past(value: date | datetime, now: datetime) -> bool:
    """True if `value` falls on a calendar day before today."""
    return _as_date(value) < _as_date(now)


def is_within_days(value: date | datetime, days: int, now: datetime) -> bool:
    """True if `value` falls between today and today + `days`, inclusive."""
    today = _as_date(now)
    return today <= _as_date(value) <= today + timedelta(days=days)


def format_relative_date(value: date | datetime, now: datetime) -> str:
    days = days_between(now, value)

    if days == 0:
        return "Today"
    if days == 1:
        return "Tomorrow"
    if days == -1:
        return "Yesterday"
    if days > 1:
        return f"In {days} days"
    return f"{abs(days)} days ago"


def format_date(value: date | datetime) -> str:
    """Format as YYYY-MM-DD."""
    return _as_date(value).isoformat()


def format_display_date(value: date | datetime) -> str:
    """Format for display, e.g. "Jan 15, 2025"."""
    d = _as_date(value)
    return f"{d:%b} {d.day}, {d.year}"

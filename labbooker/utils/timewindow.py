"""
Interval arithmetic over half-open windows ``[start, end)`` of naive UTC datetimes.
"""
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Union

Hours = Union[int, float, timedelta]


class TimeWindow(NamedTuple):
    start: datetime
    end: datetime


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the form every timestamp is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def as_timedelta(value: Hours) -> timedelta:
    if isinstance(value, timedelta):
        return value
    return timedelta(hours=value)


def duration_hours(a: datetime, b: datetime) -> float:
    """Length of ``[a, b)`` in hours. Raises ValueError for an empty or inverted window."""
    if b <= a:
        raise ValueError(f"End {b} must be after start {a}")
    return (b - a) / timedelta(hours=1)


def overlaps(a: TimeWindow, b: TimeWindow) -> bool:
    # touching endpoints do not overlap
    return a.start < b.end and b.start < a.end


def expand(window: TimeWindow, before: Hours, after: Hours) -> TimeWindow:
    """Widen a window by ``before`` at its start and ``after`` at its end."""
    return TimeWindow(window.start - as_timedelta(before), window.end + as_timedelta(after))

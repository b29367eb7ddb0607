from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Optional, Union


DateLike = Union[date, datetime, str]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(value).date()


def date_range_inclusive(start: DateLike, end: DateLike) -> List[date]:
    """Every calendar date from `start` to `end`, both included.

    Returns an empty list when `end` is before `start`.
    """
    current = _as_date(start)
    last = _as_date(end)
    days = []
    while current <= last:
        days.append(current)
        current += timedelta(days=1)
    return days


def format_date(value: Optional[DateLike], fmt: str = "%b %d, %Y") -> str:
    """Human-readable date, `-` when missing."""
    if value is None or value == "":
        return "-"
    return _as_date(value).strftime(fmt)


def is_upcoming(start: DateLike, today: Optional[date] = None) -> bool:
    """True when the trip starts strictly after `today`."""
    today = today or date.today()
    return _as_date(start) > today

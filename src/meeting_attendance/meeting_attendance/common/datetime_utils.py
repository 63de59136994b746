"""Local calendar helpers for meeting dates.

Dates travel through the app as ``YYYY-MM-DD`` strings in local time, never
UTC, so a record marked shortly before midnight stays on the right day.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from ..core.constants import SATURDAY_TERMS, SUNDAY_TERMS
from ..core.enums import Weekday

DATE_FORMAT = "%Y-%m-%d"


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, DATE_FORMAT).date()


def format_iso_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_local() -> str:
    return format_iso_date(now_local().date())


def shift_date(value: str, days: int) -> str:
    return format_iso_date(parse_iso_date(value) + timedelta(days=days))


def days_between(start: str, end: str) -> int:
    return (parse_iso_date(end) - parse_iso_date(start)).days


def required_weekday(meeting_name: str) -> Optional[Weekday]:
    """Weekday a meeting recurs on, inferred from its name.

    Returns None for meetings that may be held on any day. The Sunday check
    runs before the Saturday check.
    """
    lower = meeting_name.lower()
    if any(term in lower for term in SUNDAY_TERMS):
        return Weekday.SUNDAY
    if any(term in lower for term in SATURDAY_TERMS):
        return Weekday.SATURDAY
    return None


def snap_to_valid_date(value: str, weekday: Optional[Weekday]) -> str:
    """Walk back to the closest date on or before ``value`` matching ``weekday``."""
    if weekday is None:
        return value
    d = parse_iso_date(value)
    back = (d.weekday() - int(weekday) + 7) % 7
    return format_iso_date(d - timedelta(days=back))


def snap_forward(value: str, weekday: Weekday) -> str:
    d = parse_iso_date(value)
    ahead = (int(weekday) - d.weekday() + 7) % 7
    return format_iso_date(d + timedelta(days=ahead))


def week_start(value: str) -> str:
    """Monday of the calendar week containing ``value``."""
    d = parse_iso_date(value)
    return format_iso_date(d - timedelta(days=d.weekday()))


def weekday_label(weekday: Weekday) -> str:
    return weekday.name.capitalize()


def is_meeting_day(value: str, weekday: Optional[Weekday]) -> bool:
    return weekday is None or parse_iso_date(value).weekday() == int(weekday)

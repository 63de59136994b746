from __future__ import annotations

from enum import Enum, IntEnum


class Weekday(IntEnum):
    """Day of week, numbered like ``date.weekday()`` (Monday=0)."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


class MarkResult(str, Enum):
    """Outcome of marking a person present in a session."""

    SUCCESS = "success"
    DUPLICATE = "duplicate"
    FAILURE = "failure"


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Timeframe(str, Enum):
    """Lower bound windows for the history dashboard."""

    LAST_4_WEEKS = "4w"
    LAST_12_WEEKS = "12w"
    LAST_6_MONTHS = "6m"
    LAST_YEAR = "1y"
    ALL_TIME = "all"

    @property
    def days(self) -> int | None:
        return {
            Timeframe.LAST_4_WEEKS: 28,
            Timeframe.LAST_12_WEEKS: 84,
            Timeframe.LAST_6_MONTHS: 182,
            Timeframe.LAST_YEAR: 365,
        }.get(self)


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"

"""Streak and attendance-rate arithmetic for weekly meetings.

A streak is a run of attendances exactly seven days apart.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..common.datetime_utils import days_between, snap_forward, today_local
from ..core.constants import STREAK_GAP_DAYS, STREAK_GRACE_DAYS
from ..core.enums import Weekday


def longest_streak(dates: Iterable[str]) -> int:
    ordered = sorted(dates)
    if not ordered:
        return 0

    longest = current = 1
    for prev, curr in zip(ordered, ordered[1:]):
        if days_between(prev, curr) == STREAK_GAP_DAYS:
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest


def current_streak(dates: Iterable[str], weekday: Optional[Weekday], *, today: Optional[str] = None) -> int:
    """Run ending at the latest attendance, or 0 once it is over two weeks old."""
    if weekday is None:
        return 0
    ordered = sorted(set(dates))
    if not ordered:
        return 0

    today = today or today_local()
    if days_between(ordered[-1], today) > STREAK_GRACE_DAYS:
        return 0

    streak = 1
    for i in range(len(ordered) - 1, 0, -1):
        if days_between(ordered[i - 1], ordered[i]) != STREAK_GAP_DAYS:
            break
        streak += 1
    return streak


def count_occurrences(start: str, end: str, weekday: Optional[Weekday]) -> int:
    """Number of ``weekday`` dates in [start, end], both inclusive."""
    if weekday is None:
        return 0
    first = snap_forward(start, weekday)
    span = days_between(first, end)
    if span < 0:
        return 0
    return span // 7 + 1


def attendance_rate(
    dates: Iterable[str],
    weekday: Optional[Weekday],
    first_date: Optional[str] = None,
    *,
    today: Optional[str] = None,
) -> int:
    """Percentage of meeting occurrences attended since ``first_date``.

    ``first_date`` defaults to the earliest of ``dates``; callers pass the
    earliest record of the same meeting. Meetings without a fixed weekday
    have no occurrence count and report 0.
    """
    attended = sorted(set(dates))
    if weekday is None or not attended:
        return 0

    first_date = first_date or attended[0]
    today = today or today_local()
    end = max(today, attended[-1])
    occurrences = count_occurrences(first_date, end, weekday)
    if occurrences <= 0:
        return 0
    # Half-up rounding, not Python's round-half-even.
    return (200 * len(attended) + occurrences) // (2 * occurrences)

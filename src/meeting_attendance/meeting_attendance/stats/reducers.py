"""Pure grouping/sorting transforms over flat attendance rows."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..attendance.model import AttendanceRow
from ..common.datetime_utils import shift_date, week_start
from ..core.constants import LEADERBOARD_SIZE
from ..core.enums import Timeframe
from .model import AttendeeCount, StreakEntry, WeeklyPoint
from .streaks import longest_streak


def timeframe_start(timeframe: Timeframe, today: str) -> Optional[str]:
    """Earliest date inside the window, or None for all-time."""
    days = timeframe.days
    if days is None:
        return None
    return shift_date(today, -days)


def within(rows: Iterable[AttendanceRow], since: Optional[str]) -> List[AttendanceRow]:
    if since is None:
        return list(rows)
    return [r for r in rows if r.date >= since]


def weekly_series(rows: Iterable[AttendanceRow]) -> List[WeeklyPoint]:
    """One point per Monday-based week that has rows, oldest first.

    Weeks and meetings without rows are left out rather than zero-filled.
    """
    buckets: Dict[str, Dict[str, int]] = defaultdict(dict)
    for r in rows:
        counts = buckets[week_start(r.date)]
        counts[r.meeting_id] = counts.get(r.meeting_id, 0) + 1
    return [WeeklyPoint(week_start=w, counts=buckets[w]) for w in sorted(buckets)]


def meeting_totals(rows: Iterable[AttendanceRow]) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for r in rows:
        totals[r.meeting_id] = totals.get(r.meeting_id, 0) + 1
    return totals


def count_by_person(rows: Iterable[AttendanceRow]) -> List[AttendeeCount]:
    """Per-person counts, highest first; ties keep first-seen order."""
    counts: Dict[str, int] = {}
    names: Dict[str, str] = {}
    for r in rows:
        counts[r.person_id] = counts.get(r.person_id, 0) + 1
        names.setdefault(r.person_id, r.person_name)
    ranked = [AttendeeCount(person_id=pid, person_name=names[pid], count=n) for pid, n in counts.items()]
    ranked.sort(key=lambda a: a.count, reverse=True)
    return ranked


def top_attendees(rows: Iterable[AttendanceRow], *, limit: int = LEADERBOARD_SIZE) -> List[AttendeeCount]:
    return count_by_person(rows)[:limit]


def streak_leaderboard(rows: Iterable[AttendanceRow], *, limit: int = LEADERBOARD_SIZE) -> List[StreakEntry]:
    groups: Dict[Tuple[str, str], List[AttendanceRow]] = defaultdict(list)
    for r in rows:
        groups[(r.person_id, r.meeting_id)].append(r)

    leaders: List[StreakEntry] = []
    for (person_id, meeting_id), group in groups.items():
        streak = longest_streak(r.date for r in group)
        if streak < 2:
            continue
        first = group[0]
        leaders.append(
            StreakEntry(
                person_id=person_id,
                person_name=first.person_name,
                meeting_id=meeting_id,
                meeting_name=first.meeting_name,
                streak=streak,
            )
        )
    leaders.sort(key=lambda s: s.streak, reverse=True)
    return leaders[:limit]


def dates_by_meeting(rows: Sequence[AttendanceRow]) -> Dict[str, List[str]]:
    out: Dict[str, List[str]] = defaultdict(list)
    for r in rows:
        out[r.meeting_id].append(r.date)
    return dict(out)

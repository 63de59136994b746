from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from ..meetings.model import Meeting


@dataclass(frozen=True)
class WeeklyPoint:
    """Attendance counts per meeting_id for the week starting ``week_start`` (a Monday)."""

    week_start: str
    counts: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class AttendeeCount:
    person_id: str
    person_name: str
    count: int


@dataclass(frozen=True)
class StreakEntry:
    person_id: str
    person_name: str
    meeting_id: str
    meeting_name: str
    streak: int


@dataclass(frozen=True)
class MeetingStat:
    meeting: Meeting
    times_attended: int
    longest_streak: int
    current_streak: int
    attendance_rate: int


@dataclass(frozen=True)
class HistoryItem:
    record_id: str
    meeting_id: str
    meeting_name: str
    date: str


@dataclass(frozen=True)
class PersonProfile:
    person_id: str
    full_name: str
    total_attendances: int
    meeting_stats: Sequence[MeetingStat]
    history: Sequence[HistoryItem]
    phone: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class Dashboard:
    timeframe: str
    since: Optional[str]
    weekly: Sequence[WeeklyPoint]
    meeting_totals: Dict[str, int]
    top_attendees: Sequence[AttendeeCount]
    streak_leaders: Sequence[StreakEntry]

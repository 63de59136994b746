from __future__ import annotations

from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import today_local
from ..core.constants import UNKNOWN_NAME
from ..core.enums import Timeframe
from ..core.exceptions import NotFoundError, ValidationError
from ..meetings.repository import MeetingRepository
from ..people.repository import PersonRepository
from . import reducers
from .model import Dashboard, HistoryItem, MeetingStat, PersonProfile
from .streaks import attendance_rate, current_streak, longest_streak


def parse_timeframe(value: Optional[str]) -> Timeframe:
    try:
        return Timeframe(value or Timeframe.LAST_12_WEEKS.value)
    except ValueError:
        raise ValidationError(f"Unknown timeframe: {value}") from None


class StatsService:
    """Use case: per-person profile and the history dashboard."""

    def __init__(self, attendance: AttendanceRepository, meetings: MeetingRepository, people: PersonRepository):
        self._attendance = attendance
        self._meetings = meetings
        self._people = people

    def person_profile(self, person_id: str, *, today: Optional[str] = None) -> PersonProfile:
        person = self._people.get_by_id(person_id)
        if not person:
            raise NotFoundError("Person not found")
        today = today or today_local()

        meetings = list(self._meetings.list_meetings())
        meeting_map = {m.meeting_id: m for m in meetings}
        rows = list(self._attendance.list_rows(person_id=person_id))
        by_meeting = reducers.dates_by_meeting(rows)

        stats = []
        for meeting in meetings:
            dates = by_meeting.get(meeting.meeting_id)
            if not dates:
                continue
            weekday = meeting.weekday
            stats.append(
                MeetingStat(
                    meeting=meeting,
                    times_attended=len(dates),
                    longest_streak=longest_streak(dates),
                    current_streak=current_streak(dates, weekday, today=today),
                    # Denominator starts at this meeting's own first record.
                    attendance_rate=attendance_rate(dates, weekday, min(dates), today=today),
                )
            )

        history = [
            HistoryItem(
                record_id=r.record_id,
                meeting_id=r.meeting_id,
                meeting_name=meeting_map[r.meeting_id].name if r.meeting_id in meeting_map else UNKNOWN_NAME,
                date=r.date,
            )
            for r in sorted(rows, key=lambda r: r.date, reverse=True)
        ]

        return PersonProfile(
            person_id=person.person_id,
            full_name=person.full_name,
            phone=person.phone,
            notes=person.notes,
            total_attendances=len(rows),
            meeting_stats=stats,
            history=history,
        )

    def dashboard(self, timeframe: Timeframe, *, today: Optional[str] = None) -> Dashboard:
        today = today or today_local()
        since = reducers.timeframe_start(timeframe, today)
        rows = reducers.within(self._attendance.list_rows(since=since), since)

        return Dashboard(
            timeframe=timeframe.value,
            since=since,
            weekly=reducers.weekly_series(rows),
            meeting_totals=reducers.meeting_totals(rows),
            top_attendees=reducers.top_attendees(rows),
            streak_leaders=reducers.streak_leaderboard(rows),
        )

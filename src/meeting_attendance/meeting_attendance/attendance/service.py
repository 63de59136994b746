from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..common.datetime_utils import is_meeting_day, parse_iso_date, snap_to_valid_date, today_local, weekday_label
from ..core.constants import MAX_OPEN_SESSIONS, UNDO_WINDOW_SECONDS
from ..core.enums import ChangeType, MarkResult
from ..core.exceptions import NotFoundError, ValidationError
from ..meetings.model import Meeting
from ..meetings.repository import MeetingRepository
from ..people.model import Person
from ..people.search import SearchResult
from ..people.service import RosterService
from ..realtime.change_feed import ChangeFeed
from ..realtime.model import ChangeEvent
from ..stats import reducers
from ..stats.model import AttendeeCount
from .export import rows_to_csv
from .model import AttendanceRow
from .repository import AttendanceRepository
from .scheduler import Scheduler
from .session import AttendanceSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeetingOverview:
    meeting: Meeting
    count_today: int


class AttendanceService:
    """Use case: mark attendance per meeting/date and look it up afterwards.

    One ``AttendanceSession`` is kept per (meeting, date) and shared by every
    request that works on it. Only the ``max_sessions`` most recently used
    stay open; older ones are closed, committing any pending removal.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        meetings: MeetingRepository,
        roster: RosterService,
        *,
        feed: Optional[ChangeFeed] = None,
        scheduler: Optional[Scheduler] = None,
        undo_seconds: float = UNDO_WINDOW_SECONDS,
        max_sessions: int = MAX_OPEN_SESSIONS,
    ):
        self._attendance = attendance
        self._meetings = meetings
        self._roster = roster
        self._feed = feed
        self._scheduler = scheduler
        self._undo_seconds = float(undo_seconds)
        self._max_sessions = max(1, int(max_sessions))
        self._sessions: "OrderedDict[Tuple[str, str], AttendanceSession]" = OrderedDict()
        self._lock = threading.Lock()
        if feed is not None:
            # Renames and cascaded deletes of people change what sessions show.
            feed.subscribe("people", callback=self._on_people_change)

    # -- meetings ----------------------------------------------------------

    def get_meeting(self, meeting_id: str) -> Meeting:
        meeting = self._meetings.get_by_id(meeting_id)
        if not meeting:
            raise NotFoundError("Meeting not found")
        return meeting

    def overview(self, *, today: Optional[str] = None) -> List[MeetingOverview]:
        counts = self._attendance.counts_for_date(today or today_local())
        return [MeetingOverview(meeting=m, count_today=counts.get(m.meeting_id, 0)) for m in self._meetings.list_meetings()]

    def default_date(self, meeting: Meeting, *, today: Optional[str] = None) -> str:
        return snap_to_valid_date(today or today_local(), meeting.weekday)

    def validate_date(self, meeting: Meeting, date: str) -> str:
        try:
            parse_iso_date(date)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid date: {date}") from None
        weekday = meeting.weekday
        if not is_meeting_day(date, weekday):
            raise ValidationError(f"This service only meets on {weekday_label(weekday)}s.")
        return date

    # -- sessions ----------------------------------------------------------

    def session(self, meeting_id: str, date: Optional[str] = None, *, refresh: bool = False) -> AttendanceSession:
        """Open (or reuse) the session for a meeting/date.

        New sessions are always loaded from the store; ``refresh`` reloads a
        reused one too, which picks up writes made outside this process.
        """
        meeting = self.get_meeting(meeting_id)
        date = self.validate_date(meeting, date) if date else self.default_date(meeting)
        key = (meeting.meeting_id, date)

        evicted: List[AttendanceSession] = []
        with self._lock:
            session = self._sessions.get(key)
            if session is not None:
                self._sessions.move_to_end(key)
            else:
                session = AttendanceSession(
                    self._attendance,
                    meeting.meeting_id,
                    date,
                    scheduler=self._scheduler,
                    undo_seconds=self._undo_seconds,
                )
                self._sessions[key] = session
                while len(self._sessions) > self._max_sessions:
                    _, old = self._sessions.popitem(last=False)
                    evicted.append(old)
                if self._feed is not None:
                    session.attach(self._feed)
                refresh = True

        for old in evicted:
            logger.debug("closing idle session meeting=%s date=%s", old.meeting_id, old.date)
            old.close()
        if refresh:
            session.reconcile()
        return session

    @property
    def open_sessions(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _on_people_change(self, event: ChangeEvent) -> None:
        if event.event_type == ChangeType.INSERT:
            return
        with self._lock:
            sessions = list(self._sessions.values())
        for s in sessions:
            s.reconcile()

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for s in sessions:
            s.close()

    def mark(self, meeting_id: str, date: Optional[str], person_id: str) -> MarkResult:
        session = self.session(meeting_id, date)
        person = self._roster.get_person(person_id)
        result = session.mark(person)
        if result == MarkResult.SUCCESS:
            logger.debug("marked %s for meeting=%s date=%s", person_id, meeting_id, session.date)
            self._roster.refresh_counts()
        return result

    def add_and_mark(
        self,
        meeting_id: str,
        date: Optional[str],
        full_name: str,
        *,
        phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Tuple[Person, MarkResult]:
        session = self.session(meeting_id, date)
        person = self._roster.add_person(full_name, phone=phone, notes=notes)
        result = session.mark(person)
        if result == MarkResult.SUCCESS:
            self._roster.refresh_counts()
        return person, result

    def search(self, meeting_id: str, date: Optional[str], query: str) -> List[SearchResult]:
        session = self.session(meeting_id, date)
        return self._roster.search(query, session.marked_person_ids)

    def remove(self, meeting_id: str, date: Optional[str], entry_id: str) -> bool:
        return self.session(meeting_id, date).remove(entry_id)

    def undo(self, meeting_id: str, date: Optional[str]) -> bool:
        return self.session(meeting_id, date).undo()

    def dismiss_undo(self, meeting_id: str, date: Optional[str]) -> bool:
        return self.session(meeting_id, date).dismiss_undo()

    def delete_record(self, record_id: str) -> None:
        """Delete one record outright (from a person's history)."""
        if not self._attendance.delete_record(record_id):
            raise NotFoundError("Record not found")

    # -- history -----------------------------------------------------------

    def attendees_on(self, meeting_id: str, date: str) -> Sequence[AttendanceRow]:
        meeting = self.get_meeting(meeting_id)
        self.validate_date(meeting, date)
        rows = self._attendance.list_rows(meeting_id=meeting.meeting_id, date=date)
        return sorted(rows, key=lambda r: (r.marked_at is None, r.marked_at))

    def all_time_counts(self, meeting_id: str) -> List[AttendeeCount]:
        meeting = self.get_meeting(meeting_id)
        return reducers.count_by_person(self._attendance.list_rows(meeting_id=meeting.meeting_id))

    def export_csv(self) -> str:
        return rows_to_csv(self._attendance.list_rows())

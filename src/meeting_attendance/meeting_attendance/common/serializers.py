"""JSON shapes returned by the web layer."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..attendance.model import AttendanceEntry, AttendanceRow, PendingEntry
from .datetime_utils import weekday_label
from ..meetings.model import Meeting
from ..people.model import Person
from ..people.search import SearchResult
from ..stats.model import AttendeeCount, Dashboard, MeetingStat, PersonProfile, StreakEntry


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def meeting_json(m: Meeting) -> dict:
    weekday = m.weekday
    return {
        "id": m.meeting_id,
        "name": m.name,
        "display_order": m.display_order,
        "weekday": weekday_label(weekday) if weekday is not None else None,
    }


def person_json(p: Person) -> dict:
    return {
        "id": p.person_id,
        "full_name": p.full_name,
        "phone": p.phone,
        "notes": p.notes,
        "created_at": _ts(p.created_at),
    }


def entry_json(e: AttendanceEntry) -> dict:
    return {
        "id": e.entry_id,
        "person_id": e.person_id,
        "person_name": e.person_name,
        "marked_at": _ts(e.marked_at),
        "pending": isinstance(e, PendingEntry),
    }


def row_json(r: AttendanceRow) -> dict:
    return {
        "id": r.record_id,
        "date": r.date,
        "meeting_id": r.meeting_id,
        "meeting_name": r.meeting_name,
        "person_id": r.person_id,
        "person_name": r.person_name,
        "marked_at": _ts(r.marked_at),
    }


def search_result_json(r: SearchResult) -> dict:
    return {
        "person": person_json(r.person),
        "score": r.score,
        "already_marked": r.already_marked,
        "notes_match": r.notes_match,
    }


def attendee_count_json(a: AttendeeCount) -> dict:
    return {"person_id": a.person_id, "person_name": a.person_name, "count": a.count}


def streak_json(s: StreakEntry) -> dict:
    return {
        "person_id": s.person_id,
        "person_name": s.person_name,
        "meeting_id": s.meeting_id,
        "meeting_name": s.meeting_name,
        "streak": s.streak,
    }


def meeting_stat_json(s: MeetingStat) -> dict:
    return {
        "meeting": meeting_json(s.meeting),
        "times_attended": s.times_attended,
        "longest_streak": s.longest_streak,
        "current_streak": s.current_streak,
        "attendance_rate": s.attendance_rate,
    }


def profile_json(p: PersonProfile) -> dict:
    return {
        "id": p.person_id,
        "full_name": p.full_name,
        "phone": p.phone,
        "notes": p.notes,
        "total_attendances": p.total_attendances,
        "meetings": [meeting_stat_json(s) for s in p.meeting_stats],
        "history": [
            {"id": h.record_id, "meeting_id": h.meeting_id, "meeting_name": h.meeting_name, "date": h.date}
            for h in p.history
        ],
    }


def dashboard_json(d: Dashboard) -> dict:
    return {
        "timeframe": d.timeframe,
        "since": d.since,
        "weekly": [{"week_start": w.week_start, "counts": dict(w.counts)} for w in d.weekly],
        "meeting_totals": dict(d.meeting_totals),
        "top_attendees": [attendee_count_json(a) for a in d.top_attendees],
        "streak_leaders": [streak_json(s) for s in d.streak_leaders],
    }

from __future__ import annotations

import pytest

from src.meeting_attendance.meeting_attendance.core.enums import Timeframe
from src.meeting_attendance.meeting_attendance.core.exceptions import NotFoundError, ValidationError
from src.meeting_attendance.meeting_attendance.stats.service import StatsService, parse_timeframe


@pytest.fixture
def stats(attendance, meetings, people):
    return StatsService(attendance, meetings, people)


def test_parse_timeframe():
    assert parse_timeframe(None) == Timeframe.LAST_12_WEEKS
    assert parse_timeframe("6m") == Timeframe.LAST_6_MONTHS
    with pytest.raises(ValidationError):
        parse_timeframe("2w")


def test_person_profile(stats, attendance):
    for d in ("2024-05-19", "2024-05-26", "2024-06-02"):
        attendance.add(meeting_id="m-sun", person_id="p-mary", date=d)
    attendance.add(meeting_id="m-sat", person_id="p-mary", date="2024-06-01")
    attendance.add(meeting_id="m-gone", person_id="p-mary", date="2024-04-01")

    profile = stats.person_profile("p-mary", today="2024-06-02")

    assert profile.total_attendances == 5
    by_meeting = {s.meeting.meeting_id: s for s in profile.meeting_stats}
    sunday = by_meeting["m-sun"]
    assert (sunday.times_attended, sunday.longest_streak, sunday.current_streak, sunday.attendance_rate) == (3, 3, 3, 100)
    assert by_meeting["m-sat"].attendance_rate == 100
    assert "m-bible" not in by_meeting
    assert [h.date for h in profile.history][0] == "2024-06-02"
    assert profile.history[-1].meeting_name == "Unknown"


def test_person_profile_missing(stats):
    with pytest.raises(NotFoundError):
        stats.person_profile("p-ghost")


def test_dashboard_window(stats, attendance):
    attendance.add(meeting_id="m-sun", person_id="p-john", date="2024-03-03")
    attendance.add(meeting_id="m-sun", person_id="p-john", date="2024-05-26")
    attendance.add(meeting_id="m-sun", person_id="p-john", date="2024-06-02")
    attendance.add(meeting_id="m-sun", person_id="p-mary", date="2024-06-02")

    dash = stats.dashboard(Timeframe.LAST_4_WEEKS, today="2024-06-02")

    assert dash.since == "2024-05-05"
    assert dash.meeting_totals == {"m-sun": 3}
    assert [(a.person_name, a.count) for a in dash.top_attendees] == [("John Smith", 2), ("Mary Jones", 1)]
    assert [(s.person_name, s.streak) for s in dash.streak_leaders] == [("John Smith", 2)]

    everything = stats.dashboard(Timeframe.ALL_TIME, today="2024-06-02")
    assert everything.since is None
    assert everything.meeting_totals == {"m-sun": 4}

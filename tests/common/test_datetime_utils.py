from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.meeting_attendance.meeting_attendance.common import datetime_utils
from src.meeting_attendance.meeting_attendance.common.datetime_utils import (
    days_between,
    format_iso_date,
    is_meeting_day,
    parse_iso_date,
    required_weekday,
    shift_date,
    snap_forward,
    snap_to_valid_date,
    today_local,
    week_start,
)
from src.meeting_attendance.meeting_attendance.core.enums import Weekday


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Sunday Service", Weekday.SUNDAY),
        ("SATURDAY prayer", Weekday.SATURDAY),
        ("Shabibeh", Weekday.SATURDAY),
        # Sunday wins when both appear.
        ("Saturday & Sunday retreat", Weekday.SUNDAY),
        ("Bible Study", None),
    ],
)
def test_required_weekday(name, expected):
    assert required_weekday(name) == expected


def test_snap_to_valid_date():
    assert snap_to_valid_date("2024-06-05", Weekday.SUNDAY) == "2024-06-02"
    assert snap_to_valid_date("2024-06-02", Weekday.SUNDAY) == "2024-06-02"
    assert snap_to_valid_date("2024-06-05", Weekday.SATURDAY) == "2024-06-01"
    assert snap_to_valid_date("2024-06-05", None) == "2024-06-05"


def test_week_start_is_monday():
    assert week_start("2024-06-02") == "2024-05-27"
    assert week_start("2024-06-03") == "2024-06-03"


def test_is_meeting_day():
    assert is_meeting_day("2024-06-02", Weekday.SUNDAY)
    assert not is_meeting_day("2024-06-01", Weekday.SUNDAY)
    assert is_meeting_day("2024-06-04", None)


@pytest.mark.parametrize("weekday", [Weekday.SUNDAY, Weekday.SATURDAY, None])
@pytest.mark.parametrize("value", ["2024-02-29", "2024-06-01", "2025-01-01"])
def test_snap_is_idempotent(value, weekday):
    once = snap_to_valid_date(value, weekday)
    assert snap_to_valid_date(once, weekday) == once


@pytest.mark.parametrize(
    "start,days",
    [
        (date(2024, 1, 31), 1),
        (date(2024, 2, 28), 1),
        (date(2024, 2, 29), 1),
        (date(2023, 2, 28), 1),
        (date(2024, 3, 1), -1),
        (date(2024, 12, 31), 1),
        (date(2025, 1, 1), -1),
        (date(2024, 6, 2), -182),
        (date(2024, 6, 2), 365),
        (date(2024, 6, 2), 0),
    ],
)
def test_shift_date_matches_calendar_arithmetic(start, days):
    shifted = shift_date(format_iso_date(start), days)

    assert parse_iso_date(shifted) == start + timedelta(days=days)
    assert days_between(format_iso_date(start), shifted) == days


def test_snap_forward():
    assert snap_forward("2024-06-03", Weekday.SUNDAY) == "2024-06-09"
    assert snap_forward("2024-06-09", Weekday.SUNDAY) == "2024-06-09"
    assert snap_forward("2024-12-29", Weekday.SATURDAY) == "2025-01-04"


def test_today_local_uses_local_clock(monkeypatch):
    monkeypatch.setattr(datetime_utils, "now_local", lambda: datetime(2024, 2, 29, 23, 59))
    assert today_local() == "2024-02-29"

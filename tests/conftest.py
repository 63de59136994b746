from __future__ import annotations

import itertools
from datetime import datetime, timedelta
from typing import Callable, Optional

import pytest

from src.meeting_attendance.meeting_attendance.attendance.model import (
    AttendanceRecord,
    AttendanceRow,
    ConfirmedEntry,
)
from src.meeting_attendance.meeting_attendance.core.constants import UNKNOWN_NAME
from src.meeting_attendance.meeting_attendance.core.enums import ChangeType
from src.meeting_attendance.meeting_attendance.core.exceptions import ConflictError, StoreError
from src.meeting_attendance.meeting_attendance.meetings.model import Meeting
from src.meeting_attendance.meeting_attendance.people.model import Person
from src.meeting_attendance.meeting_attendance.realtime.change_feed import ChangeFeed
from src.meeting_attendance.meeting_attendance.realtime.model import ChangeEvent


class Ticker:
    """Clock that moves one second forward on every call."""

    def __init__(self, start: datetime = datetime(2024, 6, 2, 10, 0, 0)):
        self._now = start

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


class ManualTimer:
    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    def __init__(self):
        self.timers: list[ManualTimer] = []

    def call_later(self, delay, callback):
        timer = ManualTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def fire_all(self) -> int:
        fired = 0
        for t in self.active:
            t.fired = True
            t.callback()
            fired += 1
        return fired


class InMemoryMeetings:
    def __init__(self, meetings):
        self.meetings = {m.meeting_id: m for m in meetings}

    def list_meetings(self):
        return sorted(self.meetings.values(), key=lambda m: (m.display_order, m.name))

    def get_by_id(self, meeting_id):
        return self.meetings.get(meeting_id)


class InMemoryPeople:
    def __init__(self, people=()):
        self.people = {p.person_id: p for p in people}
        self._ids = itertools.count(1)

    def list_people(self):
        return sorted(self.people.values(), key=lambda p: p.full_name)

    def get_by_id(self, person_id):
        return self.people.get(person_id)

    def create_person(self, *, full_name, phone=None, notes=None):
        person = Person(person_id=f"new-{next(self._ids)}", full_name=full_name, phone=phone, notes=notes)
        self.people[person.person_id] = person
        return person

    def create_many(self, full_names):
        return [self.create_person(full_name=n) for n in full_names]

    def update_person(self, person_id, *, full_name, phone, notes):
        if person_id not in self.people:
            return False
        self.people[person_id] = Person(person_id=person_id, full_name=full_name, phone=phone, notes=notes)
        return True

    def delete_person(self, person_id):
        return self.people.pop(person_id, None) is not None


class InMemoryAttendance:
    """Attendance store with a unique (meeting, person, date) constraint.

    ``fail_*`` flags make the next calls raise StoreError; ``on_insert`` runs
    after a row is stored but before the call returns.
    """

    def __init__(self, people: Optional[InMemoryPeople] = None, meetings: Optional[InMemoryMeetings] = None, feed=None, clock=None):
        self.records: dict[str, AttendanceRecord] = {}
        self.people = people or InMemoryPeople()
        self.meetings = meetings
        self.feed = feed
        self.clock = clock or Ticker()
        self._ids = itertools.count(1)
        self.fail_insert = False
        self.fail_delete = False
        self.fail_list = False
        self.on_insert: Optional[Callable[[], None]] = None
        self.deleted: list[str] = []
        self.list_calls = 0

    def _publish(self, event_type, *, new=None, old=None):
        if self.feed is not None:
            self.feed.publish(ChangeEvent("attendance_records", event_type, new=new, old=old))

    @staticmethod
    def _row(rec: AttendanceRecord) -> dict:
        return {"id": rec.record_id, "meeting_id": rec.meeting_id, "person_id": rec.person_id, "date": rec.date}

    def add(self, *, meeting_id, person_id, date, marked_at=None) -> AttendanceRecord:
        rec = AttendanceRecord(
            record_id=f"rec-{next(self._ids)}",
            meeting_id=meeting_id,
            person_id=person_id,
            date=date,
            marked_at=marked_at or self.clock(),
        )
        self.records[rec.record_id] = rec
        return rec

    def _entry(self, rec: AttendanceRecord) -> ConfirmedEntry:
        return ConfirmedEntry(record=rec, person=self.people.get_by_id(rec.person_id))

    def list_entries(self, meeting_id, date):
        self.list_calls += 1
        if self.fail_list:
            raise StoreError("list failed")
        recs = [r for r in self.records.values() if r.meeting_id == meeting_id and r.date == date]
        recs.sort(key=lambda r: r.marked_at, reverse=True)
        return [self._entry(r) for r in recs]

    def insert_record(self, *, meeting_id, person_id, date):
        if self.fail_insert:
            raise StoreError("insert failed")
        if any(
            r.meeting_id == meeting_id and r.person_id == person_id and r.date == date for r in self.records.values()
        ):
            raise ConflictError("duplicate")
        rec = self.add(meeting_id=meeting_id, person_id=person_id, date=date)
        if self.on_insert is not None:
            hook, self.on_insert = self.on_insert, None
            hook()
        self._publish(ChangeType.INSERT, new=self._row(rec))
        return self._entry(rec)

    def delete_record(self, record_id):
        if self.fail_delete:
            raise StoreError("delete failed")
        rec = self.records.pop(record_id, None)
        if rec is None:
            return False
        self.deleted.append(record_id)
        self._publish(ChangeType.DELETE, old=self._row(rec))
        return True

    def get_record(self, record_id):
        return self.records.get(record_id)

    def list_rows(self, *, meeting_id=None, person_id=None, date=None, since=None):
        rows = []
        for r in self.records.values():
            if meeting_id and r.meeting_id != meeting_id:
                continue
            if person_id and r.person_id != person_id:
                continue
            if date and r.date != date:
                continue
            if since and r.date < since:
                continue
            person = self.people.get_by_id(r.person_id)
            meeting = self.meetings.get_by_id(r.meeting_id) if self.meetings else None
            rows.append(
                AttendanceRow(
                    record_id=r.record_id,
                    meeting_id=r.meeting_id,
                    person_id=r.person_id,
                    date=r.date,
                    marked_at=r.marked_at,
                    meeting_name=meeting.name if meeting else UNKNOWN_NAME,
                    person_name=person.full_name if person else UNKNOWN_NAME,
                )
            )
        rows.sort(key=lambda r: (r.date, r.marked_at))
        return rows

    def person_counts(self):
        counts: dict[str, int] = {}
        for r in self.records.values():
            counts[r.person_id] = counts.get(r.person_id, 0) + 1
        return counts

    def counts_for_date(self, date):
        counts: dict[str, int] = {}
        for r in self.records.values():
            if r.date == date:
                counts[r.meeting_id] = counts.get(r.meeting_id, 0) + 1
        return counts

    def reassign_person(self, record_id, person_id):
        rec = self.records.get(record_id)
        if rec is None:
            return False
        if any(
            o.record_id != record_id and o.meeting_id == rec.meeting_id and o.person_id == person_id and o.date == rec.date
            for o in self.records.values()
        ):
            raise ConflictError("duplicate")
        self.records[record_id] = AttendanceRecord(
            record_id=rec.record_id,
            meeting_id=rec.meeting_id,
            person_id=person_id,
            date=rec.date,
            marked_at=rec.marked_at,
        )
        return True


SUNDAY = Meeting(meeting_id="m-sun", name="Sunday Service", display_order=1)
SATURDAY = Meeting(meeting_id="m-sat", name="Shabibeh", display_order=2)
BIBLE = Meeting(meeting_id="m-bible", name="Bible Study", display_order=3)


@pytest.fixture
def meetings():
    return InMemoryMeetings([SUNDAY, SATURDAY, BIBLE])


@pytest.fixture
def people():
    return InMemoryPeople(
        [
            Person(person_id="p-john", full_name="John Smith"),
            Person(person_id="p-joanna", full_name="Joanna Lee", notes="choir"),
            Person(person_id="p-mary", full_name="Mary Jones", notes="new in town"),
        ]
    )


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def attendance(people, meetings, feed):
    return InMemoryAttendance(people, meetings, feed)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def ticker():
    return Ticker()

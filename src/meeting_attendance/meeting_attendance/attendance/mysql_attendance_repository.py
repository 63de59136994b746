from __future__ import annotations

import uuid
from typing import Mapping, Optional, Sequence

from ..core.constants import UNKNOWN_NAME
from ..core.enums import ChangeType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from ..people.model import Person
from ..realtime.change_feed import ChangeFeed
from ..realtime.model import ChangeEvent
from .model import AttendanceRecord, AttendanceRow, ConfirmedEntry
from .repository import AttendanceRepository

COLLECTION = "attendance_records"

_ENTRY_SELECT = """
    SELECT r.id, r.meeting_id, r.person_id, r.date, r.marked_at,
           p.full_name, p.phone, p.notes, p.created_at
    FROM attendance_records r
    LEFT JOIN people p ON p.id = r.person_id
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=str(r["id"]),
        meeting_id=str(r["meeting_id"]),
        person_id=str(r["person_id"]),
        date=normalize_mysql_date(r["date"]),
        marked_at=r["marked_at"],
    )


def _to_entry(r: dict) -> ConfirmedEntry:
    person = None
    if r.get("full_name") is not None:
        person = Person(
            person_id=str(r["person_id"]),
            full_name=r["full_name"],
            phone=r.get("phone"),
            notes=r.get("notes"),
            created_at=r.get("created_at"),
        )
    return ConfirmedEntry(record=_to_record(r), person=person)


def _as_row(rec: AttendanceRecord) -> dict:
    return {
        "id": rec.record_id,
        "meeting_id": rec.meeting_id,
        "person_id": rec.person_id,
        "date": rec.date,
        "marked_at": rec.marked_at,
    }


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection, feed: Optional[ChangeFeed] = None):
        self._conn_factory = conn_factory
        self._feed = feed

    def _publish(self, event_type: ChangeType, *, new: Optional[dict] = None, old: Optional[dict] = None) -> None:
        if self._feed is not None:
            self._feed.publish(ChangeEvent(collection=COLLECTION, event_type=event_type, new=new, old=old))

    def list_entries(self, meeting_id: str, date: str) -> Sequence[ConfirmedEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_ENTRY_SELECT}
                WHERE r.meeting_id=%s AND r.date=%s
                ORDER BY r.marked_at DESC
                """,
                (meeting_id, date),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def insert_record(self, *, meeting_id: str, person_id: str, date: str) -> ConfirmedEntry:
        record_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(id, meeting_id, person_id, date)
                VALUES(%s,%s,%s,%s)
                """,
                (record_id, meeting_id, person_id, date),
            )
            cur.execute(f"{_ENTRY_SELECT} WHERE r.id=%s", (record_id,))
            entry = _to_entry(fetchone(cur))
        self._publish(ChangeType.INSERT, new=_as_row(entry.record))
        return entry

    def delete_record(self, record_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, meeting_id, person_id, date, marked_at FROM attendance_records WHERE id=%s",
                (record_id,),
            )
            existing = fetchone(cur)
            if not existing:
                return False
            cur.execute("DELETE FROM attendance_records WHERE id=%s", (record_id,))
        self._publish(ChangeType.DELETE, old=_as_row(_to_record(existing)))
        return True

    def get_record(self, record_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, meeting_id, person_id, date, marked_at FROM attendance_records WHERE id=%s",
                (record_id,),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_rows(
        self,
        *,
        meeting_id: Optional[str] = None,
        person_id: Optional[str] = None,
        date: Optional[str] = None,
        since: Optional[str] = None,
    ) -> Sequence[AttendanceRow]:
        where: list[str] = []
        params: list = []
        if meeting_id:
            where.append("r.meeting_id=%s")
            params.append(meeting_id)
        if person_id:
            where.append("r.person_id=%s")
            params.append(person_id)
        if date:
            where.append("r.date=%s")
            params.append(date)
        if since:
            where.append("r.date>=%s")
            params.append(since)
        where_sql = ("WHERE " + " AND ".join(where)) if where else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT r.id, r.meeting_id, r.person_id, r.date, r.marked_at,
                       m.name AS meeting_name, p.full_name AS person_name
                FROM attendance_records r
                LEFT JOIN meetings m ON m.id = r.meeting_id
                LEFT JOIN people p ON p.id = r.person_id
                {where_sql}
                ORDER BY r.date ASC, r.marked_at ASC
                """,
                tuple(params),
            )
            return [
                AttendanceRow(
                    record_id=str(r["id"]),
                    meeting_id=str(r["meeting_id"]),
                    person_id=str(r["person_id"]),
                    date=normalize_mysql_date(r["date"]),
                    marked_at=r.get("marked_at"),
                    meeting_name=r.get("meeting_name") or UNKNOWN_NAME,
                    person_name=r.get("person_name") or UNKNOWN_NAME,
                )
                for r in fetchall(cur)
            ]

    def person_counts(self) -> Mapping[str, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT person_id, COUNT(*) AS n FROM attendance_records GROUP BY person_id")
            return {str(r["person_id"]): int(r["n"]) for r in fetchall(cur)}

    def counts_for_date(self, date: str) -> Mapping[str, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT meeting_id, COUNT(*) AS n FROM attendance_records WHERE date=%s GROUP BY meeting_id",
                (date,),
            )
            return {str(r["meeting_id"]): int(r["n"]) for r in fetchall(cur)}

    def reassign_person(self, record_id: str, person_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE attendance_records SET person_id=%s WHERE id=%s", (person_id, record_id))
            changed = cur.rowcount > 0
            if changed:
                cur.execute(
                    "SELECT id, meeting_id, person_id, date, marked_at FROM attendance_records WHERE id=%s",
                    (record_id,),
                )
                updated = _to_record(fetchone(cur))
        if changed:
            self._publish(ChangeType.UPDATE, new=_as_row(updated))
        return changed

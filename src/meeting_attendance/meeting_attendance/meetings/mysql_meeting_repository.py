from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Meeting
from .repository import MeetingRepository


def _to_meeting(r: dict) -> Meeting:
    return Meeting(meeting_id=str(r["id"]), name=r["name"], display_order=int(r["display_order"] or 0))


class MySQLMeetingRepository(MeetingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_meetings(self) -> Sequence[Meeting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, display_order FROM meetings ORDER BY display_order, name")
            return [_to_meeting(r) for r in fetchall(cur)]

    def get_by_id(self, meeting_id: str) -> Optional[Meeting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, display_order FROM meetings WHERE id=%s", (meeting_id,))
            r = fetchone(cur)
            return _to_meeting(r) if r else None

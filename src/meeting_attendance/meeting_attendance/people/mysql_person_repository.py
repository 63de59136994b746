from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..core.enums import ChangeType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..realtime.change_feed import ChangeFeed
from ..realtime.model import ChangeEvent
from .model import Person
from .repository import PersonRepository

COLLECTION = "people"

_SELECT = "SELECT id, full_name, phone, notes, created_at FROM people"


def _to_person(r: dict) -> Person:
    return Person(
        person_id=str(r["id"]),
        full_name=r["full_name"],
        phone=r.get("phone"),
        notes=r.get("notes"),
        created_at=r.get("created_at"),
    )


def _as_row(p: Person) -> dict:
    return {"id": p.person_id, "full_name": p.full_name, "phone": p.phone, "notes": p.notes}


class MySQLPersonRepository(PersonRepository):
    def __init__(self, conn_factory: DatabaseConnection, feed: Optional[ChangeFeed] = None):
        self._conn_factory = conn_factory
        self._feed = feed

    def _publish(self, event_type: ChangeType, *, new: Optional[dict] = None, old: Optional[dict] = None) -> None:
        if self._feed is not None:
            self._feed.publish(ChangeEvent(collection=COLLECTION, event_type=event_type, new=new, old=old))

    def list_people(self) -> Sequence[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} ORDER BY full_name")
            return [_to_person(r) for r in fetchall(cur)]

    def get_by_id(self, person_id: str) -> Optional[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE id=%s", (person_id,))
            r = fetchone(cur)
            return _to_person(r) if r else None

    def create_person(self, *, full_name: str, phone: Optional[str] = None, notes: Optional[str] = None) -> Person:
        person_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO people(id, full_name, phone, notes) VALUES(%s,%s,%s,%s)",
                (person_id, full_name, phone, notes),
            )
            cur.execute(f"{_SELECT} WHERE id=%s", (person_id,))
            person = _to_person(fetchone(cur))
        self._publish(ChangeType.INSERT, new=_as_row(person))
        return person

    def create_many(self, full_names: Sequence[str]) -> Sequence[Person]:
        if not full_names:
            return []
        ids = [str(uuid.uuid4()) for _ in full_names]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                "INSERT INTO people(id, full_name) VALUES(%s,%s)",
                list(zip(ids, full_names)),
            )
            placeholders = ",".join(["%s"] * len(ids))
            cur.execute(f"{_SELECT} WHERE id IN ({placeholders}) ORDER BY full_name", tuple(ids))
            people = [_to_person(r) for r in fetchall(cur)]
        for p in people:
            self._publish(ChangeType.INSERT, new=_as_row(p))
        return people

    def update_person(self, person_id: str, *, full_name: str, phone: Optional[str], notes: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE people SET full_name=%s, phone=%s, notes=%s WHERE id=%s",
                (full_name, phone, notes, person_id),
            )
            changed = cur.rowcount > 0
        if changed:
            self._publish(
                ChangeType.UPDATE,
                new={"id": person_id, "full_name": full_name, "phone": phone, "notes": notes},
            )
        return changed

    def delete_person(self, person_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM people WHERE id=%s", (person_id,))
            deleted = cur.rowcount > 0
        if deleted:
            self._publish(ChangeType.DELETE, old={"id": person_id})
        return deleted

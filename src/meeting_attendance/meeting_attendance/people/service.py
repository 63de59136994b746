from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AbstractSet, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.validators import normalize_name, optional_text, require_non_empty
from ..core.exceptions import ConflictError, NotFoundError, StoreError, ValidationError
from .model import Person
from .repository import PersonRepository
from .search import RosterIndex, SearchResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportSummary:
    added: Sequence[Person] = field(default_factory=tuple)
    skipped: int = 0

    @property
    def message(self) -> str:
        if not self.added:
            return "All names already exist."
        msg = f"Added {len(self.added)} people"
        if self.skipped:
            msg += f", skipped {self.skipped} duplicate{'s' if self.skipped > 1 else ''}"
        return msg + "."


class RosterService:
    """Use case: keep the roster and its search index.

    Every mutation reloads the index wholesale from the store.
    """

    def __init__(self, people: PersonRepository, attendance: AttendanceRepository, index: Optional[RosterIndex] = None):
        self._people = people
        self._attendance = attendance
        self.index = index or RosterIndex()

    def reload(self) -> None:
        self.index.rebuild(self._people.list_people(), self._attendance.person_counts())

    def refresh_counts(self) -> None:
        """Reload only the attendance counts that break search ties."""
        try:
            counts = self._attendance.person_counts()
        except StoreError:
            logger.warning("could not refresh attendance counts", exc_info=True)
            return
        self.index.rebuild(self.index.people, counts)

    def list_people(self) -> Sequence[Person]:
        return self.index.people

    def search(self, query: str, marked_ids: AbstractSet[str] = frozenset()) -> list[SearchResult]:
        return self.index.search(query, marked_ids)

    def get_person(self, person_id: str) -> Person:
        person = self.index.get(person_id) or self._people.get_by_id(person_id)
        if not person:
            raise NotFoundError("Person not found")
        return person

    def _ensure_unique(self, full_name: str, *, exclude_id: Optional[str] = None) -> None:
        if self.index.is_duplicate(full_name, exclude_id=exclude_id):
            raise ValidationError(f'"{full_name}" already exists')

    def add_person(self, full_name: str, *, phone: Optional[str] = None, notes: Optional[str] = None) -> Person:
        full_name = require_non_empty(full_name, "Name")
        self._ensure_unique(full_name)
        person = self._people.create_person(full_name=full_name, phone=optional_text(phone), notes=optional_text(notes))
        self.reload()
        return person

    def update_person(self, person_id: str, *, full_name: str, phone: Optional[str] = None, notes: Optional[str] = None) -> Person:
        self.get_person(person_id)
        full_name = require_non_empty(full_name, "Name")
        self._ensure_unique(full_name, exclude_id=person_id)
        self._people.update_person(person_id, full_name=full_name, phone=optional_text(phone), notes=optional_text(notes))
        self.reload()
        return self.get_person(person_id)

    def delete_person(self, person_id: str) -> None:
        self.get_person(person_id)
        self._people.delete_person(person_id)
        self.reload()

    def import_names(self, text: str) -> ImportSummary:
        """Add every comma-separated name that is not on the roster yet."""
        names = [n.strip() for n in (text or "").split(",")]
        names = [n for n in names if n]
        if not names:
            raise ValidationError("No names to import")

        seen: set[str] = set()
        unique: list[str] = []
        for name in names:
            key = normalize_name(name)
            if key in seen or self.index.is_duplicate(name):
                continue
            seen.add(key)
            unique.append(name)

        if not unique:
            return ImportSummary(added=(), skipped=len(names))

        added = self._people.create_many(unique)
        self.reload()
        return ImportSummary(added=tuple(added), skipped=len(names) - len(unique))

    def merge_people(self, source_id: str, target_id: str) -> int:
        """Move ``source``'s attendance onto ``target`` and delete ``source``.

        Records that would collide with one ``target`` already has for the
        same meeting and date are dropped. Returns how many records moved.
        """
        if source_id == target_id:
            raise ValidationError("Cannot merge a person into themselves")
        source = self.get_person(source_id)
        self.get_person(target_id)

        taken = {(r.meeting_id, r.date) for r in self._attendance.list_rows(person_id=target_id)}
        moved = 0
        for row in self._attendance.list_rows(person_id=source_id):
            if (row.meeting_id, row.date) in taken:
                self._attendance.delete_record(row.record_id)
                continue
            try:
                self._attendance.reassign_person(row.record_id, target_id)
            except ConflictError:
                # Marked for the target concurrently.
                self._attendance.delete_record(row.record_id)
                continue
            taken.add((row.meeting_id, row.date))
            moved += 1

        self._people.delete_person(source_id)
        logger.info("merged %s into %s (%d records moved)", source.full_name, target_id, moved)
        self.reload()
        return moved

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from ..core.constants import UNKNOWN_NAME
from ..people.model import Person


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one person attended one meeting on one date."""

    record_id: str
    meeting_id: str
    person_id: str
    date: str
    marked_at: datetime


@dataclass(frozen=True)
class ConfirmedEntry:
    """Record acknowledged by the store, joined with its person."""

    record: AttendanceRecord
    person: Optional[Person] = None

    @property
    def entry_id(self) -> str:
        return self.record.record_id

    @property
    def person_id(self) -> str:
        return self.record.person_id

    @property
    def marked_at(self) -> datetime:
        return self.record.marked_at

    @property
    def person_name(self) -> str:
        return self.person.full_name if self.person else UNKNOWN_NAME


@dataclass(frozen=True)
class PendingEntry:
    """Optimistic entry shown while the insert is still in flight."""

    temp_id: str
    meeting_id: str
    date: str
    person: Person
    marked_at: datetime

    @property
    def entry_id(self) -> str:
        return self.temp_id

    @property
    def person_id(self) -> str:
        return self.person.person_id

    @property
    def person_name(self) -> str:
        return self.person.full_name


AttendanceEntry = Union[PendingEntry, ConfirmedEntry]


@dataclass(frozen=True)
class AttendanceRow:
    """Flat read-model used by history, stats and export."""

    record_id: str
    meeting_id: str
    person_id: str
    date: str
    marked_at: Optional[datetime] = None
    meeting_name: str = UNKNOWN_NAME
    person_name: str = UNKNOWN_NAME

from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence

from .model import AttendanceRecord, AttendanceRow, ConfirmedEntry


class AttendanceRepository(Protocol):
    def list_entries(self, meeting_id: str, date: str) -> Sequence[ConfirmedEntry]:
        """Entries of one meeting/date, newest ``marked_at`` first."""

        raise NotImplementedError

    def insert_record(self, *, meeting_id: str, person_id: str, date: str) -> ConfirmedEntry:
        """Insert and return the authoritative entry.

        Raises ConflictError when the person is already recorded for that
        meeting and date.
        """

        raise NotImplementedError

    def delete_record(self, record_id: str) -> bool:
        raise NotImplementedError

    def get_record(self, record_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_rows(
        self,
        *,
        meeting_id: Optional[str] = None,
        person_id: Optional[str] = None,
        date: Optional[str] = None,
        since: Optional[str] = None,
    ) -> Sequence[AttendanceRow]:
        """Rows ordered by date then marked_at, ascending."""

        raise NotImplementedError

    def person_counts(self) -> Mapping[str, int]:
        raise NotImplementedError

    def counts_for_date(self, date: str) -> Mapping[str, int]:
        """Number of records per meeting_id on ``date``."""

        raise NotImplementedError

    def reassign_person(self, record_id: str, person_id: str) -> bool:
        """Point a record at another person (used by merges).

        Raises ConflictError when the target already has that meeting/date.
        """

        raise NotImplementedError

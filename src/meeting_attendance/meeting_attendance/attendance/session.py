"""Marking session for one (meeting, date) view.

State: the visible entries (newest first), the set of marked person ids and
at most one removal waiting out its undo window. Local state is changed
before the store is called so the view always reflects the last user action;
the lock is never held across a store call.
"""

from __future__ import annotations

import itertools
import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import UNDO_WINDOW_SECONDS
from ..core.enums import ChangeType, MarkResult
from ..core.exceptions import ConflictError, StoreError
from ..people.model import Person
from ..realtime.change_feed import ChangeFeed, Subscription
from ..realtime.model import ChangeEvent
from .model import AttendanceEntry, ConfirmedEntry, PendingEntry
from .repository import AttendanceRepository
from .scheduler import Scheduler, ThreadingScheduler, TimerHandle

logger = logging.getLogger(__name__)


def _temp_id_factory() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"pending-{uuid.uuid4().hex[:8]}-{next(counter)}"


@dataclass
class _PendingRemoval:
    entry: AttendanceEntry
    timer: Optional[TimerHandle] = None


class AttendanceSession:
    def __init__(
        self,
        attendance: AttendanceRepository,
        meeting_id: str,
        date: str,
        *,
        scheduler: Optional[Scheduler] = None,
        undo_seconds: float = UNDO_WINDOW_SECONDS,
        clock: Callable[[], datetime] = now_local,
        temp_ids: Optional[Callable[[], str]] = None,
    ):
        self._attendance = attendance
        self.meeting_id = meeting_id
        self.date = date
        self._scheduler = scheduler or ThreadingScheduler()
        self._undo_seconds = float(undo_seconds)
        self._clock = clock
        self._temp_ids = temp_ids or _temp_id_factory()

        self._lock = threading.RLock()
        self._entries: list[AttendanceEntry] = []
        self._marked: set[str] = set()
        self._pending_removal: Optional[_PendingRemoval] = None
        # temp_id -> person_id for inserts still waiting on the store
        self._in_flight: Dict[str, str] = {}
        # temp_id -> person_id for in-flight inserts whose removal was committed
        self._abandoned: Dict[str, str] = {}
        self._subscription: Optional[Subscription] = None

    # -- read side ---------------------------------------------------------

    @property
    def entries(self) -> Sequence[AttendanceEntry]:
        with self._lock:
            return tuple(self._entries)

    @property
    def marked_person_ids(self) -> frozenset:
        with self._lock:
            return frozenset(self._marked)

    @property
    def pending_undo(self) -> Optional[AttendanceEntry]:
        with self._lock:
            return self._pending_removal.entry if self._pending_removal else None

    def is_marked(self, person_id: str) -> bool:
        with self._lock:
            return person_id in self._marked

    # -- reconciliation ----------------------------------------------------

    def reconcile(self) -> bool:
        """Replace local state with a fresh fetch from the store.

        On failure the current (possibly stale) state is kept.
        """
        try:
            fetched = list(self._attendance.list_entries(self.meeting_id, self.date))
        except StoreError:
            logger.warning("reconcile failed for meeting=%s date=%s", self.meeting_id, self.date, exc_info=True)
            return False

        with self._lock:
            hidden = set(self._abandoned.values())
            if self._pending_removal is not None:
                hidden.add(self._pending_removal.entry.person_id)

            entries: list[AttendanceEntry] = [e for e in fetched if e.person_id not in hidden]
            fetched_people = {e.person_id for e in entries}
            # Keep optimistic entries whose insert has not landed yet.
            for e in self._entries:
                if isinstance(e, PendingEntry) and e.temp_id in self._in_flight and e.person_id not in fetched_people:
                    entries.append(e)
            entries.sort(key=lambda e: e.marked_at, reverse=True)

            self._entries = entries
            self._marked = {e.person_id for e in entries}
        return True

    def handle_change(self, event: ChangeEvent) -> bool:
        """React to a store change; returns True when a refetch was triggered."""
        row = event.row
        if row.get("meeting_id", self.meeting_id) != self.meeting_id:
            return False
        if event.new is not None and str(event.new.get("date")) != self.date:
            return False
        if event.event_type == ChangeType.DELETE and event.old and "date" in event.old:
            if str(event.old["date"]) != self.date:
                return False
        return self.reconcile()

    def attach(self, feed: ChangeFeed, collection: str = "attendance_records") -> Subscription:
        self.detach()
        self._subscription = feed.subscribe(collection, filters={"meeting_id": self.meeting_id}, callback=self.handle_change)
        return self._subscription

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def close(self) -> None:
        """Commit any removal still in its undo window and stop listening."""
        self.dismiss_undo()
        self.detach()

    # -- marking -----------------------------------------------------------

    def mark(self, person: Person) -> MarkResult:
        with self._lock:
            pending = self._pending_removal
            if pending is not None and pending.entry.person_id == person.person_id:
                restore = True
            elif person.person_id in self._marked:
                return MarkResult.DUPLICATE
            else:
                restore = False
        if restore:
            # Re-marking someone whose removal is still undoable is an undo.
            self.undo()
            return MarkResult.SUCCESS

        with self._lock:
            temp = PendingEntry(
                temp_id=self._temp_ids(),
                meeting_id=self.meeting_id,
                date=self.date,
                person=person,
                marked_at=self._clock(),
            )
            self._entries.insert(0, temp)
            self._marked.add(person.person_id)
            self._in_flight[temp.temp_id] = person.person_id

        try:
            confirmed = self._attendance.insert_record(
                meeting_id=self.meeting_id,
                person_id=person.person_id,
                date=self.date,
            )
        except ConflictError:
            logger.info("duplicate mark for person=%s meeting=%s date=%s", person.person_id, self.meeting_id, self.date)
            self._rollback(temp)
            self.reconcile()
            return MarkResult.DUPLICATE
        except StoreError:
            logger.warning("mark failed for person=%s meeting=%s", person.person_id, self.meeting_id, exc_info=True)
            self._rollback(temp)
            return MarkResult.FAILURE

        if self._settle(temp, confirmed):
            self._delete_quietly(confirmed.entry_id)
            with self._lock:
                self._abandoned.pop(temp.temp_id, None)
        return MarkResult.SUCCESS

    def _rollback(self, temp: PendingEntry) -> None:
        with self._lock:
            self._in_flight.pop(temp.temp_id, None)
            self._abandoned.pop(temp.temp_id, None)
            self._entries = [e for e in self._entries if e.entry_id != temp.temp_id]
            pending = self._pending_removal
            if pending is not None and pending.entry.entry_id == temp.temp_id:
                self._take_pending()
            self._marked = {e.person_id for e in self._entries}

    def _settle(self, temp: PendingEntry, confirmed: ConfirmedEntry) -> bool:
        """Swap the optimistic entry for the confirmed one.

        Returns True when the user already removed the entry for good, in
        which case the confirmed row has to be deleted.
        """
        with self._lock:
            self._in_flight.pop(temp.temp_id, None)
            if temp.temp_id in self._abandoned:
                return True

            pending = self._pending_removal
            if pending is not None and pending.entry.entry_id == temp.temp_id:
                # Still undoable: the slot now points at the real record.
                pending.entry = confirmed
                return False

            if self._has_entry(confirmed.entry_id):
                self._entries = [e for e in self._entries if e.entry_id != temp.temp_id]
            elif self._has_entry(temp.temp_id):
                self._entries = [confirmed if e.entry_id == temp.temp_id else e for e in self._entries]
            else:
                self._entries.append(confirmed)
                self._entries.sort(key=lambda e: e.marked_at, reverse=True)
            self._marked.add(confirmed.person_id)
            return False

    def _has_entry(self, entry_id: str) -> bool:
        return any(e.entry_id == entry_id for e in self._entries)

    # -- removal with undo -------------------------------------------------

    def remove(self, entry_id: str) -> bool:
        """Hide an entry now and delete it once the undo window runs out.

        A removal already waiting in the undo slot is committed first. A
        pending (unconfirmed) entry is a valid target.
        """
        with self._lock:
            previous = self._release_pending()
        if previous is not None:
            self._delete_quietly(previous)

        with self._lock:
            entry = next((e for e in self._entries if e.entry_id == entry_id), None)
            if entry is None:
                return False
            self._entries = [e for e in self._entries if e.entry_id != entry_id]
            if not any(e.person_id == entry.person_id for e in self._entries):
                self._marked.discard(entry.person_id)
            removal = _PendingRemoval(entry=entry)
            removal.timer = self._scheduler.call_later(self._undo_seconds, lambda: self._expire(removal))
            self._pending_removal = removal
            return True

    def undo(self) -> bool:
        with self._lock:
            pending = self._take_pending()
            if pending is None:
                return False
            entry = pending.entry
            self._entries.append(entry)
            self._entries.sort(key=lambda e: e.marked_at, reverse=True)
            self._marked.add(entry.person_id)
            return True

    def dismiss_undo(self) -> bool:
        with self._lock:
            had_pending = self._pending_removal is not None
            record_id = self._release_pending()
        if record_id is not None:
            self._delete_quietly(record_id)
        return had_pending

    def _expire(self, removal: _PendingRemoval) -> None:
        with self._lock:
            if self._pending_removal is not removal:
                return
            record_id = self._release_pending()
        if record_id is not None:
            self._delete_quietly(record_id)

    def _take_pending(self) -> Optional[_PendingRemoval]:
        pending = self._pending_removal
        if pending is not None:
            if pending.timer is not None:
                pending.timer.cancel()
            self._pending_removal = None
        return pending

    def _release_pending(self) -> Optional[str]:
        """Empty the undo slot for good; returns the record id to delete.

        Must be called with the lock held. A pending entry has no record yet,
        so its in-flight insert is flagged and deleted once it lands.
        """
        pending = self._take_pending()
        if pending is None:
            return None
        entry = pending.entry
        if isinstance(entry, PendingEntry):
            if entry.temp_id in self._in_flight:
                self._abandoned[entry.temp_id] = entry.person_id
            return None
        return entry.entry_id

    def _delete_quietly(self, record_id: str) -> None:
        try:
            self._attendance.delete_record(record_id)
        except StoreError:
            logger.warning("delete of record %s failed, refetching", record_id, exc_info=True)
            self.reconcile()

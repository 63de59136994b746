from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping

from .model import ChangeEvent

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[ChangeEvent], None]


@dataclass
class Subscription:
    sub_id: int
    collection: str
    filters: Mapping[str, Any]
    callback: ChangeCallback
    _feed: "ChangeFeed" = field(repr=False)

    def matches(self, event: ChangeEvent) -> bool:
        if event.collection != self.collection:
            return False
        row = event.row
        # DELETE payloads may only carry the primary key; let them through.
        return all(row.get(k, v) == v for k, v in self.filters.items())

    def cancel(self) -> None:
        self._feed.unsubscribe(self.sub_id)


class ChangeFeed:
    """In-process change notification channel.

    Repositories publish after each successful write; subscribers receive the
    events whose row matches their equality filters.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subs: Dict[int, Subscription] = {}
        self._ids = itertools.count(1)

    def subscribe(self, collection: str, *, filters: Mapping[str, Any] | None = None, callback: ChangeCallback) -> Subscription:
        with self._lock:
            sub = Subscription(
                sub_id=next(self._ids),
                collection=collection,
                filters=dict(filters or {}),
                callback=callback,
                _feed=self,
            )
            self._subs[sub.sub_id] = sub
            return sub

    def unsubscribe(self, sub_id: int) -> None:
        with self._lock:
            self._subs.pop(sub_id, None)

    def publish(self, event: ChangeEvent) -> int:
        """Deliver ``event`` to matching subscribers; returns how many got it."""
        with self._lock:
            targets = [s for s in self._subs.values() if s.matches(event)]

        for sub in targets:
            try:
                sub.callback(event)
            except Exception:
                logger.exception("change subscriber %s failed on %s", sub.sub_id, event.event_type.value)
        return len(targets)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subs)

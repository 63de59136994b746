"""Incremental name search over the in-memory roster.

Scores, best first:

* 100 exact (case-insensitive) full-name match
* 90  name starts with the query
* 80  a whitespace-delimited word of the name starts with the query
* 70  name contains the query
* 50  notes contain the query

Ordering: not-yet-marked people first, then score, then historical
attendance count, then name.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import AbstractSet, Iterable, Mapping, Optional, Sequence

from ..common.validators import normalize_name
from ..core.constants import MAX_SEARCH_RESULTS
from .model import Person

SCORE_EXACT = 100
SCORE_PREFIX = 90
SCORE_WORD_PREFIX = 80
SCORE_SUBSTRING = 70
SCORE_NOTES = 50


@dataclass(frozen=True)
class SearchResult:
    person: Person
    score: int
    already_marked: bool

    @property
    def notes_match(self) -> bool:
        return self.score <= SCORE_NOTES


def score_person(person: Person, query: str) -> int:
    name = person.full_name.lower()
    q = query.lower()

    if name == q:
        return SCORE_EXACT
    if name.startswith(q):
        return SCORE_PREFIX
    if any(word.startswith(q) for word in name.split()):
        return SCORE_WORD_PREFIX
    if q in name:
        return SCORE_SUBSTRING
    if person.notes and q in person.notes.lower():
        return SCORE_NOTES
    return 0


class RosterIndex:
    """Read-only snapshot of the roster used for search.

    The snapshot is replaced wholesale by ``rebuild``; it is never patched
    field by field.
    """

    def __init__(self, people: Iterable[Person] = (), attendance_counts: Optional[Mapping[str, int]] = None):
        self._lock = threading.Lock()
        self._people: tuple[Person, ...] = ()
        self._counts: dict[str, int] = {}
        self.rebuild(people, attendance_counts)

    def rebuild(self, people: Iterable[Person], attendance_counts: Optional[Mapping[str, int]] = None) -> None:
        people = tuple(sorted(people, key=lambda p: p.full_name.lower()))
        counts = dict(attendance_counts or {})
        with self._lock:
            self._people = people
            self._counts = counts

    @property
    def people(self) -> Sequence[Person]:
        return self._people

    def attendance_count(self, person_id: str) -> int:
        return self._counts.get(person_id, 0)

    def get(self, person_id: str) -> Optional[Person]:
        return next((p for p in self._people if p.person_id == person_id), None)

    def search(
        self,
        query: str,
        marked_ids: AbstractSet[str] = frozenset(),
        *,
        limit: int = MAX_SEARCH_RESULTS,
    ) -> list[SearchResult]:
        q = query.strip()
        if not q:
            return []

        with self._lock:
            people, counts = self._people, self._counts

        results = []
        for person in people:
            score = score_person(person, q)
            if score > 0:
                results.append(SearchResult(person=person, score=score, already_marked=person.person_id in marked_ids))

        results.sort(
            key=lambda r: (
                r.already_marked,
                -r.score,
                -counts.get(r.person.person_id, 0),
                r.person.full_name.lower(),
            )
        )
        return results[:limit]

    def find_by_name(self, name: str, *, exclude_id: Optional[str] = None) -> Optional[Person]:
        normalized = normalize_name(name)
        for person in self._people:
            if person.person_id != exclude_id and normalize_name(person.full_name) == normalized:
                return person
        return None

    def is_duplicate(self, name: str, *, exclude_id: Optional[str] = None) -> bool:
        return self.find_by_name(name, exclude_id=exclude_id) is not None

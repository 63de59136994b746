from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Person


class PersonRepository(Protocol):
    """Repository interface for the roster.

    Note: services depend on this interface, not on a concrete store.
    """

    def list_people(self) -> Sequence[Person]:
        """All people ordered by full_name."""

        raise NotImplementedError

    def get_by_id(self, person_id: str) -> Optional[Person]:
        raise NotImplementedError

    def create_person(self, *, full_name: str, phone: Optional[str] = None, notes: Optional[str] = None) -> Person:
        raise NotImplementedError

    def create_many(self, full_names: Sequence[str]) -> Sequence[Person]:
        raise NotImplementedError

    def update_person(self, person_id: str, *, full_name: str, phone: Optional[str], notes: Optional[str]) -> bool:
        raise NotImplementedError

    def delete_person(self, person_id: str) -> bool:
        raise NotImplementedError

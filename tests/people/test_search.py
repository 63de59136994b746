from __future__ import annotations

import pytest

from src.meeting_attendance.meeting_attendance.people.model import Person
from src.meeting_attendance.meeting_attendance.people.search import RosterIndex, score_person


def _p(pid, name, notes=None):
    return Person(person_id=pid, full_name=name, notes=notes)


def test_score_tiers():
    person = _p("1", "Anna Maria Lopez", notes="drives the van")

    assert score_person(person, "anna maria lopez") == 100
    assert score_person(person, "ann") == 90
    assert score_person(person, "mar") == 80
    assert score_person(person, "ria") == 70
    assert score_person(person, "van") == 50
    assert score_person(person, "zzz") == 0


def test_blank_query_returns_nothing():
    index = RosterIndex([_p("1", "John")])
    assert index.search("   ") == []


def test_unmarked_first_then_score_then_count_then_name():
    index = RosterIndex(
        [_p("a", "John Smith"), _p("b", "Joanna Lee"), _p("c", "Mary Jones"), _p("d", "Jo")],
        {"a": 5, "b": 9},
    )

    results = index.search("jo", marked_ids={"d"})

    # Exact match "Jo" is already marked so it drops to the end.
    assert [r.person.person_id for r in results] == ["b", "a", "c", "d"]
    assert [r.score for r in results] == [90, 90, 80, 100]


def test_name_breaks_ties():
    index = RosterIndex([_p("1", "jon b"), _p("2", "Jon A")])
    assert [r.person.full_name for r in index.search("jon")] == ["Jon A", "jon b"]


def test_notes_match_flag():
    index = RosterIndex([_p("1", "Sam", notes="Visitor from Ohio")])

    [result] = index.search("ohio")

    assert result.notes_match
    assert result.score == 50


def test_limit():
    index = RosterIndex([_p(str(i), f"Person {i:02d}") for i in range(30)])
    assert len(index.search("person")) == 20
    assert len(index.search("person", limit=5)) == 5


def test_duplicate_detection_is_case_insensitive():
    index = RosterIndex([_p("1", "John Smith")])

    assert index.is_duplicate("  john SMITH ")
    assert not index.is_duplicate("John Smith", exclude_id="1")


def test_rebuild_replaces_snapshot():
    index = RosterIndex([_p("1", "Old Name")], {"1": 3})
    index.rebuild([_p("2", "New Name")])

    assert index.get("1") is None
    assert index.attendance_count("1") == 0
    assert [p.full_name for p in index.people] == ["New Name"]


def test_equal_scores_fall_back_to_count_then_name():
    index = RosterIndex(
        [_p("1", "John Smith"), _p("2", "Johnny Appleseed"), _p("3", "Jon Snow")],
        {"1": 5, "2": 2, "3": 5},
    )

    results = index.search("jo")

    assert [r.person.full_name for r in results] == ["John Smith", "Jon Snow", "Johnny Appleseed"]
    assert index.search("xyz123") == []


@pytest.mark.parametrize("query", ["xyz123", "zz", "  qq  ", "smithx"])
def test_query_without_match_returns_empty(query):
    index = RosterIndex(
        [_p("a", "John Smith"), _p("b", "Joanna Lee", notes="choir")],
        {"a": 3},
    )
    assert index.search(query) == []

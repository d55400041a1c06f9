# tests/test_predicates.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from taskflow.predicates import And, AnyContains, Between, Eq, In, Ne, TextContains, all_of


def test_text_contains_is_case_insensitive_and_unanchored() -> None:
    doc = {"title": "Buy MILK and bread"}

    assert TextContains("title", "milk").matches(doc)
    assert TextContains("title", "y m").matches(doc)
    assert TextContains("title", "BREAD").matches(doc)
    assert not TextContains("title", "butter").matches(doc)


def test_text_contains_treats_metacharacters_literally() -> None:
    assert not TextContains("title", "a.c").matches({"title": "abc"})
    assert TextContains("title", "a.c").matches({"title": "see a.c units"})
    assert TextContains("title", "(draft").matches({"title": "Report (draft)"})
    assert TextContains("title", "[x").matches({"title": "todo [x] done"})
    assert not TextContains("title", ".*").matches({"title": "anything"})


def test_text_contains_ignores_non_text_values() -> None:
    assert not TextContains("description", "x").matches({"description": None})
    assert not TextContains("description", "x").matches({})
    assert not TextContains("title", "1").matches({"title": 123})


def test_any_contains_matches_any_tag() -> None:
    doc = {"tags": ["home", "Groceries", 7]}

    assert AnyContains("tags", "grocer").matches(doc)
    assert AnyContains("tags", "HOME").matches(doc)
    assert not AnyContains("tags", "work").matches(doc)
    assert not AnyContains("tags", "home").matches({"tags": "home"})
    assert not AnyContains("tags", "home").matches({})


def test_between_is_inclusive_and_skips_missing() -> None:
    now = datetime(2026, 3, 1, tzinfo=timezone.utc)
    later = now + timedelta(days=7)
    pred = Between("dueDate", gte=now, lte=later)

    assert pred.matches({"dueDate": now})
    assert pred.matches({"dueDate": later})
    assert not pred.matches({"dueDate": later + timedelta(seconds=1)})
    assert not pred.matches({"dueDate": now - timedelta(seconds=1)})
    assert not pred.matches({"dueDate": None})
    assert not pred.matches({})
    assert not pred.matches({"dueDate": "tomorrow"})


def test_equality_predicates() -> None:
    doc = {"id": "a", "status": "pending"}

    assert Eq("status", "pending").matches(doc)
    assert not Eq("status", "Pending").matches(doc)
    assert Ne("status", "completed").matches(doc)
    assert Ne("priority", "high").matches(doc)
    assert In("id", ("a", "b")).matches(doc)
    assert not In("id", ("c",)).matches(doc)


def test_all_of_skips_none_and_empty_and_matches_everything() -> None:
    pred = all_of(Eq("owner", "u1"), None)

    assert pred == And((Eq("owner", "u1"),))
    assert all_of().matches({"anything": 1})

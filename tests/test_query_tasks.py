# tests/test_query_tasks.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from taskflow.errors import InvalidArgument
from taskflow.predicates import And, Eq, Or
from taskflow.query_tasks import SortSpec, build_task_filter, paginate, plan_query


def _doc(**fields) -> dict:
    base = {
        "id": fields.pop("id", "t1"),
        "owner": "alice",
        "title": "Write report",
        "description": "",
        "status": "pending",
        "priority": "medium",
        "tags": [],
        "createdAt": datetime(2026, 1, 1, tzinfo=timezone.utc),
    }
    base.update(fields)
    return base


# ---- filter builder ----

def test_filter_is_always_owner_scoped() -> None:
    pred = build_task_filter("alice")

    assert pred == And((Eq("owner", "alice"),))
    assert pred.matches(_doc())
    assert not pred.matches(_doc(owner="bob"))


def test_filter_all_sentinel_and_empty_values_add_no_constraint() -> None:
    assert build_task_filter("alice", status="all", priority="all") == And((Eq("owner", "alice"),))
    assert build_task_filter("alice", status="", priority=None) == And((Eq("owner", "alice"),))


def test_filter_status_and_priority_match_exactly() -> None:
    pred = build_task_filter("alice", status="completed", priority="high")

    assert pred.matches(_doc(status="completed", priority="high"))
    assert not pred.matches(_doc(status="Completed", priority="high"))
    assert not pred.matches(_doc(status="completed", priority="low"))


def test_filter_passes_unknown_status_through() -> None:
    pred = build_task_filter("alice", status="archived")

    assert Eq("status", "archived") in pred.clauses
    assert not pred.matches(_doc())


@pytest.mark.parametrize("search", ["", "   ", "\t\n"])
def test_blank_search_is_ignored(search: str) -> None:
    assert build_task_filter("alice", search=search) == And((Eq("owner", "alice"),))


def test_search_is_an_or_group_under_the_owner_clause() -> None:
    pred = build_task_filter("alice", status="pending", search="  report ")
    search_group = pred.clauses[-1]

    assert pred.clauses[0] == Eq("owner", "alice")
    assert isinstance(search_group, Or)
    assert len(search_group.clauses) == 3
    assert pred.matches(_doc(title="Quarterly REPORT"))
    assert pred.matches(_doc(title="x", description="see the report"))
    assert pred.matches(_doc(title="x", tags=["reports"]))
    assert not pred.matches(_doc(title="x"))
    assert not pred.matches(_doc(owner="bob", title="report"))


# ---- sort / page planner ----

def test_plan_defaults() -> None:
    plan = plan_query()

    assert plan.sort == SortSpec(field="createdAt", descending=True)
    assert (plan.page, plan.limit, plan.skip, plan.take) == (1, 10, 0, 10)


def test_plan_only_literal_asc_flips_order() -> None:
    assert plan_query(sort_order="asc").sort.descending is False
    assert plan_query(sort_order="desc").sort.descending is True
    assert plan_query(sort_order="ASC").sort.descending is True
    assert plan_query(sort_order="up").sort.descending is True


def test_plan_window_arithmetic_and_coercion() -> None:
    plan = plan_query(page="3", limit="20")

    assert (plan.page, plan.limit) == (3, 20)
    assert plan.skip == 40
    assert plan.take == 20


def test_plan_does_not_range_check_page() -> None:
    assert plan_query(page=0, limit=10).skip == -10


def test_plan_rejects_non_integer_page() -> None:
    with pytest.raises(InvalidArgument):
        plan_query(page="two")


@pytest.mark.parametrize("field", ["createdAt", "updatedAt", "dueDate", "title", "priority", "status"])
def test_plan_accepts_sortable_fields(field: str) -> None:
    assert plan_query(sort_by=field).sort.field == field


@pytest.mark.parametrize("field", ["owner", "password", "$where", "created_at"])
def test_plan_rejects_unknown_sort_fields(field: str) -> None:
    with pytest.raises(InvalidArgument):
        plan_query(sort_by=field)


# ---- pagination ----

def test_paginate_empty_result() -> None:
    for page in (1, 3):
        p = paginate(page, 10, 0)
        assert p.total_pages == 0
        assert p.total_tasks == 0
        assert p.has_next is False
        assert p.has_prev is False
        assert p.current_page == page


def test_paginate_flags_follow_page_position() -> None:
    first = paginate(1, 10, 25)
    middle = paginate(2, 10, 25)
    last = paginate(3, 10, 25)

    assert first.total_pages == 3
    assert (first.has_next, first.has_prev) == (True, False)
    assert (middle.has_next, middle.has_prev) == (True, True)
    assert (last.has_next, last.has_prev) == (False, True)


def test_paginate_exact_multiple() -> None:
    p = paginate(1, 10, 10)

    assert p.total_pages == 1
    assert p.has_next is False


# ---- sort spec ----

def test_sort_by_priority_uses_rank_not_alphabet() -> None:
    docs = [
        _doc(id="a", priority="medium"),
        _doc(id="b", priority="high"),
        _doc(id="c", priority="low"),
    ]

    assert [d["id"] for d in SortSpec("priority", descending=True).apply(docs)] == ["b", "a", "c"]
    assert [d["id"] for d in SortSpec("priority", descending=False).apply(docs)] == ["c", "a", "b"]


def test_sort_puts_values_outside_enum_after_known_ones() -> None:
    docs = [
        _doc(id="urgent", priority="urgent"),
        _doc(id="high", priority="high"),
        _doc(id="low", priority="low"),
        _doc(id="none", priority=None),
    ]

    assert [d["id"] for d in SortSpec("priority", descending=True).apply(docs)] == ["high", "low", "urgent", "none"]
    assert [d["id"] for d in SortSpec("priority", descending=False).apply(docs)] == ["low", "high", "urgent", "none"]


def test_sort_puts_missing_values_last_in_both_directions() -> None:
    base = datetime(2026, 2, 1, tzinfo=timezone.utc)
    docs = [
        _doc(id="none", dueDate=None),
        _doc(id="soon", dueDate=base),
        _doc(id="later", dueDate=base + timedelta(days=3)),
    ]

    assert [d["id"] for d in SortSpec("dueDate", descending=False).apply(docs)] == ["soon", "later", "none"]
    assert [d["id"] for d in SortSpec("dueDate", descending=True).apply(docs)] == ["later", "soon", "none"]


def test_sort_ties_break_on_created_at() -> None:
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    docs = [
        _doc(id="old", title="Same", createdAt=base),
        _doc(id="new", title="Same", createdAt=base + timedelta(minutes=1)),
    ]

    assert [d["id"] for d in SortSpec("title", descending=True).apply(docs)] == ["new", "old"]
    assert [d["id"] for d in SortSpec("title", descending=False).apply(docs)] == ["old", "new"]

# -*- coding: utf-8 -*-

"""
Task Management - Query Building.

Turns list-request parameters into:
- an owner-scoped predicate (status / priority / free-text search)
- a QueryPlan (sort order plus skip/take window)
- pagination metadata once the total is known
"""

import math
from dataclasses import dataclass
from typing import Any, List, Optional

from taskflow.config import DEFAULT_PAGE_SIZE
from taskflow.errors import InvalidArgument
from taskflow.models_tasks import Pagination
from taskflow.predicates import And, AnyContains, Eq, Or, TextContains, all_of

# Filter value meaning "no constraint" for status / priority.
ALL = "all"

SORTABLE_FIELDS = ("createdAt", "updatedAt", "dueDate", "title", "priority", "status")
DEFAULT_SORT_FIELD = "createdAt"
ASCENDING = "asc"

# Enum-valued fields sort by rank, not alphabetically. Unknown values go last.
FIELD_RANKS = {
    "priority": {"low": 0, "medium": 1, "high": 2},
    "status": {"pending": 0, "in-progress": 1, "completed": 2},
}


def search_clause(term: str) -> Or:
    """Title, description or any tag contains term."""
    return Or((
        TextContains("title", term),
        TextContains("description", term),
        AnyContains("tags", term),
    ))


def build_task_filter(
    owner: str,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    search: Optional[str] = None,
) -> And:
    """Build the predicate for a task listing. Always scoped to owner."""
    status_clause = Eq("status", status) if status and status != ALL else None
    priority_clause = Eq("priority", priority) if priority and priority != ALL else None

    term = (search or "").strip()
    text_clause = search_clause(term) if term else None

    return all_of(Eq("owner", owner), status_clause, priority_clause, text_clause)


@dataclass(frozen=True)
class SortSpec:
    """
    Sort on one field, with createdAt then id as tie-breakers.

    Ranked fields put values outside their enum after the known ones, and
    documents missing the field (or holding None) come last, in both
    directions.
    """

    field: str = DEFAULT_SORT_FIELD
    descending: bool = True

    def _value_key(self, value: Any) -> Any:
        ranks = FIELD_RANKS.get(self.field)
        if ranks is None:
            return value
        return ranks[value]

    def _known(self, value: Any) -> bool:
        ranks = FIELD_RANKS.get(self.field)
        return value is not None and (ranks is None or (isinstance(value, str) and value in ranks))

    def apply(self, docs: List[dict]) -> List[dict]:
        known = [d for d in docs if self._known(d.get(self.field))]
        unknown = [d for d in docs if d.get(self.field) is not None and not self._known(d[self.field])]
        missing = [d for d in docs if d.get(self.field) is None]

        known.sort(
            key=lambda d: (self._value_key(d[self.field]), d["createdAt"], d["id"]),
            reverse=self.descending,
        )
        unknown.sort(key=lambda d: (str(d[self.field]), d["createdAt"], d["id"]), reverse=self.descending)
        missing.sort(key=lambda d: (d["createdAt"], d["id"]), reverse=self.descending)
        return known + unknown + missing


@dataclass(frozen=True)
class QueryPlan:
    sort: SortSpec
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def take(self) -> int:
        return self.limit


def _as_int(name: str, value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"{name} must be an integer")


def plan_query(
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    page: Any = None,
    limit: Any = None,
    default_limit: int = DEFAULT_PAGE_SIZE,
) -> QueryPlan:
    """
    Resolve sort and page window.

    page/limit are not range-checked here: a page below 1 gives a negative
    skip. Callers validate ranges before planning.
    """
    field = sort_by or DEFAULT_SORT_FIELD
    if field not in SORTABLE_FIELDS:
        raise InvalidArgument(
            f"Cannot sort by '{field}'. Sortable fields: {', '.join(SORTABLE_FIELDS)}"
        )

    return QueryPlan(
        sort=SortSpec(field=field, descending=sort_order != ASCENDING),
        page=_as_int("page", page, 1),
        limit=_as_int("limit", limit, default_limit),
    )


def paginate(page: int, limit: int, total: int) -> Pagination:
    """Pagination metadata for one page of total matches."""
    if total <= 0:
        return Pagination(current_page=page, total_pages=0, total_tasks=0, has_next=False, has_prev=False)

    total_pages = math.ceil(total / limit)
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_tasks=total,
        has_next=page < total_pages,
        has_prev=page > 1,
    )

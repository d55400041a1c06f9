# -*- coding: utf-8 -*-

"""
Task Management - Service.

Owner-scoped task operations on top of a TaskStore:
listing (filter + sort + page + count), single-task CRUD, bulk update and
statistics.

Every operation checks the requester identity before building a predicate,
and every predicate is conjoined with owner == requester. Store exceptions
are converted to StoreFailure at the call site; nothing is retried.
"""

from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple

from loguru import logger

from taskflow.config import DEFAULT_PAGE_SIZE, UPCOMING_DAYS
from taskflow.errors import InvalidArgument, NotFound, StoreFailure, TaskflowError, Unauthenticated
from taskflow.models_tasks import Pagination, Task, TaskCreate, TaskPatch, TaskStats, TaskStatus
from taskflow.predicates import Between, Eq, In, Ne, Predicate, all_of
from taskflow.query_tasks import build_task_filter, paginate, plan_query
from taskflow.store_tasks import TaskStore


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def require_title(title: Optional[str]) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise InvalidArgument("Title is required")
    return cleaned


def normalize_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Clean user-supplied task fields (wire names) before they are written.

    Titles and descriptions are trimmed, enums become their values, due
    dates become UTC. A blank title raises InvalidArgument.
    """
    clean = dict(fields)
    if "title" in clean:
        clean["title"] = require_title(clean["title"])
    if "description" in clean:
        clean["description"] = (clean["description"] or "").strip()
    if "tags" in clean and clean["tags"] is None:
        clean["tags"] = []
    for name in ("status", "priority"):
        if name in clean:
            if clean[name] is None:
                raise InvalidArgument(f"{name} cannot be null")
            clean[name] = getattr(clean[name], "value", clean[name])
    if isinstance(clean.get("dueDate"), datetime):
        clean["dueDate"] = as_utc(clean["dueDate"])
    return clean


class TaskService:
    """Task operations scoped to the requesting user."""

    def __init__(
        self,
        store: TaskStore,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        upcoming_days: int = UPCOMING_DAYS,
    ):
        self.store = store
        self.default_page_size = default_page_size
        self.upcoming_days = upcoming_days

    # ---- helpers ----

    @staticmethod
    def _require_owner(owner: Optional[str]) -> str:
        if not owner or not isinstance(owner, str):
            raise Unauthenticated()
        return owner

    @staticmethod
    def _owned(owner: str, task_id: str) -> Predicate:
        return all_of(Eq("id", task_id), Eq("owner", owner))

    @contextmanager
    def _store_call(self, action: str) -> Iterator[None]:
        try:
            yield
        except TaskflowError:
            raise
        except Exception as e:
            logger.exception(f"Store failure while {action}")
            raise StoreFailure(f"Server error while {action}") from e

    # ---- listing ----

    def list_tasks(
        self,
        owner: Optional[str],
        status: Optional[str] = None,
        priority: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
    ) -> Tuple[List[Task], Pagination]:
        """
        One page of the owner's tasks plus pagination metadata.

        The page and the total come from two separate store reads; under
        concurrent writes they may disagree.
        """
        owner = self._require_owner(owner)
        predicate = build_task_filter(owner, status=status, priority=priority, search=search)
        plan = plan_query(sort_by, sort_order, page, limit, default_limit=self.default_page_size)

        with self._store_call("fetching tasks"):
            docs = self.store.find(predicate, sort=plan.sort, skip=plan.skip, take=plan.take)
            total = self.store.count(predicate)

        tasks = [Task.model_validate(doc) for doc in docs]
        return tasks, paginate(plan.page, plan.limit, total)

    # ---- single task ----

    def get_task(self, owner: Optional[str], task_id: str) -> Task:
        owner = self._require_owner(owner)
        with self._store_call("fetching task"):
            doc = self.store.find_one(self._owned(owner, task_id))
        if doc is None:
            raise NotFound()
        return Task.model_validate(doc)

    def create_task(self, owner: Optional[str], data: TaskCreate) -> Task:
        owner = self._require_owner(owner)
        fields = normalize_fields(data.model_dump(by_alias=True))
        fields["owner"] = owner

        with self._store_call("creating task"):
            doc = self.store.insert_one(fields)
        logger.info(f"Task created: {doc['id']} - {doc['title']} (owner={owner})")
        return Task.model_validate(doc)

    def update_task(self, owner: Optional[str], task_id: str, data: TaskPatch) -> Task:
        """Replace the fields present in data. Absent fields keep their values."""
        owner = self._require_owner(owner)
        fields = normalize_fields(data.model_dump(by_alias=True, exclude_unset=True))

        with self._store_call("updating task"):
            doc = self.store.update_one(self._owned(owner, task_id), fields)
        if doc is None:
            raise NotFound()
        logger.info(f"Task updated: {task_id} fields={sorted(fields)}")
        return Task.model_validate(doc)

    def delete_task(self, owner: Optional[str], task_id: str) -> None:
        owner = self._require_owner(owner)
        with self._store_call("deleting task"):
            doc = self.store.delete_one(self._owned(owner, task_id))
        if doc is None:
            raise NotFound()
        logger.info(f"Task deleted: {task_id}")

    # ---- bulk ----

    def bulk_update(self, owner: Optional[str], task_ids: Any, updates: Dict[str, Any]) -> int:
        """
        Apply updates to every owned task in task_ids.

        Ids the owner does not own are skipped without error. The id list is
        checked before the update values are cleaned with normalize_fields;
        callers restrict which fields the map may hold.

        Returns:
            Number of tasks actually modified
        """
        owner = self._require_owner(owner)
        if not isinstance(task_ids, (list, tuple)) or not task_ids:
            raise InvalidArgument("Task IDs are required")
        updates = normalize_fields(updates)

        predicate = all_of(In("id", tuple(task_ids)), Eq("owner", owner))
        with self._store_call("bulk updating tasks"):
            modified = self.store.update_many(predicate, updates)
        logger.info(f"Bulk update: {modified}/{len(task_ids)} task(s) modified (owner={owner})")
        return modified

    # ---- statistics ----

    def stats(self, owner: Optional[str], now: Optional[datetime] = None) -> TaskStats:
        """
        Per-status counts plus tasks due within the upcoming window.

        upcoming counts unfinished tasks with now <= dueDate <= now + window,
        both bounds inclusive.
        """
        owner = self._require_owner(owner)
        now = as_utc(now) if now is not None else datetime.now(timezone.utc)
        window_end = now + timedelta(days=self.upcoming_days)

        upcoming_filter = all_of(
            Eq("owner", owner),
            Ne("status", TaskStatus.completed.value),
            Between("dueDate", gte=now, lte=window_end),
        )

        with self._store_call("fetching statistics"):
            groups = self.store.aggregate_group_count(Eq("owner", owner), "status")
            upcoming = self.store.count(upcoming_filter)

        return TaskStats(
            total=sum(groups.values()),
            pending=groups.get(TaskStatus.pending.value, 0),
            in_progress=groups.get(TaskStatus.in_progress.value, 0),
            completed=groups.get(TaskStatus.completed.value, 0),
            upcoming=upcoming,
        )

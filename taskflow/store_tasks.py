# -*- coding: utf-8 -*-

"""
Task Management - Document Store.

In-memory task documents with optional JSON file persistence.

Exposes the document-store primitives the task service is written against:
find / count / update_many / aggregate_group_count, plus the single-document
operations used by CRUD. Every primitive runs under one lock, so each call
is atomic on its own; nothing spans calls. A mutation whose save fails is
reverted in memory before the error propagates.
"""

import copy
import json
import threading
import uuid
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger

from taskflow.predicates import Predicate
from taskflow.query_tasks import SortSpec

DATETIME_FIELDS = ("dueDate", "createdAt", "updatedAt")

# Assigned by the store on insert and never rewritten.
IMMUTABLE_FIELDS = ("id", "owner", "createdAt")

_MISSING = object()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TaskStore:
    """Task document storage with predicate queries and JSON persistence."""

    def __init__(self, storage_path: Optional[str] = None):
        """
        Initialize the store.

        Args:
            storage_path: JSON file to load from and persist to.
                None keeps everything in memory.
        """
        self._docs: Dict[str, dict] = {}
        self._lock = threading.RLock()
        self._storage_path = Path(storage_path) if storage_path else None
        self._load()

    # ---- persistence ----

    @staticmethod
    def _encode(doc: dict) -> dict:
        out = dict(doc)
        for name in DATETIME_FIELDS:
            if isinstance(out.get(name), datetime):
                out[name] = out[name].isoformat()
        return out

    @staticmethod
    def _decode(raw: dict) -> dict:
        doc = dict(raw)
        for name in DATETIME_FIELDS:
            if isinstance(doc.get(name), str):
                doc[name] = datetime.fromisoformat(doc[name])
        return doc

    def _load(self) -> None:
        """Load tasks from the JSON file if it exists."""
        if not self._storage_path or not self._storage_path.exists():
            return
        try:
            data = json.loads(self._storage_path.read_text(encoding="utf-8"))
            for raw in data.get("tasks", []):
                doc = self._decode(raw)
                self._docs[doc["id"]] = doc
        except Exception as e:
            logger.error(f"Failed to load tasks from {self._storage_path}: {e}")
            raise
        logger.info(f"Loaded {len(self._docs)} task(s) from {self._storage_path}")

    def _save(self) -> None:
        """Persist all tasks. Writes a temp file first so a failed write keeps the old file."""
        if not self._storage_path:
            return
        data = {"tasks": [self._encode(doc) for doc in self._docs.values()]}
        tmp_path = self._storage_path.with_suffix(self._storage_path.suffix + ".tmp")
        try:
            self._storage_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(self._storage_path)
        except Exception as e:
            logger.error(f"Failed to save tasks to {self._storage_path}: {e}")
            raise

    def _persist(self, undo: Callable[[], None]) -> None:
        """Save, or revert the in-memory change with undo when the save fails."""
        try:
            self._save()
        except Exception:
            undo()
            raise

    # ---- helpers ----

    def _matching(self, predicate: Predicate) -> List[dict]:
        return [doc for doc in self._docs.values() if predicate.matches(doc)]

    @staticmethod
    def _check_updates(updates: Dict[str, Any]) -> None:
        for name in updates:
            if name in IMMUTABLE_FIELDS:
                raise ValueError(f"Field '{name}' is immutable")

    @staticmethod
    def _restore(snapshots: List[Tuple[dict, dict]]) -> None:
        for doc, before in snapshots:
            doc.clear()
            doc.update(before)

    @staticmethod
    def _apply(doc: dict, updates: Dict[str, Any]) -> bool:
        """Set fields on doc. Returns True when any value actually changed."""
        changed = False
        for name, value in updates.items():
            if doc.get(name, _MISSING) != value:
                doc[name] = copy.deepcopy(value)
                changed = True
        if changed:
            doc["updatedAt"] = utc_now()
        return changed

    # ---- primitives ----

    def insert_one(self, doc: Dict[str, Any]) -> dict:
        """Insert a new document; id and timestamps are assigned here."""
        now = utc_now()
        stored = copy.deepcopy(doc)
        stored["id"] = uuid.uuid4().hex
        stored["createdAt"] = now
        stored["updatedAt"] = now
        with self._lock:
            self._docs[stored["id"]] = stored
            self._persist(lambda: self._docs.pop(stored["id"], None))
            return copy.deepcopy(stored)

    def find(
        self,
        predicate: Predicate,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        take: Optional[int] = None,
    ) -> List[dict]:
        """Matching documents, sorted, windowed. Negative skip is treated as 0."""
        with self._lock:
            docs = self._matching(predicate)
            if sort is not None:
                docs = sort.apply(docs)
            start = max(0, skip)
            end = None if take is None else start + max(0, take)
            return copy.deepcopy(docs[start:end])

    def find_one(self, predicate: Predicate) -> Optional[dict]:
        with self._lock:
            for doc in self._docs.values():
                if predicate.matches(doc):
                    return copy.deepcopy(doc)
        return None

    def count(self, predicate: Predicate) -> int:
        with self._lock:
            return len(self._matching(predicate))

    def update_one(self, predicate: Predicate, updates: Dict[str, Any]) -> Optional[dict]:
        """Apply updates to the first match and return it, or None if nothing matched."""
        self._check_updates(updates)
        with self._lock:
            for doc in self._docs.values():
                if predicate.matches(doc):
                    before = copy.deepcopy(doc)
                    if self._apply(doc, updates):
                        self._persist(lambda: self._restore([(doc, before)]))
                    return copy.deepcopy(doc)
        return None

    def update_many(self, predicate: Predicate, updates: Dict[str, Any]) -> int:
        """
        Apply updates to every match.

        Returns the modified count: matches whose values already equal
        updates are not counted and keep their updatedAt.
        """
        self._check_updates(updates)
        with self._lock:
            snapshots = [(doc, copy.deepcopy(doc)) for doc in self._matching(predicate)]
            try:
                modified = sum(1 for doc, _ in snapshots if self._apply(doc, updates))
                if modified:
                    self._save()
            except Exception:
                self._restore(snapshots)
                raise
        return modified

    def delete_one(self, predicate: Predicate) -> Optional[dict]:
        """Remove the first match and return it."""
        with self._lock:
            for task_id, doc in self._docs.items():
                if predicate.matches(doc):
                    del self._docs[task_id]
                    self._persist(lambda: self._docs.__setitem__(task_id, doc))
                    return doc
        return None

    def aggregate_group_count(self, predicate: Predicate, group_field: str) -> Dict[Any, int]:
        """Count matching documents per value of group_field (missing -> None)."""
        with self._lock:
            return dict(Counter(doc.get(group_field) for doc in self._matching(predicate)))

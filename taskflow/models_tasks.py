# -*- coding: utf-8 -*-

"""
Task Management - Pydantic Models.

Data models for task CRUD, bulk update and statistics. Field names are
snake_case in Python and camelCase on the wire (dueDate, createdAt, ...).
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TaskStatus(str, Enum):
    """Task status options."""
    pending = "pending"
    in_progress = "in-progress"
    completed = "completed"


class TaskPriority(str, Enum):
    """Task priority levels."""
    low = "low"
    medium = "medium"
    high = "high"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests ---

class TaskCreate(CamelModel):
    """Request body for creating a task."""
    title: str = Field(..., max_length=200, description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    status: TaskStatus = Field(TaskStatus.pending, description="Task status")
    priority: TaskPriority = Field(TaskPriority.medium, description="Task priority")
    due_date: Optional[datetime] = Field(None, description="Due date")
    tags: List[str] = Field(default_factory=list, description="Task labels")


class TaskPatch(CamelModel):
    """Request body for partial update (PUT/PATCH and bulk updates)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None


class TaskBulkUpdate(CamelModel):
    """
    Request body for bulk update.

    task_ids is untyped. A missing or malformed list is rejected
    by the service with a 400, not by request validation.
    """
    task_ids: Any = None
    updates: TaskPatch = Field(default_factory=TaskPatch)


# --- Responses ---

class Task(CamelModel):
    """
    Complete task representation.

    Built from stored documents, so status and priority also accept values
    outside their enums (legacy or externally written documents).
    """
    id: str
    title: str
    description: str = ""
    status: Union[TaskStatus, str] = TaskStatus.pending
    priority: Union[TaskPriority, str] = TaskPriority.medium
    due_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    owner: str
    created_at: datetime
    updated_at: datetime


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_tasks: int
    has_next: bool
    has_prev: bool


class TaskStats(CamelModel):
    """Per-status counts for one owner. Statuses outside the enum only count towards total."""
    total: int = 0
    pending: int = 0
    in_progress: int = Field(0, alias="in-progress")
    completed: int = 0
    upcoming: int = 0


class TaskListResponse(CamelModel):
    """Paginated task list response."""
    success: bool = True
    tasks: List[Task]
    pagination: Pagination


class TaskResponse(CamelModel):
    success: bool = True
    task: Task


class TaskMutationResponse(CamelModel):
    success: bool = True
    message: str
    task: Task


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class StatsResponse(CamelModel):
    success: bool = True
    stats: TaskStats


class BulkUpdateResponse(CamelModel):
    success: bool = True
    message: str
    modified_count: int
